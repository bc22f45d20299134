"""Quire CLI main entry point."""

import json
import logging
import sys
from pathlib import Path

import click
import structlog

from quire.client import DEFAULT_SERVER_URL, ClientError, ContentClient
from quire.config import load_settings
from quire.domain.tag import join_tags
from quire.infrastructure.database import Database
from quire.infrastructure.schema import get_content_stats
from quire.utils.time_service import TimeService

# Configure logging for CLI
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    cache_logger_on_first_use=False,
)

logger = structlog.get_logger()

time_service = TimeService()


def _summary(text: str, width: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


def _unwrap(envelope: dict):
    """Return the data of a success envelope, or print the error and exit."""
    if envelope.get("success"):
        return envelope.get("data")
    error = envelope.get("error") or {}
    click.echo(
        f"Error ({error.get('code', '?')}): {error.get('message', 'unknown error')}",
        err=True,
    )
    sys.exit(1)


def _call(ctx: click.Context, operation: str, *args, **kwargs):
    client: ContentClient = ctx.obj["client"]
    try:
        envelope = getattr(client, operation)(*args, **kwargs)
    except ClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return _unwrap(envelope)


def _echo_item(item: dict, full: bool = False) -> None:
    click.echo(f"ID: {item['id']}")
    click.echo(f"Title: {item['title']}")
    if full:
        click.echo(f"Type: {item['content_type']}")
        click.echo(f"Content: {item['content']}")
    else:
        click.echo(f"Summary: {_summary(item['content'], 100)}")
    if item.get("tags"):
        click.echo(f"Tags: {item['tags']}")
    if full and item.get("metadata"):
        click.echo(f"Metadata: {json.dumps(item['metadata'], ensure_ascii=False)}")
    click.echo(
        f"Created: {time_service.format_datetime(item['created_at'])} "
        f"({time_service.format_age(item['created_at'])})"
    )
    if full:
        click.echo(f"Updated: {time_service.format_datetime(item['updated_at'])}")


def _echo_page(page: dict) -> None:
    click.echo(
        f"Page {page['page']} of {page['total_pages']} "
        f"({page['total_count']} items)\n"
    )
    for item in page["items"]:
        _echo_item(item)
        click.echo()


def _parse_metadata(raw: str | None) -> dict | None:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--metadata") from e
    if not isinstance(value, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--metadata")
    return value


@click.group()
@click.option(
    "--server",
    "-s",
    envvar="QUIRE_URL",
    default=DEFAULT_SERVER_URL,
    show_default=True,
    help="Server URL",
)
@click.option("--rest", is_flag=True, help="Use the REST API instead of MCP")
@click.option("--verbose", "-v", is_flag=True, help="Log every request")
@click.pass_context
def cli(ctx, server: str, rest: bool, verbose: bool):
    """Quire - local content management over MCP and REST.

    Client for a running Quire server.
    """
    ctx.ensure_object(dict)
    if verbose:
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG)
        )
    if "client" not in ctx.obj:
        client = ContentClient(server, use_rest=rest)
        ctx.obj["client"] = client
        ctx.call_on_close(client.close)


@cli.command()
@click.argument("title")
@click.argument("content")
@click.argument("tags", nargs=-1)
@click.option("--type", "content_type", default=None, help="Content type (text, markdown, ...)")
@click.option("--metadata", default=None, help="Metadata as a JSON object")
@click.pass_context
def create(ctx, title: str, content: str, tags: tuple[str, ...], content_type, metadata):
    """Create new content. Extra arguments become tags."""
    item = _call(
        ctx,
        "create",
        title,
        content,
        content_type=content_type,
        tags=join_tags(tags) if tags else None,
        metadata=_parse_metadata(metadata),
    )
    click.echo("✓ Content created")
    click.echo(f"ID: {item['id']}")
    click.echo(f"Title: {item['title']}")
    click.echo(f"Created: {time_service.format_datetime(item['created_at'])}")


@cli.command()
@click.argument("content_id", type=int)
@click.pass_context
def get(ctx, content_id: int):
    """Show one item."""
    _echo_item(_call(ctx, "get", content_id), full=True)


@cli.command()
@click.argument("content_id", type=int)
@click.option("--title", default=None)
@click.option("--content", default=None)
@click.option("--type", "content_type", default=None)
@click.option("--tags", default=None, help="Comma-separated tags")
@click.option("--metadata", default=None, help="Metadata as a JSON object")
@click.pass_context
def update(ctx, content_id: int, title, content, content_type, tags, metadata):
    """Update content. Fields not given keep their current value."""
    current = _call(ctx, "get", content_id)
    item = _call(
        ctx,
        "update",
        content_id,
        title=title if title is not None else current["title"],
        content=content if content is not None else current["content"],
        content_type=content_type or current["content_type"],
        tags=tags if tags is not None else current["tags"],
        metadata=_parse_metadata(metadata) if metadata is not None else current["metadata"],
    )
    click.echo(f"✓ Content {item['id']} updated")


@cli.command()
@click.argument("content_id", type=int)
@click.pass_context
def delete(ctx, content_id: int):
    """Delete content."""
    _call(ctx, "delete", content_id)
    click.echo(f"✓ Content {content_id} deleted")


@cli.command()
@click.argument("query")
@click.option("--page", default=1, show_default=True)
@click.option("--page-size", default=20, show_default=True)
@click.pass_context
def search(ctx, query: str, page: int, page_size: int):
    """Full-text search."""
    result = _call(ctx, "search", query, page=page, page_size=page_size)
    click.echo(f"Found {result['total_count']} items:\n")
    for item in result["items"]:
        _echo_item(item)
        click.echo()


@cli.command(name="list")
@click.argument("page", type=int, default=1)
@click.argument("page_size", type=int, default=20)
@click.option("--tag", default=None, help="Only items carrying this tag")
@click.pass_context
def list_content(ctx, page: int, page_size: int, tag: str | None):
    """List content, newest first."""
    if tag:
        _echo_page(_call(ctx, "by_tag", tag, page=page, page_size=page_size))
    else:
        _echo_page(_call(ctx, "list_content", page=page, page_size=page_size))


@cli.command()
@click.pass_context
def tags(ctx):
    """List every tag."""
    all_tags = _call(ctx, "tags")
    click.echo(f"Available tags ({len(all_tags)}):")
    for tag in all_tags:
        click.echo(f"  {tag}")


@cli.command()
@click.pass_context
def stats(ctx):
    """Show content statistics."""
    data = _call(ctx, "stats")
    click.echo("Content Statistics:")
    click.echo(f"  Total Items: {data['total_content']}")
    click.echo(f"  Total Tags: {data['total_tags']}")


@cli.command()
@click.pass_context
def health(ctx):
    """Check that the server is up."""
    data = _call(ctx, "health")
    click.echo(f"{data['server']}: {data['status']} (database {data['database']})")
    if data["status"] != "healthy":
        sys.exit(1)


@cli.command(name="export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
@click.pass_context
def export_content(ctx, output: str | None):
    """Export all content as JSON."""
    data = _call(ctx, "export")
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"✓ Exported {len(data['content'])} items to {output}")
    else:
        click.echo(text)


@cli.command(name="import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_content(ctx, source: str):
    """Import content from an export file."""
    try:
        data = json.loads(Path(source).read_text(encoding="utf-8"))
    except ValueError as e:
        click.echo(f"Error: {source} is not valid JSON: {e}", err=True)
        sys.exit(1)

    result = _call(ctx, "import_", data)
    click.echo(f"✓ Imported {result['created_count']} of {result['total_count']} items")
    for error in result.get("errors", []):
        click.echo(f"  {error}", err=True)


@cli.command(name="init-db")
@click.option("--database", "database_path", default=None, help="SQLite file path")
@click.option("--config", "config_file", default=None, help="JSON config file")
def init_db(database_path: str | None, config_file: str | None):
    """Create the database schema locally, without a server."""
    overrides = {"database_path": database_path} if database_path else {}
    settings = load_settings(config_file, **overrides)

    database = Database(settings)
    try:
        database.initialize()
        with database.acquire() as conn:
            counts = get_content_stats(conn)
    finally:
        database.close()

    click.echo(f"✓ Database ready at {settings.database_path}")
    click.echo(f"  {counts['content_count']} items, {counts['indexed_count']} indexed")


if __name__ == "__main__":
    cli()
