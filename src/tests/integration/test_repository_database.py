"""Integration tests for ContentRepository against a real SQLite file."""

from quire.domain import ContentItem, ContentRepository
from quire.infrastructure.database import Database
from quire.infrastructure.schema import get_content_stats


def _item(title="Title", content="Body", tags="", **kwargs) -> ContentItem:
    return ContentItem(title=title, content=content, tags=tags, **kwargs)


class TestRepositoryCrud:
    """Basic create/read/update/delete against the store."""

    def test_create_assigns_id_and_timestamps(self, test_repository):
        item = _item(metadata={"k": "v"})
        content_id = test_repository.create(item)

        assert content_id is not None
        assert item.id == content_id
        stored = test_repository.get(content_id)
        assert stored.title == "Title"
        assert stored.metadata == {"k": "v"}
        assert stored.created_at == stored.updated_at
        assert stored.created_at > 0

    def test_ids_increase(self, test_repository):
        first = test_repository.create(_item())
        second = test_repository.create(_item())

        assert second > first

    def test_get_missing_returns_none(self, test_repository):
        assert test_repository.get(999999) is None

    def test_update_keeps_created_at(self, test_repository):
        content_id = test_repository.create(_item())
        original = test_repository.get(content_id)

        changed = _item(title="New", content="Changed", content_type="markdown")
        changed.id = content_id
        assert test_repository.update(changed) is True

        stored = test_repository.get(content_id)
        assert stored.title == "New"
        assert stored.content_type == "markdown"
        assert stored.created_at == original.created_at
        assert stored.updated_at >= stored.created_at

    def test_update_missing_returns_false(self, test_repository):
        ghost = _item()
        ghost.id = 424242
        assert test_repository.update(ghost) is False

    def test_update_without_id_returns_false(self, test_repository):
        assert test_repository.update(_item()) is False

    def test_delete(self, test_repository):
        content_id = test_repository.create(_item())

        assert test_repository.delete(content_id) is True
        assert test_repository.get(content_id) is None
        assert test_repository.delete(content_id) is False

    def test_ids_beyond_64_bits_are_misses(self, test_repository):
        test_repository.create(_item())

        assert test_repository.get(2**64) is None
        assert test_repository.delete(2**64) is False
        assert test_repository.update(_item(id=2**64)) is False
        assert test_repository.count() == 1


class TestStoreFailures:
    """Driver errors become None, False, empty lists and zero counts."""

    def test_failed_create_leaves_no_row(self, test_repository, test_database):
        with test_database.transaction() as conn:
            conn.execute("DROP TABLE content_fts")

        assert test_repository.create(_item()) is None
        assert test_repository.count() == 0

    def test_failed_writes_and_searches(self, test_repository, test_database):
        content_id = test_repository.create(_item(title="Kept"))
        with test_database.transaction() as conn:
            conn.execute("DROP TABLE content_fts")

        assert test_repository.update(_item(id=content_id, title="Lost")) is False
        assert test_repository.delete(content_id) is False
        assert test_repository.search("Kept", 10) == []
        assert test_repository.count_matches("Kept") == 0
        assert test_repository.get(content_id).title == "Kept"

    def test_reads_without_content_table(self, test_repository, test_database):
        test_repository.create(_item(tags="a"))
        with test_database.transaction() as conn:
            conn.execute("DROP TABLE content")

        assert test_repository.get(1) is None
        assert test_repository.list_all(0, 10) == []
        assert test_repository.all_tags() == []
        assert test_repository.get_by_tag("a", 10) == []
        assert test_repository.count() == 0
        assert test_repository.count_by_tag("a") == 0


class TestSearchIndex:
    """The FTS index follows every write."""

    def test_index_row_per_item(self, test_repository, test_database):
        ids = [test_repository.create(_item(title=f"Item {n}")) for n in range(3)]
        test_repository.delete(ids[0])

        with test_database.acquire() as conn:
            stats = get_content_stats(conn)

        assert stats == {"content_count": 2, "indexed_count": 2}

    def test_search_matches_title_content_and_tags(self, test_repository):
        a = test_repository.create(_item(title="Kettle notes", content="boil water"))
        b = test_repository.create(_item(title="Other", content="kettle descaling"))
        c = test_repository.create(_item(title="Third", content="nothing", tags="kettle"))
        test_repository.create(_item(title="Unrelated", content="teapot"))

        found = {item.id for item in test_repository.search("kettle", 10)}

        assert found == {a, b, c}

    def test_search_follows_updates(self, test_repository):
        content_id = test_repository.create(_item(title="alpha", content="one"))
        updated = _item(title="beta", content="two")
        updated.id = content_id
        test_repository.update(updated)

        assert test_repository.search("alpha", 10) == []
        assert [item.id for item in test_repository.search("beta", 10)] == [content_id]

    def test_search_skips_deleted(self, test_repository):
        content_id = test_repository.create(_item(title="ephemeral"))
        test_repository.delete(content_id)

        assert test_repository.search("ephemeral", 10) == []

    def test_punctuation_is_literal(self, test_repository):
        content_id = test_repository.create(_item(title="Node.js basics"))

        assert [item.id for item in test_repository.search("Node.js", 10)] == [content_id]
        assert test_repository.count_matches("Node.js") == 1

    def test_prefix_search(self, test_repository):
        content_id = test_repository.create(_item(content="programming in python"))

        assert [item.id for item in test_repository.search("prog*", 10)] == [content_id]

    def test_search_limit_and_offset(self, test_repository):
        for n in range(5):
            test_repository.create(_item(title=f"widget {n}"))

        first = test_repository.search("widget", 2)
        second = test_repository.search("widget", 2, offset=2)

        assert len(first) == 2
        assert len(second) == 2
        assert not {i.id for i in first} & {i.id for i in second}

    def test_blank_query_returns_nothing(self, test_repository):
        test_repository.create(_item())

        assert test_repository.search("   ", 10) == []
        assert test_repository.count_matches("") == 0


class TestTagsAndListing:
    def test_get_by_tag_is_substring(self, test_repository):
        a = test_repository.create(_item(tags="python, web"))
        b = test_repository.create(_item(tags="cpython"))
        test_repository.create(_item(tags="rust"))

        found = {item.id for item in test_repository.get_by_tag("python", 10)}

        assert found == {a, b}
        assert test_repository.count_by_tag("python") == 2

    def test_tag_wildcards_are_escaped(self, test_repository):
        literal = test_repository.create(_item(tags="50%_off"))
        test_repository.create(_item(tags="50 days off"))

        found = [item.id for item in test_repository.get_by_tag("50%_", 10)]

        assert found == [literal]

    def test_all_tags_sorted_distinct(self, test_repository):
        test_repository.create(_item(tags="b, a"))
        test_repository.create(_item(tags=" a ,c,"))
        test_repository.create(_item())

        assert test_repository.all_tags() == ["a", "b", "c"]

    def test_list_all_newest_first(self, test_repository):
        ids = [test_repository.create(_item(title=f"n{n}")) for n in range(4)]

        listed = [item.id for item in test_repository.list_all(0, 10)]

        assert listed == list(reversed(ids))
        assert [item.id for item in test_repository.list_all(1, 2)] == [ids[2], ids[1]]
        assert [item.id for item in test_repository.get_recent(1)] == [ids[3]]

    def test_count(self, test_repository):
        assert test_repository.count() == 0
        test_repository.create(_item())
        test_repository.create(_item())
        assert test_repository.count() == 2


class TestDatabaseLifecycle:
    def test_ping(self, test_database):
        assert test_database.ping() is True

    def test_reopen_keeps_data(self, test_settings, test_repository, test_database):
        content_id = test_repository.create(_item(title="persisted"))
        test_database.close()

        reopened = Database(test_settings)
        reopened.initialize()
        try:
            assert ContentRepository(reopened).get(content_id).title == "persisted"
        finally:
            reopened.close()
