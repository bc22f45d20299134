"""
Entry point for running the Quire MCP stdio bridge as a module.

Usage:
    python -m quire.mcp
"""

import sys

import structlog

from quire.mcp.bridge import mcp


def main():
    # stdout carries the MCP stream; logs go to stderr
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    mcp.run()


if __name__ == "__main__":
    main()
