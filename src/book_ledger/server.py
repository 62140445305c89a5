"""Book Ledger MCP Server

Wires the ledger's tools and resources onto a FastMCP server and runs it on
the stdio transport. All business rules live in ``book_ledger.ledger``; this
module only registers handlers and manages process lifecycle.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .config import LedgerConfig, get_config
from .ledger import get_ledger
from .resources import book_resources
from .tools import (
    add_book_handler,
    delete_book_handler,
    lend_book_handler,
    return_book_handler,
)

logger = logging.getLogger(__name__)


def configure_logging(config: LedgerConfig) -> None:
    """Send logs to stderr so stdout stays clean for the stdio transport."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if not config.debug:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def create_server(config: LedgerConfig | None = None) -> FastMCP:
    """Build the FastMCP server with every book tool and resource registered."""
    config = config or get_config()

    mcp = FastMCP(
        name=config.server_name,
        instructions=(
            "Book Ledger - a catalog of lendable books. Read library://books/list "
            "to browse copy counts; use lend_book and return_book to move copies "
            "in and out, add_book and delete_book to manage the catalog."
        ),
    )

    for resource in book_resources:
        mcp.resource(
            resource["uri"],
            name=resource["name"],
            description=resource["description"],
            mime_type=resource["mime_type"],
        )(resource["handler"])

    @mcp.tool(name="add_book", description="Add a book with its number of copies")
    async def add_book(
        title: str, author: str, copies: int, available_copies: int | None = None
    ) -> dict[str, Any]:
        return await add_book_handler(
            {
                "title": title,
                "author": author,
                "copies": copies,
                "available_copies": available_copies,
            }
        )

    @mcp.tool(name="delete_book", description="Remove a book from the catalog")
    async def delete_book(book_id: int) -> dict[str, Any]:
        return await delete_book_handler({"book_id": book_id})

    @mcp.tool(name="lend_book", description="Lend one copy of a book")
    async def lend_book(book_id: int) -> dict[str, Any]:
        return await lend_book_handler({"book_id": book_id})

    @mcp.tool(name="return_book", description="Return one copy of a book")
    async def return_book(book_id: int) -> dict[str, Any]:
        return await return_book_handler({"book_id": book_id})

    logger.info("Registered %d book resources and 4 tools", len(book_resources))
    return mcp


def main() -> None:
    """Entry point for ``book-ledger``: run the server on stdio."""
    config = get_config()
    configure_logging(config)

    logger.info("%s v%s starting on stdio", config.server_name, config.server_version)
    logger.info("Storage backend: %s", config.storage_backend)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, shutting down...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        # Build the ledger (and its schema) before accepting requests.
        get_ledger()
        create_server(config).run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Fatal error in Book Ledger server")
        sys.exit(1)


if __name__ == "__main__":
    main()
