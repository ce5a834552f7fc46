#!/usr/bin/env python3
"""Bookshelf CLI - browse and manage book summaries on the backend."""
import argparse
import asyncio
import sys
import logging

import httpx
from rich.prompt import Confirm

from bookshelf.client import BooksApiClient, BackendError
from bookshelf.config import Config
from bookshelf.controller import BookshelfController
from bookshelf.shell import BookshelfShell, fill_draft, interruptible
from bookshelf.state import SessionState
from bookshelf.view import display_books, render_banner, render_summary

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def make_client(args, config: Config) -> BooksApiClient:
    return BooksApiClient(
        base_url=args.backend_url or config.BACKEND_URL,
        timeout=config.DEFAULT_TIMEOUT
    )


def report(state: SessionState) -> int:
    """Print the error banner, if any, and turn it into an exit status."""
    if state.error:
        print(render_banner(state), file=sys.stderr)
        return 1
    return 0


async def run_shell(args, config: Config) -> int:
    """Interactive session."""
    async with make_client(args, config) as client:
        controller = BookshelfController(client)
        await BookshelfShell(controller).run()
    return 0


async def list_books(args, config: Config) -> int:
    """Fetch and print the list once."""
    async with make_client(args, config) as client:
        controller = BookshelfController(client)
        controller.set_query(args.query)
        controller.set_category(args.category)

        if await controller.refresh():
            print(display_books(controller.state.books, args.format))

            if args.read:
                controller.toggle_expanded(args.read)
                print("\n" + (render_summary(controller.state) or f"No listed book with id {args.read}."))

        return report(controller.state)


async def add_book(args, config: Config) -> int:
    """Create one book from the command line arguments."""
    async with make_client(args, config) as client:
        controller = BookshelfController(client)
        fill_draft(controller.state.draft, vars(args))

        if await controller.create():
            logger.info(f"Added {args.title!r}")
            print(f"Added '{args.title}'. {len(controller.state.books)} books listed.")

        return report(controller.state)


async def delete_book(args, config: Config) -> int:
    """Delete one book, asking first unless --yes is given."""
    def confirm(book):
        if args.yes:
            return True
        label = f" '{book.title}'" if book else ""
        with interruptible():
            return Confirm.ask(f"Delete book {args.id}{label}?", default=False)

    async with make_client(args, config) as client:
        controller = BookshelfController(client)
        await controller.refresh()

        if await controller.delete(args.id, confirm):
            print(f"Deleted book {args.id}.")

        return report(controller.state)


async def check_backend(args, config: Config) -> int:
    """Report whether the backend answers."""
    async with make_client(args, config) as client:
        try:
            result = await BookshelfController(client).check_backend()
        except (BackendError, httpx.HTTPError) as e:
            print(f"❌ Backend at {client.base_url} is not reachable: {e}", file=sys.stderr)
            return 1

        print(f"✅ Backend at {client.base_url} is up")
        for key, value in result.items():
            print(f"  {key}: {value}")
        return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bookshelf - book summaries and audio highlights",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive session
  %(prog)s

  # Search once
  %(prog)s list --query habits --category Self-help

  # Add a book
  %(prog)s add --title "Atomic Habits" --author "James Clear" --category Self-help

  # Delete without asking
  %(prog)s delete 12 --yes
        """
    )
    parser.add_argument("--backend-url", help="Backend base address (default: BOOKSHELF_BACKEND_URL or http://localhost:8000)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Shell command
    subparsers.add_parser("shell", help="Interactive session (default)")

    # List command
    list_parser = subparsers.add_parser("list", help="List or search books")
    list_parser.add_argument("--query", "-q", default="", help="Search title, author...")
    list_parser.add_argument("--category", "-c", default="", help="Only this category")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    list_parser.add_argument("--read", metavar="ID", help="Also print the text summary of this book")

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a new book")
    add_parser.add_argument("--title", default="", help="Title (required)")
    add_parser.add_argument("--author", default="", help="Author (required)")
    add_parser.add_argument("--category", default="", help="Category (required)")
    add_parser.add_argument("--description", default="", help="Short description")
    add_parser.add_argument("--text-summary", dest="text_summary", default="", help="Text summary")
    add_parser.add_argument("--cover-image-url", dest="cover_image_url", default="", help="Cover image URL")
    add_parser.add_argument("--audio-summary-url", dest="audio_summary_url", default="", help="Audio summary URL")

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a book")
    delete_parser.add_argument("id", help="Book id")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    # Check command
    subparsers.add_parser("check", help="Check backend reachability")

    args = parser.parse_args()

    config = Config()
    setup_logging(config)

    handlers = {
        None: run_shell,
        "shell": run_shell,
        "list": list_books,
        "add": add_book,
        "delete": delete_book,
        "check": check_backend,
    }

    try:
        status = asyncio.run(handlers[args.command](args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
