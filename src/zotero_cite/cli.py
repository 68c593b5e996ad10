"""
Command-line interface for inspecting a Zotero library the way the
citation completer sees it.
"""

import argparse
import asyncio
import sys

import yaml

from zotero_cite.clients.zotero_client import get_zotero_client
from zotero_cite.completion import BibliographyCompletionProvider, CompletionOrchestrator
from zotero_cite.models import DocumentContext
from zotero_cite.services import BibliographySyncProvider, LibrarySession
from zotero_cite.settings import settings
from zotero_cite.utils.errors import ConfigurationError
from zotero_cite.utils.logging_config import enable_debug_logging, initialize_logging


def _document_context(collections: list[str] | None) -> DocumentContext:
    if not collections:
        return DocumentContext(path="<cli>")
    return DocumentContext(
        path="<cli>", yaml_blocks=(yaml.safe_dump({"zotero": collections}),)
    )


def _print_tree(provider: BibliographySyncProvider, session: LibrarySession) -> None:
    specs = provider.collections(session)
    keys = {spec.key for spec in specs}
    children: dict[str | None, list] = {}
    for spec in specs:
        parent = spec.parent_key if spec.parent_key in keys else None
        children.setdefault(parent, []).append(spec)

    def show(parent: str | None, depth: int) -> None:
        for spec in children.get(parent, []):
            count = len(provider.items_in_collection(session, spec.key))
            print(f"{'  ' * depth}{spec.name} [{spec.key}] ({count} items)")
            show(spec.key, depth + 1)

    show(None, 0)


async def _collections(args: argparse.Namespace) -> int:
    provider = BibliographySyncProvider(get_zotero_client())
    with LibrarySession.open("<cli>") as session:
        await provider.load(session, _document_context(args.collection))

        if not provider.is_active(session):
            print("No Zotero collections available.")
        else:
            _print_tree(provider, session)

        warning = provider.warning(session)
        if warning:
            print(f"Warning: {warning}", file=sys.stderr)
    return 0


async def _complete(args: argparse.Namespace) -> int:
    provider = BibliographySyncProvider(get_zotero_client())
    with LibrarySession.open("<cli>") as session:
        orchestrator = CompletionOrchestrator(
            [BibliographyCompletionProvider(provider, session)],
            max_completions=args.limit,
        )
        result = await orchestrator.completions(args.token, _document_context(args.collection))
        entries = orchestrator.filter(result.items, args.token)

        for entry in entries[: args.limit]:
            print(f"@{entry.primary_text}\t{entry.secondary_text(40)}\t{entry.detail_text}")

        warning = orchestrator.warning_message()
        if warning:
            print(f"Warning: {warning}", file=sys.stderr)
        orchestrator.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Inspect Zotero collections and citation completions"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    collections_parser = subparsers.add_parser(
        "collections", help="Sync and print the collection tree"
    )
    collections_parser.add_argument(
        "--collection",
        action="append",
        help="Restrict to a root collection (repeatable)",
    )

    complete_parser = subparsers.add_parser(
        "complete", help="Print citation completions for a token"
    )
    complete_parser.add_argument("token", help="Partial citation key")
    complete_parser.add_argument(
        "--collection",
        action="append",
        help="Restrict to a root collection (repeatable)",
    )
    complete_parser.add_argument(
        "--limit",
        type=int,
        default=settings.max_completions,
        help=f"Maximum completions (default: {settings.max_completions})",
    )

    args = parser.parse_args(argv)

    initialize_logging()
    if args.debug:
        enable_debug_logging()

    if args.command is None:
        parser.print_help()
        return 1

    commands = {"collections": _collections, "complete": _complete}
    try:
        return asyncio.run(commands[args.command](args))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
