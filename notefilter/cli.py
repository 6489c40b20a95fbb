#!/usr/bin/env python3
"""
notefilter - filter-box search over note metadata snapshots

A small command-line interface for trying queries against a snapshot file
and inspecting how they tokenize and parse.
"""
import sys
import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from rich.markup import escape

from notefilter.config import OUTPUT_FORMATS, get_config, init_config
from notefilter.models import NoteRecord, load_notes
from notefilter.query.ast import (
    Conjunction, Connector, Node, QueryMode, children, describe,
)
from notefilter.query.parser import ParseContext, QueryParser
from notefilter.query.session import QuerySession
from notefilter.query.tokens import tokenize

logger = logging.getLogger(__name__)


console = Console()


def parse_now(value: Optional[str]) -> Optional[datetime]:
    """Parse the --now option (ISO 8601)."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid --now value: {value} (expected ISO 8601, e.g. 2026-02-04T12:00)")


def output_notes(notes: List[NoteRecord], format: str = "table", title: str = "Notes"):
    """Output notes in the specified format."""
    if format == "table":
        table = Table(title=title)
        table.add_column("Path", style="cyan")
        table.add_column("Tags", style="yellow")
        table.add_column("Modified", style="green")
        table.add_column("Task", style="red")

        for note in notes:
            tags = ", ".join(f"#{t}" for t in note.tags)
            modified = note.modified_at.strftime("%Y-%m-%d %H:%M") if note.modified_at else ""
            table.add_row(
                escape(note.path),
                escape(tags[:40]),
                modified,
                "☐" if note.has_incomplete_task else "",
            )

        console.print(table)
        console.print(f"[dim]{len(notes)} note(s)[/dim]")
    elif format == "json":
        print(json.dumps([note.to_dict() for note in notes], indent=2))
    else:  # plain
        for note in notes:
            print(note.path)


def build_tree(node: Node, tree: Tree):
    """Add a node and its children to a rich tree."""
    if isinstance(node, Connector):
        branch = tree.add(f"[bold magenta]{node.op.value}[/bold magenta]")
    elif isinstance(node, Conjunction):
        branch = tree.add("[bold magenta]ALL[/bold magenta]" if node.terms else "[dim]ALL (empty)[/dim]")
    else:
        tree.add(f"[cyan]{escape(describe(node))}[/cyan]", highlight=False)
        return

    for child in children(node):
        build_tree(child, branch)


# =============================================================================
# Commands
# =============================================================================

def cmd_search(args):
    """Filter a note snapshot with a query."""
    config = get_config()
    notes = load_notes(args.notes)
    now = parse_now(args.now)

    clock = (lambda: now) if now else datetime.now
    session = QuerySession.from_config(config, clock=clock)
    results = session.filter(args.query, notes)

    logger.info(f"{len(results)} of {len(notes)} notes match {args.query!r}")

    if not results and args.output == "table":
        console.print("[yellow]No matching notes[/yellow]")
        return

    output_notes(results, args.output, title=f"Notes matching '{escape(args.query)}'")


def cmd_parse(args):
    """Show how a query parses."""
    config = get_config()
    now = parse_now(args.now) or datetime.now()

    parser = QueryParser(ParseContext(
        now=now,
        default_date_field=config.date_field(),
        day_order=config.day_order(),
    ))
    query = parser.parse_query(args.query)

    if args.output == "json":
        print(json.dumps({
            "query": query.raw_text,
            "mode": query.mode.value,
            "ast": describe(query.ast),
        }, indent=2))
        return

    if args.output == "plain":
        print(f"{query.mode.value}\t{describe(query.ast)}")
        return

    mode_style = "green" if query.mode == QueryMode.PURE else "yellow"
    tree = Tree(f"[bold]{escape(query.raw_text) or '(empty)'}[/bold]  [{mode_style}]{query.mode.value}[/{mode_style}]")
    build_tree(query.ast, tree)
    console.print(tree)


def cmd_tokens(args):
    """Show the token stream of a query."""
    tokens = tokenize(args.query)

    if args.output == "json":
        print(json.dumps([
            {"kind": t.kind.value, "text": t.text, "start": t.start, "end": t.end}
            for t in tokens
        ], indent=2))
        return

    if args.output == "plain":
        for t in tokens:
            print(f"{t.kind.value}\t{t.text}\t{t.start}\t{t.end}")
        return

    table = Table(title="Tokens")
    table.add_column("Kind", style="magenta")
    table.add_column("Text", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")

    for t in tokens:
        table.add_row(t.kind.value, escape(t.text), str(t.start), str(t.end))

    console.print(table)


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="notefilter",
        description="notefilter - filter-box search over note metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  notefilter search '#project/alpha OR #status/green' --notes notes.yaml
  notefilter search 'folder:/work/meetings ext:md @thisweek' --notes notes.json
  notefilter parse '#a OR #b AND #c'
  notefilter tokens '-#draft ."Reading Status"="In Progress"'

Configuration:
  Config file: ~/.config/notefilter/config.toml or ./notefilter.toml
  Environment: NOTEFILTER_DATE_ORDER, NOTEFILTER_DEFAULT_DATE_FIELD
        """
    )

    # Global options
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-o", "--output", choices=list(OUTPUT_FORMATS), help="Output format")
    parser.add_argument("--log-level", help="Logging level (e.g. DEBUG)")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    # search
    search_parser = subparsers.add_parser("search", help="Filter a note snapshot")
    search_parser.add_argument("query", help="Query text")
    search_parser.add_argument("--notes", required=True, help="Snapshot file (YAML or JSON)")
    search_parser.add_argument("--now", help="Reference time for relative dates (ISO 8601)")
    search_parser.set_defaults(func=cmd_search)

    # parse
    parse_parser = subparsers.add_parser("parse", help="Show the parsed query")
    parse_parser.add_argument("query", help="Query text")
    parse_parser.add_argument("--now", help="Reference time for relative dates (ISO 8601)")
    parse_parser.set_defaults(func=cmd_parse)

    # tokens
    tokens_parser = subparsers.add_parser("tokens", help="Show the token stream")
    tokens_parser.add_argument("query", help="Query text")
    tokens_parser.set_defaults(func=cmd_tokens)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config:
        get_config(reload=True, config_file=Path(args.config))

    config = init_config(output_format=args.output, log_level=args.log_level)

    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not config.color_output:
        console.no_color = True

    if not args.output:
        args.output = config.output_format

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
