"""
Interactive terminal front-end.

Usage:
    python -m coretable grid.yaml
    python -m coretable --url http://localhost:8000/rows --columns-url http://localhost:8000/columns

Commands at the prompt:
    n           next page
    p           previous page
    s TERM      search (debounced, empty TERM clears)
    o N         toggle sort on column N
    r           refresh
    q           quit
"""

import argparse
import asyncio
import sys
from dataclasses import replace

from rich.console import Console

from shared.logging import get_logger

from .config import GridOptions, load_options
from .controller import GridController, create_grid
from .console import render_container
from .errors import ConfigurationError
from .transport import HttpTransport
from .view import Element

log = get_logger("cli", "main")

console = Console()

HELP = "[dim]n next · p previous · s TERM search · o N sort · r refresh · q quit[/dim]"


async def read_line(prompt: str) -> str:
    """Read a line from stdin without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, prompt)


async def dispatch(grid: GridController, line: str) -> bool:
    """Route one command through the grid's elements. Returns False to quit."""
    command, _, arg = line.strip().partition(" ")
    layout = grid.layout

    if command == "q":
        return False
    if command == "n":
        layout.next_button.trigger("click")
    elif command == "p":
        layout.previous_button.trigger("click")
    elif command == "s":
        layout.search_input.trigger("input", value=arg)
        await asyncio.sleep(grid.options.search_delay_ms / 1000.0 + 0.05)
    elif command == "o":
        try:
            index = int(arg)
        except ValueError:
            console.print("[yellow]Usage: o COLUMN_INDEX[/yellow]")
            return True
        if 0 <= index < len(layout.headers):
            layout.headers[index].trigger("click")
    elif command == "r":
        grid.refresh()
    elif command:
        console.print(f"[yellow]Unknown command: {command}[/yellow]")

    await grid.wait_idle()
    return True


async def run(options: GridOptions) -> int:
    container = Element("div")
    log.info("cli.started", url=options.url, columns_url=options.columns_url)
    async with HttpTransport(timeout_seconds=options.request_timeout, headers=options.headers) as transport:
        grid = await create_grid(container, options, transport)
        try:
            await grid.wait_idle()

            while True:
                console.clear()
                console.print(render_container(container, options.class_names))
                if not grid.ready:
                    return 1
                console.print(HELP)
                try:
                    line = await read_line("> ")
                except EOFError:
                    break
                if not await dispatch(grid, line):
                    break
        finally:
            grid.destroy()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coretable",
        description="Browse a server-side data endpoint in the terminal",
    )
    parser.add_argument("config", nargs="?", help="YAML options file")
    parser.add_argument("--url", help="Data endpoint (overrides the config file)")
    parser.add_argument("--columns-url", help="Column discovery endpoint")
    parser.add_argument("--method", default=None, help="HTTP method for data requests")
    parser.add_argument("--page-size", type=int, default=None, help="Rows per page")
    return parser


def options_from_args(args: argparse.Namespace) -> GridOptions:
    if args.config:
        options = load_options(args.config)
        return replace(
            options,
            url=args.url or options.url,
            method=args.method or options.method,
            columns_url=args.columns_url or options.columns_url,
            page_size=args.page_size or options.page_size,
        )

    return GridOptions(
        url=args.url or "",
        method=args.method or "GET",
        columns_url=args.columns_url,
        page_size=args.page_size or 10,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        options = options_from_args(args)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 2

    try:
        return asyncio.run(run(options))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
