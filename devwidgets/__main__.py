"""Entry point for python -m devwidgets."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from . import rsync
from .clipboard import copy_to_clipboard
from .config import ConfigError, dump_config, load_config
from .markup import DEFAULT_CSS, Direction, convert, render_document
from .notifications import EffectHandler
from .scheduler import IntervalStateMachine

console = Console()
err_console = Console(stderr=True)


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devwidgets",
        description="Developer productivity widgets: interval timer, rsync generator, markup converter",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ── timer ──
    timer = sub.add_parser(
        "timer",
        help="Run the interval (pomodoro) timer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
  Space    Start/Pause
  r        Reset current phase
  n        Skip to next phase
  q        Quit

Examples:
  devwidgets timer                  # Defaults or settings file (25/5/15)
  devwidgets timer --work 50        # 50-minute pomodoros
  devwidgets timer --auto           # Auto-start both work and breaks
""",
    )
    timer.add_argument("--config", type=Path, metavar="PATH", help="Settings file (JSON)")
    timer.add_argument("--work", type=positive_int, dest="work_minutes", metavar="MINS",
                       help="Work phase duration in minutes (default: 25)")
    timer.add_argument("--short", type=positive_int, dest="break_minutes", metavar="MINS",
                       help="Short break duration in minutes (default: 5)")
    timer.add_argument("--long", type=positive_int, dest="long_break_minutes", metavar="MINS",
                       help="Long break duration in minutes (default: 15)")
    timer.add_argument("--cycle", type=positive_int, dest="long_break_interval", metavar="N",
                       help="Work phases before a long break (default: 4)")
    timer.add_argument("--auto", action="store_true", help="Auto-start both breaks and work phases")
    timer.add_argument("--auto-break", action=argparse.BooleanOptionalAction, dest="auto_start_breaks",
                       help="Auto-start breaks when work ends (default: on)")
    timer.add_argument("--auto-work", action=argparse.BooleanOptionalAction, dest="auto_start_pomodoros",
                       help="Auto-start work when a break ends (default: off)")
    timer.add_argument("--volume", type=float, metavar="0-1", help="Alarm volume, 0 mutes (default: 0.7)")
    timer.add_argument("--notify-url", metavar="URL", help="Also push notifications to this URL")
    timer.add_argument("--no-notify", action="store_true", help="Disable sound and notifications")
    timer.add_argument("--print-config", action="store_true",
                       help="Print the effective settings as JSON and exit")

    # ── rsync ──
    gen = sub.add_parser("rsync", help="Generate an rsync command line")
    gen.add_argument("--direction", choices=[d.value for d in rsync.TransferDirection],
                     default=rsync.TransferDirection.LOCAL_TO_REMOTE.value)
    gen.add_argument("--local", dest="local_path", default="./local/path/")
    gen.add_argument("--user", default="user")
    gen.add_argument("--server", default="server")
    gen.add_argument("--remote-path", default="/remote/path/")
    gen.add_argument("--port", default=rsync.DEFAULT_SSH_PORT)
    gen.add_argument("--source", metavar="USER@HOST:PATH", help="Source server (server-to-server)")
    gen.add_argument("--source-port", default=rsync.DEFAULT_SSH_PORT)
    gen.add_argument("--dest", metavar="USER@HOST:PATH", help="Destination server (server-to-server)")
    gen.add_argument("--dest-port", default=rsync.DEFAULT_SSH_PORT)
    gen.add_argument("--toggle", action="append", default=[], metavar="FLAG",
                     help="Toggle a catalogue option, e.g. --toggle a --toggle=--delete")
    gen.add_argument("--exclude", action="append", default=[], metavar="PATTERN",
                     help="Exclude pattern (enables --exclude)")
    gen.add_argument("--list-options", action="store_true", help="Show the option catalogue and exit")
    gen.add_argument("--preview", action="store_true", help="Show which sample files would transfer")
    _add_output_args(gen)

    # ── convert ──
    conv = sub.add_parser("convert", help="Convert between Markdown and HTML")
    conv.add_argument("input", nargs="?", type=Path, help="Input file (default: stdin)")
    conv.add_argument("--to", choices=["html", "markdown"], default="html")
    conv.add_argument("--document", action="store_true",
                      help="Wrap HTML output in a standalone document with a stylesheet")
    conv.add_argument("--css", type=Path, metavar="PATH", help="Stylesheet for --document")
    conv.add_argument("-o", "--output", type=Path, metavar="PATH", help="Write result to a file")
    _add_output_args(conv)

    return parser


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--raw", action="store_true", help="Print plain text without highlighting")
    parser.add_argument("--copy", action="store_true", help="Copy the result to the clipboard")


def _parse_server(value: Optional[str], default: rsync.ServerConfig, port: str) -> rsync.ServerConfig:
    """Parse USER@HOST:PATH. Parts that are missing keep their defaults."""
    if not value:
        return rsync.ServerConfig(default.username, default.server, default.path, port)
    login, _, path = value.partition(":")
    username, _, server = login.rpartition("@")
    return rsync.ServerConfig(
        username or default.username,
        server or default.server,
        path or default.path,
        port,
    )


def _emit(text: str, lexer: str, args: argparse.Namespace) -> None:
    if args.raw:
        print(text)
    else:
        console.print(Syntax(text, lexer, theme="monokai", word_wrap=True))
    if args.copy:
        if copy_to_clipboard(text):
            err_console.print("[green]Copied to clipboard.[/green]")
        else:
            err_console.print("[yellow]WARN:[/yellow] no clipboard tool available")


def run_timer(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config).merged({
            "work_minutes": args.work_minutes,
            "break_minutes": args.break_minutes,
            "long_break_minutes": args.long_break_minutes,
            "long_break_interval": args.long_break_interval,
            "auto_start_breaks": True if args.auto else args.auto_start_breaks,
            "auto_start_pomodoros": True if args.auto else args.auto_start_pomodoros,
            "volume": args.volume,
            "notify_url": args.notify_url,
        })
    except ConfigError as exc:
        err_console.print(f"[red]ERROR:[/red] {exc}")
        return 1

    if args.print_config:
        print(dump_config(config))
        return 0

    handler = EffectHandler(
        enabled=not args.no_notify,
        volume=config.volume,
        notify_url=config.notify_url,
    )
    machine = IntervalStateMachine(config.to_settings(), effect_handler=handler)

    # Imported lazily so the other subcommands do not load Textual
    from .ui import run_ui

    try:
        run_ui(machine)
    except KeyboardInterrupt:
        pass
    return 0


def run_rsync(args: argparse.Namespace) -> int:
    options = rsync.default_options()
    for flag in args.toggle:
        try:
            rsync.toggle_option(options, flag)
        except KeyError:
            err_console.print(f"[red]ERROR:[/red] unknown rsync option: {flag}")
            return 1

    patterns: List[str] = []
    for pattern in args.exclude:
        rsync.add_exclude_pattern(patterns, pattern)
    flags = rsync.enabled_flags(options)
    if patterns and "--exclude" not in flags:
        rsync.toggle_option(options, "--exclude")
        flags = rsync.enabled_flags(options)

    if args.list_options:
        table = Table(box=box.ROUNDED, title="rsync options")
        table.add_column("Flag", style="cyan")
        table.add_column("On")
        table.add_column("Description", style="dim")
        for option in options:
            table.add_row(option.flag, "✔" if option.enabled else "", option.description)
        console.print(table)
        return 0

    defaults = rsync.PathConfig()
    paths = rsync.PathConfig(
        local_path=args.local_path,
        remote=rsync.ServerConfig(args.user, args.server, args.remote_path, args.port),
        source=_parse_server(args.source, defaults.source, args.source_port),
        dest=_parse_server(args.dest, defaults.dest, args.dest_port),
    )
    command = rsync.build_command(rsync.TransferDirection(args.direction), paths, flags, patterns)
    _emit(command, "bash", args)

    if args.preview:
        items = rsync.preview_transfer(rsync.SAMPLE_SOURCE, rsync.SAMPLE_DESTINATION, flags, patterns)
        table = Table(box=box.SIMPLE, title="Transfer preview")
        table.add_column("File")
        table.add_column("Type", style="dim")
        table.add_column("Size", justify="right")
        for item in items:
            style = "red" if item.size == rsync.DELETED else "green"
            table.add_row(item.name, item.type, item.size, style=style)
        if not items:
            table.add_row("(nothing to transfer)", "", "")
        console.print(table)
    return 0


def run_convert(args: argparse.Namespace) -> int:
    try:
        source = args.input.read_text(encoding="utf-8") if args.input else sys.stdin.read()
        css = args.css.read_text(encoding="utf-8") if args.css else DEFAULT_CSS
    except OSError as exc:
        err_console.print(f"[red]ERROR:[/red] {exc}")
        return 1

    if args.to == "html":
        result = convert(source, Direction.MARKDOWN_TO_HTML)
        if args.document:
            result = render_document(result, css)
        lexer = "html"
    else:
        result = convert(source, Direction.HTML_TO_MARKDOWN)
        lexer = "markdown"

    if args.output:
        args.output.write_text(result + "\n", encoding="utf-8")
        err_console.print(f"Wrote {args.output}")
    else:
        _emit(result, lexer, args)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.command == "timer":
        return run_timer(args)
    elif args.command == "rsync":
        return run_rsync(args)
    return run_convert(args)


if __name__ == "__main__":
    sys.exit(main())
