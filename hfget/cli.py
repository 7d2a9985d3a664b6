# hfget/cli.py
from __future__ import annotations
import argparse
import json
import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from . import __version__
from .core import CatalogClient, config_path, init_cfg, load_cfg, setup_logging
from .core.config import DEFAULT_DOWNLOAD_DIR, DEFAULT_SEARCH_LIMIT, DEFAULT_STRATEGY, TOKEN_ENV
from .core.errors import AuthMissingError, HfgetError
from .tui import header_art

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

USAGE = f"""
[bold cyan]🤗 HuggingFace Model Downloader[/]

[bold]USAGE:[/]
  hfget \\[COMMAND]

[bold]COMMANDS:[/]
  (none)          Run interactive downloader
  init            Create a new config file
  config          Show config location and settings
  --help, -h      Show this help message
  --version, -v   Show version number
  --verbose       Debug logging for core/network

[bold]CONFIGURATION:[/]
  Config file: ~/.config/hfget/config.json (override with HFGET_CONFIG)
  Token:       "token" in the config file, else ${TOKEN_ENV}

[bold]EXAMPLES:[/]
  hfget              Start interactive download
  hfget init         Initialize config file
  hfget config       View current configuration
"""

EXAMPLE_CFG = {
    "token": "hf_xxxxxxxxxxxxx",
    "defaultDownloadDir": DEFAULT_DOWNLOAD_DIR,
    "defaultSearchLimit": DEFAULT_SEARCH_LIMIT,
    "storageStrategy": DEFAULT_STRATEGY,
}

class _ArgsError(Exception):
    pass

class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _ArgsError(message)

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = _Parser(prog="hfget", add_help=False, allow_abbrev=False)
    ap.add_argument("command", nargs="?", default=None)
    ap.add_argument("-h", "--help", action="store_true")
    ap.add_argument("-v", "--version", action="store_true")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging for core/network")
    # anything else falls through to the wizard
    try:
        args, _unknown = ap.parse_known_args(argv)
    except _ArgsError as e:
        logger.debug("Unrecognised arguments (%s), starting the wizard", e)
        args = ap.parse_args([])
    return args

def cmd_help() -> int:
    console.print(f"[yellow]{escape(header_art())}[/]")
    console.print(USAGE)
    return 0

def cmd_init() -> int:
    try:
        path = init_cfg()
    except HfgetError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/]")
        return 1
    console.print(f"[green]✓ Config file created at: {escape(str(path))}[/]")
    console.print("\n[dim]Edit this file to set your token and preferences.[/]")
    console.print("[dim]Example config:[/]")
    console.print(f"[cyan]{escape(json.dumps(EXAMPLE_CFG, indent=2))}[/]")
    console.print(
        "\n[dim]Storage strategies:\n"
        '  - "organized" (default): Store in owner/model subdirectories\n'
        '  - "flat": Store all files directly in download directory[/]'
    )
    return 0

def cmd_config() -> int:
    path = config_path()
    console.print(f"[cyan]Config file location: {escape(str(path))}[/]")
    if path.exists():
        console.print("[green]✓ Config file exists[/]")
        console.print("\n[dim]Current config:[/]")
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            err_console.print(f"[red]✗ Cannot read {escape(str(path))}: {escape(str(e))}[/]")
        else:
            console.print(f"[cyan]{escape(raw.rstrip())}[/]")
    else:
        console.print("[yellow]⚠ Config file does not exist[/]")
        console.print("[dim]Run 'hfget init' to create it[/]")
    return 0

def cmd_wizard() -> int:
    # late import keeps `hfget --help` snappy
    from .ui import Wizard, banner

    settings = load_cfg()
    try:
        token = settings.require_token()
    except AuthMissingError as e:
        err_console.print(f"[red]❌ {escape(str(e))}[/]")
        err_console.print("[dim]   Option 1: Set environment variable[/]")
        err_console.print(f"      export {TOKEN_ENV}=hf_xxxxxxxxxxxxx")
        err_console.print("[dim]   Option 2: Set in config file[/]")
        err_console.print(f"      Run 'hfget init' to create config at {escape(str(config_path()))}")
        return 1

    banner(console)
    wizard = Wizard(settings, CatalogClient(token=token), console_=console)
    try:
        wizard.run()
    except (KeyboardInterrupt, EOFError):
        console.print("\n\n[yellow]Goodbye! 👋[/]")
        return 0
    if not wizard.interrupted:
        console.print("\n[green]✨ Done![/]\n")
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    if args.help:
        return cmd_help()
    if args.version:
        console.print(__version__)
        return 0
    if args.command == "init":
        return cmd_init()
    if args.command == "config":
        return cmd_config()
    return cmd_wizard()
