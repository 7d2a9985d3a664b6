#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared TUI components (Menu, choice provider, helpers) for hfget.
"""
from __future__ import annotations
from typing import Any, List, Optional, Tuple
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

try:
    import msvcrt
except ImportError:
    msvcrt = None

Option = Tuple[str, Any]   # (label, return_value)

def header_art() -> str:
    return r"""
  _      __            _
 | |__  / _| __ _  ___| |_
 | '_ \| |_ / _` |/ _ \ __|
 | | | |  _| (_| |  __/ |_
 |_| |_|_|  \__, |\___|\__|
            |___/
"""

def navigation_hint(multi: bool = False) -> str:
    if multi:
        return "[dim]↑↓ Navigate • Space Toggle • Enter Confirm • Ctrl+C Quit[/]"
    return "[dim]↑↓ Navigate • Enter Select • Ctrl+C Quit[/]"

def section(console: Console, title: str, subtitle: str = "") -> None:
    msg = f"[bold]{title}[/]"
    if subtitle:
        msg += f"\n[dim]{subtitle}[/]"
    console.print(Panel.fit(msg, border_style="cyan"))

class Menu:
    """Arrow-key menu on Windows (msvcrt); numbered prompt everywhere else."""
    def __init__(self, console_: Console, items: List[Option], title: str = "", subtitle: str = ""):
        self.console = console_
        self.items = items
        self.title = title
        self.subtitle = subtitle
        self.idx = 0

    def _render(self, selected: Optional[set] = None) -> None:
        self.console.clear()
        msg = f"[bold]{self.title}[/]"
        if self.subtitle:
            msg += f"\n[dim]{self.subtitle}[/]"
        self.console.print(Panel.fit(msg, border_style="cyan"))
        lines = []
        for i, (label, _) in enumerate(self.items):
            cursor = "➤ " if i == self.idx else "  "
            row = f"{cursor}{label}"
            if selected is not None:
                box = "[bold green][X][/]" if i in selected else "[dim][ ][/]"
                row = f"{cursor}{box} {label}"
            lines.append(f"[reverse bold cyan]{row}[/]" if i == self.idx else row)
        self.console.print("\n".join(lines))
        self.console.print("\n" + navigation_hint(multi=selected is not None))

    def _move(self) -> None:
        key = msvcrt.getch()
        if key == b'H': self.idx = max(0, self.idx - 1)
        elif key == b'P': self.idx = min(len(self.items) - 1, self.idx + 1)

    def show(self) -> Any:
        if not msvcrt:
            self.console.print(f"[bold]{self.title}[/]")
            for i, (label, _) in enumerate(self.items, 1):
                self.console.print(f"[cyan]{i:>2}[/]. {label}")
            ans = Prompt.ask("Select (0 to go back)", default="1", console=self.console).strip()
            if ans.isdigit() and 1 <= int(ans) <= len(self.items):
                return self.items[int(ans) - 1][1]
            return None

        while True:
            self._render()
            key = msvcrt.getch()
            if key in (b'\000', b'\xe0'):   # arrows
                self._move()
            elif key == b'\r':
                return self.items[self.idx][1]
            elif key in (b'\x1b', b'0', b'q'):
                return None

    def show_multiselect(self) -> List[Any]:
        """Return the values of the checked items, in list order."""
        if not msvcrt:
            self.console.print(f"[bold]{self.title}[/]")
            self.console.print("[dim]Enter indices separated by comma (e.g. 1,3)[/]")
            for i, (label, _) in enumerate(self.items, 1):
                self.console.print(f"[cyan]{i:>2}[/]. {label}")
            ans = Prompt.ask("Select", default="", console=self.console)
            picked = set()
            for part in ans.split(','):
                part = part.strip()
                if part.isdigit() and 1 <= int(part) <= len(self.items):
                    picked.add(int(part) - 1)
            return [self.items[i][1] for i in sorted(picked)]

        picked = set()
        while True:
            self._render(selected=picked)
            key = msvcrt.getch()
            if key in (b'\000', b'\xe0'):
                self._move()
            elif key == b' ':
                picked ^= {self.idx}
            elif key == b'\r':
                return [self.items[i][1] for i in sorted(picked)]
            elif key in (b'\x1b', b'q'):
                return []


class RichChooser:
    """Choice provider the wizard talks to: text, one-of, many-of, yes/no."""
    def __init__(self, console_: Console):
        self.console = console_

    def ask_text(self, message: str, default: Optional[str] = None) -> str:
        if default is None:
            return Prompt.ask(message, console=self.console)
        return Prompt.ask(message, default=default, console=self.console)

    def choose(self, message: str, options: List[Option]) -> Any:
        return Menu(self.console, options, title=message).show()

    def choose_many(self, message: str, options: List[Option]) -> List[Any]:
        return Menu(self.console, options, title=message).show_multiselect()

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=self.console)
