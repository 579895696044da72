"""Terminal output for the tokenli command line.

Two streams, never mixed:

* **stdout** carries the result of a command and nothing else: a token,
  a dry-run request, a profile. ``TOKEN=$(tokenli --plain token --raw)``
  must capture exactly the token.
* **stderr** carries diagnostics. Each diagnostic has a level (see
  :data:`_LEVELS`) that decides its prefix, its Rich style, and whether
  ``--quiet`` hides it or ``--verbose`` is needed to show it.

Results render as indented JSON (``--json``), ``key<TAB>value`` lines
(``--plain``, and the default when stdout is not a terminal), or
highlighted JSON on a colour terminal. ``NO_COLOR`` and ``TERM=dumb``
switch off colour.

The CLI builds one :class:`OutputManager` in
:func:`~tokenli.app.main_callback` and installs it with :func:`set_output`;
commands reach it through :func:`get_output` or the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Result format. ``AUTO`` means ``RICH`` on a colour terminal, ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


@dataclass(frozen=True)
class _Level:
    prefix: str
    style: str
    hidden_when_quiet: bool = True
    needs_verbose: bool = False


_LEVELS: dict[str, _Level] = {
    "info": _Level("", ""),
    "success": _Level("", "green"),
    "suggest": _Level("→ ", "dim"),
    "warning": _Level("Warning: ", "yellow", hidden_when_quiet=False),
    "error": _Level("Error: ", "bold red", hidden_when_quiet=False),
    "debug": _Level("[debug] ", "dim", needs_verbose=True),
}


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything, or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


class OutputManager:
    """Writes command results to stdout and diagnostics to stderr.

    The streams are bound when the manager is created, so a manager made
    inside a :class:`typer.testing.CliRunner` invocation writes to the
    runner's buffers.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if format is OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format
        self._out = sys.stdout
        self._err = sys.stderr
        self._rich_out = Console(
            file=self._out,
            no_color=self._no_color,
            force_terminal=format is OutputFormat.RICH,
        )
        self._rich_err = Console(file=self._err, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- results (stdout) ---

    def print_data(self, text: str) -> None:
        """Write one line of result text, unformatted."""
        print(text, file=self._out, flush=True)

    def format_response(self, data: Any) -> None:
        """Write a dict or list result in the active format."""
        if self._format is OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format is OutputFormat.JSON:
            self.print_data(text)
        else:
            self._rich_out.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as JSON records, tab-separated lines, or a Rich table.

        *title* is only shown by the Rich table.
        """
        if self._format is OutputFormat.JSON:
            self.print_data(json.dumps([dict(zip(headers, row)) for row in rows], indent=2))
        elif self._format is OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._rich_out.print(table)

    # --- diagnostics (stderr) ---

    def diagnostic(self, level: str, message: str) -> None:
        """Write *message* to stderr at *level*, unless the level is muted."""
        rule = _LEVELS[level]
        if rule.needs_verbose and not self._verbose:
            return
        if rule.hidden_when_quiet and self._quiet:
            return
        line = f"{rule.prefix}{message}"
        if self._no_color:
            print(line, file=self._err, flush=True)
        elif rule.style:
            self._rich_err.print(f"[{rule.style}]{escape(line)}[/{rule.style}]")
        else:
            self._rich_err.print(escape(line))

    def info(self, message: str) -> None:
        self.diagnostic("info", message)

    def success(self, message: str) -> None:
        self.diagnostic("success", message)

    def suggest(self, message: str) -> None:
        self.diagnostic("suggest", message)

    def warning(self, message: str) -> None:
        self.diagnostic("warning", message)

    def error(self, message: str) -> None:
        self.diagnostic("error", message)

    def debug(self, message: str) -> None:
        self.diagnostic("debug", message)


def _plain_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{_plain_value(value)}" for key, value in data.items()]
    if isinstance(data, list):
        return [str(item) for item in data]
    return [str(data)]


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
