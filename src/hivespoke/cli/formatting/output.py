"""
Output formatting with Rich console, or JSON envelopes for scripting.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.theme import Theme


# Custom theme for hive-spoke CLI
custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
})


class Reporter:
    """
    Presentation sink passed to every command.

    In human mode the ``success``/``warning``/``fail``/... methods print to a
    Rich console and ``result`` is silent. In JSON mode it is the other way
    round: only ``result`` writes, as one envelope on ``stream``.
    """

    def __init__(
        self,
        json_output: bool = False,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
    ):
        self.json_output = json_output
        self.console = console or Console(theme=custom_theme)
        self.err_console = console or Console(theme=custom_theme, stderr=True)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def print(self, text: str = "", **kwargs):
        """Print text to console."""
        if not self.json_output:
            self.console.print(text, **kwargs)

    def header(self, text: str):
        self.print(f"\n[bold]{text}[/bold]")

    def success(self, text: str):
        self.print(f"  [success]✓[/success] {text}")

    def warning(self, text: str):
        self.print(f"  [warning]⚠[/warning] {text}")

    def fail(self, text: str):
        self.print(f"  [error]✗[/error] {text}")

    def info(self, text: str):
        self.print(f"  [info]ℹ[/info] {text}")

    def dim(self, text: str):
        self.print(f"[dim]{text}[/dim]")

    def table(self, table: Table):
        if not self.json_output:
            self.console.print(table)

    def error(self, text: str):
        """Report a top-level failure."""
        if self.json_output:
            self.result(False, {"error": text})
        else:
            self.err_console.print(f"[red]Error:[/red] {text}")

    def result(self, ok: bool, payload: Any):
        """Emit the machine-readable envelope (JSON mode only)."""
        if not self.json_output:
            return
        envelope = {
            "ok": ok,
            **(payload if isinstance(payload, dict) else {"data": payload}),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.stream.write(json.dumps(envelope, indent=2) + "\n")
