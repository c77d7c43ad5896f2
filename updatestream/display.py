"""Rich terminal rendering of a message update stream.

Text fragments are written inline as they arrive; structural updates are
printed on their own colour-coded line.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from updatestream.schemas.updates import (
    FileUpdate,
    FinalAnswerUpdate,
    MessageUpdate,
    ReasoningUpdate,
    StatusUpdate,
    StreamUpdate,
    TitleUpdate,
    ToolUpdate,
    ToolUpdateType,
)

_TOOL_STYLES: dict[ToolUpdateType, str] = {
    ToolUpdateType.CALL: "bold cyan",
    ToolUpdateType.RESULT: "green",
    ToolUpdateType.ERROR: "bold red",
    ToolUpdateType.PROGRESS: "dim cyan",
}


class UpdateRenderer:
    """Writes updates to a Rich console and keeps simple counters."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._mid_line = False
        self.text = ""
        self.fragments = 0
        self.events = 0

    def render(self, update: MessageUpdate) -> None:
        if isinstance(update, StreamUpdate):
            self.fragments += 1
            self.text += update.token
            if update.token:
                self._console.print(
                    update.token, end="", markup=False, highlight=False, soft_wrap=True
                )
                self._mid_line = not update.token.endswith("\n")
            return

        self.events += 1
        self._event_line(self._describe(update))

    def finish(self) -> None:
        """End any partially written line."""
        if self._mid_line:
            self._console.print()
            self._mid_line = False

    def _event_line(self, line: Text) -> None:
        self.finish()
        self._console.print(line)

    def _describe(self, update: MessageUpdate) -> Text:
        if isinstance(update, ToolUpdate):
            style = _TOOL_STYLES.get(update.subtype, "cyan")
            return Text.assemble(("⚙ tool ", "dim"), (str(update.subtype), style), f" {update.uuid}")
        if isinstance(update, StatusUpdate):
            detail = f": {update.message}" if update.message else ""
            return Text(f"● {update.status}{detail}", style="dim")
        if isinstance(update, TitleUpdate):
            return Text(f"▸ {update.title}", style="bold")
        if isinstance(update, FinalAnswerUpdate):
            label = "interrupted" if update.interrupted else "final answer"
            return Text(f"✓ {label}", style="yellow" if update.interrupted else "bold green")
        if isinstance(update, FileUpdate):
            return Text(f"📎 {update.name} ({update.mime or 'unknown'})", style="magenta")
        if isinstance(update, ReasoningUpdate):
            return Text(f"… reasoning {update.subtype}", style="dim italic")
        return Text(f"[{update.type}]", style="dim")
