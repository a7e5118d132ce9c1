"""Platform share action for terminals.

There is no share sheet in a terminal, so shared text is printed in a panel
the user can select and copy.
"""

from rich.console import Console
from rich.panel import Panel

_console = Console()


def share_text(text: str, console: Console | None = None) -> None:
    """Present ``text`` for sharing."""
    (console or _console).print(Panel(text, title="Shared", border_style="green"))
