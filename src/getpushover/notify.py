"""
Notifiers render a delivered message for the local user.

Delivery is best effort: a notifier never raises and never retries.
"""

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional, Protocol, Union

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_S = 5.0
# shipped as package data, used by notify-send
DEFAULT_ICON = Path(__file__).with_name("icon.svg")


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class DesktopNotifier:
    """Shells out to the platform notifier: notify-send on Linux, osascript on macOS."""

    def __init__(self, app_name: str = "getpushover", icon: Optional[Union[str, Path]] = DEFAULT_ICON):
        self._app_name = app_name
        self._icon = str(icon) if icon else None

    def _command(self, title: str, body: str) -> Optional[list[str]]:
        if sys.platform == "darwin" and shutil.which("osascript"):
            script = f"display notification {_applescript_quote(body)} with title {_applescript_quote(title)}"
            return ["osascript", "-e", script]
        if shutil.which("notify-send"):
            cmd = ["notify-send", "--app-name", self._app_name]
            if self._icon:
                cmd += ["--icon", self._icon]
            return cmd + [title, body]
        return None

    def notify(self, title: str, body: str) -> None:
        cmd = self._command(title, body)
        if cmd is None:
            logger.info(f"{title}: {body}")
            return
        try:
            subprocess.run(
                cmd, check=True, timeout=NOTIFY_TIMEOUT_S,
                stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Desktop notification failed: {e}")


class ConsoleNotifier:
    """Prints notifications to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def notify(self, title: str, body: str) -> None:
        self._console.print(f"[bold cyan]{escape(title)}[/bold cyan]\n{escape(body)}", highlight=False)
