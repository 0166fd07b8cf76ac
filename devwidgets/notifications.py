"""Notification support for the interval timer.

Executes the effects emitted by the state machine: the alarm sound, a
native desktop notification and an optional webhook push.
"""

import platform
import subprocess
import sys
from functools import partial
from typing import Callable, Optional

import httpx
from rich.console import Console

from .scheduler import Effect, Phase, PlaySound, ShowNotification

console = Console(stderr=True)

NOTIFICATION_TITLE = "Pomodoro Timer"
DEFAULT_TIMEOUT = 5.0


def notification_message(completed: Phase) -> str:
    """Message for the notification shown when ``completed`` ends."""
    if completed == Phase.WORKING:
        return "Time for a break!"
    return "Break is over! Time to work!"


def _send_bell() -> None:
    """Send terminal bell."""
    sys.stdout.write("\a")
    sys.stdout.flush()


def _send_macos_notification(title: str, message: str) -> bool:
    """Send macOS notification via osascript.

    Returns:
        True if successful, False otherwise.
    """
    script = f'display notification "{message}" with title "{title}"'
    try:
        subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            timeout=DEFAULT_TIMEOUT,
        )
        return True
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _send_linux_notification(title: str, message: str) -> bool:
    """Send Linux notification via notify-send.

    Returns:
        True if successful, False otherwise.
    """
    try:
        subprocess.run(
            ["notify-send", title, message],
            capture_output=True,
            timeout=DEFAULT_TIMEOUT,
        )
        return True
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def notify(title: str, message: str) -> bool:
    """Send a native desktop notification.

    Fails silently if native notifications are not available.

    Returns:
        True if a notification was sent, False otherwise.
    """
    system = platform.system()
    if system == "Darwin":
        return _send_macos_notification(title, message)
    elif system == "Linux":
        return _send_linux_notification(title, message)
    # Windows and other platforms: bell only
    return False


def send_webhook(url: str, title: str, message: str) -> bool:
    """Push a notification to an ntfy-style HTTP endpoint.

    Returns:
        True if the endpoint accepted the message, False otherwise.
    """
    try:
        resp = httpx.post(
            url,
            content=message.encode("utf-8"),
            headers={"Title": title},
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        console.print(f"[yellow]WARN:[/yellow] notification push to {url} failed: {exc}")
        return False
    return True


class EffectHandler:
    """Executes timer effects on behalf of the UI."""

    def __init__(
        self,
        enabled: bool = True,
        volume: float = 0.7,
        notify_url: Optional[str] = None,
        bell: Optional[Callable[[], None]] = None,
        run_in_background: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        """Initialize the handler.

        Args:
            enabled: When False, every effect is ignored.
            volume: Alarm volume from 0.0 to 1.0. Zero mutes the bell.
            notify_url: Optional webhook that also receives notifications.
            bell: Rings the alarm. Defaults to the terminal bell on stdout.
            run_in_background: Runs the webhook push off the caller's
                thread. When omitted the push blocks until it finishes.
        """
        self.enabled = enabled
        self.volume = volume
        self.notify_url = notify_url
        self.bell = bell
        self.run_in_background = run_in_background

    def __call__(self, effect: Effect) -> None:
        if not self.enabled:
            return
        if isinstance(effect, PlaySound):
            self.play_sound()
        elif isinstance(effect, ShowNotification):
            self.show_notification(effect.phase)

    def play_sound(self) -> None:
        if self.volume > 0:
            (self.bell or _send_bell)()

    def show_notification(self, completed: Phase) -> None:
        message = notification_message(completed)
        notify(NOTIFICATION_TITLE, message)
        if self.notify_url:
            push = partial(send_webhook, self.notify_url, NOTIFICATION_TITLE, message)
            if self.run_in_background:
                self.run_in_background(push)
            else:
                push()
