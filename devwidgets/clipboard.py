"""Clipboard access for generated commands and converted markup."""

import platform
import subprocess

_COMMANDS = {
    "Darwin": [["pbcopy"]],
    "Linux": [["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]],
    "Windows": [["clip"]],
}


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard.

    Tries each clipboard tool known for the platform in turn.

    Returns:
        True if a tool accepted the text, False otherwise.
    """
    for command in _COMMANDS.get(platform.system(), []):
        try:
            subprocess.run(command, input=text.encode("utf-8"), check=True)
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            continue
    return False
