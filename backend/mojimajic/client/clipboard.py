"""System clipboard access through pyperclip."""

import pyperclip

from ..core.exceptions import ClipboardError


def copy_to_clipboard(text: str) -> None:
    """Put text on the clipboard. Raises ClipboardError when the platform refuses."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError() from e
