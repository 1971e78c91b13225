import logging
from typing import Protocol

import pyperclip

from marks_core import ClipboardUnavailable

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    def get(self) -> str: ...

    def set(self, text: str) -> None: ...


class SystemClipboard:
    """OS clipboard through pyperclip (pbcopy, wl-copy, xclip, xsel, ...)."""

    def get(self) -> str:
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as exc:
            logger.error("Failed to read system clipboard: %s", exc)
            raise ClipboardUnavailable(f"Unable to get clipboard contents: {exc}") from exc
        return text or ""

    def set(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            logger.error("Failed to write system clipboard: %s", exc)
            raise ClipboardUnavailable(f"Unable to set clipboard contents: {exc}") from exc
        logger.debug("Copied %d chars to system clipboard", len(text))
