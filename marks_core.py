import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class MarksError(Exception):
    pass


class StartupFileMissing(MarksError):
    pass


class FileIOError(MarksError):
    pass


class ClipboardUnavailable(MarksError):
    pass


def parse_records(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


class SelectableList:
    """Ordered bookmarks plus an optional selected index.

    The selection follows the item it points at when other items are
    inserted or removed around it.
    """

    def __init__(self, items: Optional[Iterable[str]] = None):
        self._items: List[str] = list(items or [])
        self._selected: Optional[int] = None

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def selected_index(self) -> Optional[int]:
        return self._selected

    def selected_item(self) -> Optional[str]:
        if self._selected is None:
            return None
        return self._items[self._selected]

    def push(self, item: str) -> None:
        self._items.append(item)

    def insert(self, item: str, index: int) -> None:
        if index < 0:
            raise IndexError(f"insert index {index} is negative")
        index = min(index, len(self._items))
        self._items.insert(index, item)
        if self._selected is not None and index <= self._selected:
            self._selected += 1

    def delete(self, index: int) -> str:
        if not 0 <= index < len(self._items):
            raise IndexError(f"delete index {index} out of range for {len(self._items)} items")
        removed = self._items.pop(index)
        if self._selected is None:
            return removed
        if not self._items:
            self._selected = None
        elif index == self._selected:
            self._selected = min(index, len(self._items) - 1)
        elif index < self._selected:
            self._selected -= 1
        return removed

    def select_first(self) -> None:
        if self._items:
            self._selected = 0

    def select_last(self) -> None:
        if self._items:
            self._selected = len(self._items) - 1

    def next(self) -> None:
        if not self._items:
            return
        if self._selected is None:
            self._selected = 0
        else:
            self._selected = (self._selected + 1) % len(self._items)

    def previous(self) -> None:
        if not self._items:
            return
        if self._selected is None:
            self._selected = len(self._items) - 1
        else:
            self._selected = (self._selected - 1) % len(self._items)


class RepeatKeyGesture:
    """Two-state debounce: a trigger key fires only when pressed twice in a row."""

    def __init__(self, triggers: Iterable[str]):
        self.triggers = frozenset(triggers)
        self.armed: Optional[str] = None

    def feed(self, key: Optional[str]) -> Optional[str]:
        if key not in self.triggers:
            self.armed = None
            return None
        if self.armed == key:
            self.armed = None
            return key
        if self.armed is not None:
            # the other trigger disarms without arming itself
            self.armed = None
            return None
        self.armed = key
        return None

    def reset(self) -> None:
        self.armed = None


class BookmarkStore:
    """Keeps a SelectableList and its backing file in step.

    The file is read once by load(). After that the in-memory list is
    authoritative: pastes are appended to the end of the file and deletes
    rewrite it without the removed line. The line is addressed by the
    pre-deletion index and checked against the bookmark text.
    """

    def __init__(self, path: Path, clipboard):
        self.path = Path(path)
        self.clipboard = clipboard
        self.bookmarks = SelectableList()

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StartupFileMissing(f"bookmark file not found: {self.path}") from exc
        except OSError as exc:
            raise FileIOError(f"cannot read {self.path}: {exc}") from exc

    def _append(self, records: List[str]) -> None:
        try:
            needs_newline = False
            with self.path.open("rb") as fh:
                fh.seek(0, os.SEEK_END)
                if fh.tell() > 0:
                    # a file edited by hand may lack the final newline
                    fh.seek(-1, os.SEEK_END)
                    needs_newline = fh.read(1) != b"\n"
            with self.path.open("a", encoding="utf-8") as fh:
                if needs_newline:
                    fh.write("\n")
                fh.write("".join(f"{record}\n" for record in records))
        except OSError as exc:
            raise FileIOError(f"cannot append to {self.path}: {exc}") from exc

    def _rewrite_without(self, index: int, item: str) -> None:
        try:
            records = parse_records(self._read())
        except StartupFileMissing as exc:
            raise FileIOError(str(exc)) from exc
        target = index
        if not (0 <= index < len(records) and records[index] == item):
            # pastes are appended at the end, so the file order can differ
            # from the list order; take the closest line with the same text
            matches = [i for i, record in enumerate(records) if record == item]
            if not matches:
                raise FileIOError(f"{self.path} no longer contains {item!r}")
            target = min(matches, key=lambda i: abs(i - index))
            logger.debug("Line %d differs from list, removing line %d", index, target)
        records.pop(target)
        try:
            with self.path.open("w", encoding="utf-8") as fh:
                fh.write("".join(f"{record}\n" for record in records))
        except OSError as exc:
            raise FileIOError(f"cannot rewrite {self.path}: {exc}") from exc

    def load(self) -> int:
        if not self.path.is_file():
            raise StartupFileMissing(f"bookmark file not found: {self.path}")
        self.bookmarks = SelectableList()
        for record in parse_records(self._read()):
            self.bookmarks.push(record)
        logger.info("Loaded %d bookmarks from %s", len(self.bookmarks), self.path)
        return len(self.bookmarks)

    def add(self, text: str) -> int:
        records = parse_records(text)
        if not records:
            return 0
        self._append(records)
        for record in records:
            self.bookmarks.push(record)
        logger.info("Added %d bookmarks", len(records))
        return len(records)

    def delete_selected(self) -> Optional[str]:
        index = self.bookmarks.selected_index()
        if index is None:
            return None
        item = self.bookmarks.selected_item()
        # clipboard first so a failure leaves list and file untouched
        self.clipboard.set(item)
        self.bookmarks.delete(index)
        self._rewrite_without(index, item)
        logger.info("Deleted bookmark %d: %s", index, item)
        return item

    def paste_after_selected(self) -> List[str]:
        records = parse_records(self.clipboard.get())
        if not records:
            logger.debug("Clipboard empty, nothing to paste")
            return []
        self._append(records)
        index = self.bookmarks.selected_index()
        if index is None:
            for record in records:
                self.bookmarks.push(record)
            self.bookmarks.select_first()
        else:
            for offset, record in enumerate(records, start=1):
                self.bookmarks.insert(record, index + offset)
        logger.info("Pasted %d bookmarks after index %s", len(records), index)
        return records

    def yank_selected(self) -> Optional[str]:
        item = self.bookmarks.selected_item()
        if item is None:
            return None
        self.clipboard.set(item)
        logger.info("Yanked bookmark: %s", item)
        return item
