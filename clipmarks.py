#!/usr/bin/env python3
import argparse
import curses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from marks_clipboard import SystemClipboard
from marks_core import (
    BookmarkStore,
    ClipboardUnavailable,
    FileIOError,
    RepeatKeyGesture,
    StartupFileMissing,
)

logger = logging.getLogger("clipmarks")

DATA_FILE = Path(os.environ.get("CLIPMARKS_FILE", ".bookmarks"))
LOG_FILE = os.environ.get("CLIPMARKS_LOG", "")
CONFIG_FILE = Path.home() / ".config" / "clipmarks" / "config"
DEFAULT_ACCENT = 2  # green

TITLE = "Bookmarks - Press ? for help"

SHORTCUTS_SEGMENTS = [
    ("j/k", True),
    (" Move  ", False),
    ("g/G", True),
    (" Top/Bottom  ", False),
    ("yy", True),
    (" Yank  ", False),
    ("dd", True),
    (" Cut  ", False),
    ("p", True),
    (" Paste  ", False),
    ("?", True),
    (" Help  ", False),
    ("q", True),
    (" Quit", False),
]


def load_config() -> Dict[str, int]:
    try:
        with CONFIG_FILE.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
            if not isinstance(data, dict):
                return {}
            return data
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed config file %s", CONFIG_FILE)
        return {}


def setup_logging(log_file: str, verbose: bool = False) -> None:
    # curses owns the terminal, so only ever log to a file
    if not log_file:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def ensure_visible(selected: int, offset: int, list_height: int) -> int:
    if selected < offset:
        return selected
    if selected >= offset + list_height:
        return selected - list_height + 1
    return offset


def shorten(text: str, limit: int = 40) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)] + "..."


class App:
    def __init__(self, store: BookmarkStore):
        self.store = store
        self.gesture = RepeatKeyGesture(("d", "y"))
        self.status = ""
        self.shortcuts_visible = False
        self.offset = 0

    @property
    def bookmarks(self):
        return self.store.bookmarks


def key_name(key: int) -> Optional[str]:
    if 0 <= key < 256:
        return chr(key)
    return None


def handle_key(app: App, key: int) -> bool:
    """Dispatch one key press. Returns False when the user asked to quit."""
    name = key_name(key)
    fired = app.gesture.feed(name)
    bookmarks = app.bookmarks

    if name in ("q", "Q"):
        return False
    if key in (ord("j"), curses.KEY_DOWN):
        bookmarks.next()
    elif key in (ord("k"), curses.KEY_UP):
        bookmarks.previous()
    elif key in (ord("g"), curses.KEY_HOME):
        bookmarks.select_first()
    elif key in (ord("G"), curses.KEY_END):
        bookmarks.select_last()
    elif key == ord("?"):
        app.shortcuts_visible = not app.shortcuts_visible
    elif key == ord("p"):
        try:
            pasted = app.store.paste_after_selected()
        except ClipboardUnavailable as exc:
            app.status = str(exc)
            return True
        if pasted:
            noun = "bookmark" if len(pasted) == 1 else "bookmarks"
            app.status = f"Pasted {len(pasted)} {noun}."
        else:
            app.status = "Clipboard is empty."
    elif fired == "y":
        try:
            yanked = app.store.yank_selected()
        except ClipboardUnavailable as exc:
            app.status = str(exc)
            return True
        if yanked is not None:
            app.status = f"Yanked '{shorten(yanked)}'."
    elif fired == "d":
        try:
            removed = app.store.delete_selected()
        except ClipboardUnavailable as exc:
            app.status = str(exc)
            return True
        if removed is not None:
            app.status = f"Deleted '{shorten(removed)}' (copied to clipboard)."
    return True


def command_rows(segments: List[Tuple[str, bool]]) -> List[List[Tuple[str, bool, str]]]:
    commands: List[Tuple[str, bool, str]] = []
    i = 0
    while i < len(segments):
        key, key_hl = segments[i]
        desc = segments[i + 1][0].strip() if i + 1 < len(segments) else ""
        if key or desc:
            commands.append((key.strip(), key_hl, desc))
        i += 2
    while len(commands) < 8:
        commands.append(("", False, ""))
    return [commands[:4], commands[4:8]]


def draw_box(stdscr, top: int, left: int, height: int, width: int, attr: int = curses.A_NORMAL) -> None:
    if height < 2 or width < 2:
        return
    right = left + width - 1
    bottom = top + height - 1
    stdscr.addch(top, left, curses.ACS_ULCORNER, attr)
    stdscr.hline(top, left + 1, curses.ACS_HLINE, width - 2, attr)
    stdscr.addch(top, right, curses.ACS_URCORNER, attr)
    stdscr.addch(bottom, left, curses.ACS_LLCORNER, attr)
    stdscr.hline(bottom, left + 1, curses.ACS_HLINE, width - 2, attr)
    # writing the bottom-right cell scrolls the screen, insch does not
    stdscr.insch(bottom, right, curses.ACS_LRCORNER, attr)
    for y in range(top + 1, bottom):
        stdscr.addch(y, left, curses.ACS_VLINE, attr)
        stdscr.addch(y, right, curses.ACS_VLINE, attr)


def draw_footer(
    stdscr,
    footer_y: int,
    width: int,
    status: str,
    rows: List[List[Tuple[str, bool, str]]],
    key_attr: int,
) -> None:
    y = footer_y
    if status:
        stdscr.addnstr(y, 1, status[: width - 2], width - 2)
        y += 1
    cell_width = max(1, (width - 1) // 4)
    for row in rows:
        for idx_col, (key, highlighted, desc) in enumerate(row):
            col = 1 + idx_col * cell_width
            rem = cell_width - 1
            if key and rem > 0:
                attr = key_attr if highlighted else curses.A_NORMAL
                stdscr.addnstr(y, col, key[:rem], rem, attr)
                col += len(key[:rem]) + 1
                rem -= len(key[:rem]) + 1
            if desc and rem > 0:
                stdscr.addnstr(y, col, desc[:rem], rem)
        y += 1


def draw_ui(stdscr, app: App, highlight_attr: int, accent_attr: int) -> int:
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    rows = command_rows(SHORTCUTS_SEGMENTS) if app.shortcuts_visible else []
    footer_rows = len(rows) + (1 if app.status else 0)
    body_height = max(3, h - footer_rows)
    list_height = max(1, body_height - 2)

    items = app.bookmarks.items
    selected = app.bookmarks.selected_index()
    if selected is not None:
        app.offset = ensure_visible(selected, app.offset, list_height)
    app.offset = clamp(app.offset, 0, max(0, len(items) - list_height))

    draw_box(stdscr, 0, 0, body_height, w)
    title = f" {TITLE} "
    stdscr.addnstr(0, 2, title, max(0, w - 4), accent_attr)

    for idx, bookmark in enumerate(items[app.offset : app.offset + list_height]):
        absolute_idx = app.offset + idx
        attr = highlight_attr if absolute_idx == selected else curses.A_NORMAL
        line = bookmark.ljust(w - 2)
        stdscr.addnstr(1 + idx, 1, line, max(0, w - 2), attr)
    if not items:
        stdscr.addnstr(1, 2, "No bookmarks. Press p to paste one.", max(0, w - 4))

    if footer_rows and h > body_height:
        draw_footer(stdscr, body_height, w, app.status, rows, accent_attr)
    stdscr.refresh()
    return list_height


def main(stdscr, app: App) -> None:
    curses.curs_set(0)
    curses.use_default_colors()
    config = load_config()
    accent_fg = int(config.get("accent_color", DEFAULT_ACCENT)) if isinstance(config, dict) else DEFAULT_ACCENT
    try:
        curses.init_pair(1, curses.COLOR_BLACK, accent_fg)
        highlight_attr = curses.color_pair(1)
        curses.init_pair(2, accent_fg, -1)
        accent_attr = curses.color_pair(2) | curses.A_BOLD
    except curses.error:
        highlight_attr = curses.A_REVERSE
        accent_attr = curses.A_BOLD

    # select the first bookmark
    app.bookmarks.next()

    while True:
        try:
            draw_ui(stdscr, app, highlight_attr, accent_attr)
        except curses.error:
            # terminal too small to draw; keep accepting keys
            logger.debug("Skipped drawing on a %sx%s terminal", *stdscr.getmaxyx())
        key = stdscr.getch()
        app.status = ""
        if not handle_key(app, key):
            break


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal bookmark list with yank, cut and paste.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="Print bookmarks to stdout, one per line, and exit (no TUI).",
    )
    mode.add_argument(
        "-a",
        "--add",
        metavar="TEXT",
        help="Append TEXT as a bookmark and exit (no TUI).",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=DATA_FILE,
        help=f"Bookmark file, one entry per line (default: {DATA_FILE}).",
    )
    parser.add_argument(
        "--log-file",
        default=LOG_FILE,
        help="Write a debug log to this file (default: $CLIPMARKS_LOG, off when unset).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at debug level.")
    return parser.parse_args(argv)


def handle_cli_list(store: BookmarkStore) -> int:
    for bookmark in store.bookmarks.items:
        print(bookmark)
    return 0


def handle_cli_add(store: BookmarkStore, text: str) -> int:
    added = store.add(text)
    if not added:
        print("Error: nothing to add.", file=sys.stderr)
        return 2
    print(f"Added {added} bookmark{'s' if added != 1 else ''} to {store.path}.")
    return 0


def run(argv: Optional[List[str]] = None, clipboard=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    store = BookmarkStore(args.file, clipboard if clipboard is not None else SystemClipboard())
    try:
        store.load()
    except StartupFileMissing:
        print(
            f"Error: unable to open {args.file}, create it first (one bookmark per line).",
            file=sys.stderr,
        )
        return 2
    except FileIOError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.list:
        return handle_cli_list(store)
    try:
        if args.add is not None:
            return handle_cli_add(store, args.add)
        curses.wrapper(main, App(store))
    except FileIOError as exc:
        logger.exception("Aborting after file error")
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
