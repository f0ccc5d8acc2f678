"""Exclusive ownership of the terminal through curses."""

import atexit
import curses
import dataclasses
import logging
import os
from typing import Optional, Union

from ..enums import KeyCode
from ..errors import TerminalException
from ..form.keys import KeyEvent
from .view import compose, paint

logger = logging.getLogger(__name__)

SPECIAL_KEYS = {
    curses.KEY_UP: KeyEvent.of(KeyCode.UP),
    curses.KEY_DOWN: KeyEvent.of(KeyCode.DOWN),
    curses.KEY_LEFT: KeyEvent.of(KeyCode.LEFT),
    curses.KEY_RIGHT: KeyEvent.of(KeyCode.RIGHT),
    curses.KEY_SLEFT: KeyEvent.of(KeyCode.LEFT, shift=True),
    curses.KEY_SRIGHT: KeyEvent.of(KeyCode.RIGHT, shift=True),
    curses.KEY_SR: KeyEvent.of(KeyCode.UP, shift=True),
    curses.KEY_SF: KeyEvent.of(KeyCode.DOWN, shift=True),
    curses.KEY_BTAB: KeyEvent.of(KeyCode.BACKTAB),
    curses.KEY_ENTER: KeyEvent.of(KeyCode.ENTER),
    curses.KEY_BACKSPACE: KeyEvent.of(KeyCode.BACKSPACE),
    curses.KEY_DC: KeyEvent.of(KeyCode.DELETE),
}

# xterm names modified arrows as e.g. kUP5; the digit encodes the modifiers
EXTENDED_KEYS = {
    "kUP": KeyCode.UP,
    "kDN": KeyCode.DOWN,
    "kLFT": KeyCode.LEFT,
    "kRIT": KeyCode.RIGHT,
}
MODIFIER_CODES = {
    "2": {"shift": True},
    "3": {"alt": True},
    "4": {"shift": True, "alt": True},
    "5": {"ctrl": True},
    "6": {"ctrl": True, "shift": True},
    "7": {"ctrl": True, "alt": True},
}

_screen = None
_exit_hook_installed = False


def translate_key(ch: Union[str, int]) -> Optional[KeyEvent]:
    """Map a value returned by `get_wch` to a :class:`KeyEvent`."""
    if isinstance(ch, int):
        return _translate_special(ch)

    match ch:
        case "\t":
            return KeyEvent.of(KeyCode.TAB)
        case "\n" | "\r":
            return KeyEvent.of(KeyCode.ENTER)
        case "\x7f" | "\x08":
            return KeyEvent.of(KeyCode.BACKSPACE)
        case "\x1b":
            return KeyEvent.of(KeyCode.ESC)

    code = ord(ch)
    if code < 32:
        return KeyEvent.of_char(chr(code + 64).lower(), ctrl=True)
    return KeyEvent.of_char(ch, shift=ch.isupper())


def _translate_special(code: int) -> Optional[KeyEvent]:
    if code in SPECIAL_KEYS:
        return SPECIAL_KEYS[code]
    try:
        name = curses.keyname(code).decode()
    except (curses.error, ValueError):
        return None
    for prefix, key_code in EXTENDED_KEYS.items():
        modifiers = MODIFIER_CODES.get(name[len(prefix) :]) if name.startswith(prefix) else None
        if modifiers is not None:
            return KeyEvent.of(key_code, **modifiers)
    return None


def restore_terminal() -> None:
    """Give the terminal back to the shell; safe to call more than once."""
    global _screen
    if _screen is None:
        return
    screen, _screen = _screen, None
    try:
        curses.curs_set(1)
    except curses.error:
        logger.debug("Terminal does not support cursor visibility")
    screen.keypad(False)
    curses.noraw()
    curses.echo()
    curses.endwin()


def _install_exit_hook() -> None:
    global _exit_hook_installed
    if not _exit_hook_installed:
        atexit.register(restore_terminal)
        _exit_hook_installed = True


class TerminalGuard:
    """Context manager holding the curses screen for one form session."""

    def __init__(self):
        self.screen = None

    def __enter__(self) -> "TerminalGuard":
        global _screen
        os.environ.setdefault("ESCDELAY", "25")
        try:
            screen = curses.initscr()
        except curses.error as e:
            raise TerminalException(f"failed to initialize terminal: {e}") from e
        _screen = screen
        _install_exit_hook()
        curses.noecho()
        curses.raw()
        screen.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal does not support cursor visibility")
        self.screen = screen
        logger.debug("Terminal acquired")
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        restore_terminal()
        self.screen = None
        logger.debug("Terminal restored")
        return False

    def draw(self, app) -> None:
        height, width = self.screen.getmaxyx()
        self.screen.erase()
        paint(self.screen, compose(app, width, height))
        self.screen.refresh()

    def read_key(self, timeout: float) -> Optional[KeyEvent]:
        """Wait up to `timeout` seconds for one key press."""
        self.screen.timeout(max(int(timeout * 1000), 1))
        try:
            ch = self.screen.get_wch()
        except curses.error:
            return None
        if ch == "\x1b":
            return self._read_escape_sequence()
        return translate_key(ch)

    def _read_escape_sequence(self) -> Optional[KeyEvent]:
        self.screen.nodelay(True)
        try:
            following = self.screen.get_wch()
        except curses.error:
            return KeyEvent.of(KeyCode.ESC)
        finally:
            self.screen.nodelay(False)
        event = translate_key(following)
        if event is None:
            return None
        return dataclasses.replace(event, alt=True)
