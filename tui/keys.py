"""
Key Event Module

This module turns prompt_toolkit key presses into the small, string-named
key events the screen state machine understands ("enter", "ctrl+s", "up",
printable characters and pasted text).
"""

from dataclasses import dataclass

from prompt_toolkit.keys import Keys

# prompt_toolkit aliases: Enter is ctrl+m, Tab is ctrl+i, Backspace is ctrl+h
_NAMED_KEYS = {
    Keys.ControlM: "enter",
    Keys.ControlI: "tab",
    Keys.ControlH: "backspace",
    Keys.Escape: "esc",
    Keys.BackTab: "shift+tab",
    Keys.BracketedPaste: "paste",
    Keys.ControlAt: "ctrl+space",
}

_PREFIXES = (
    ("c-s-", "ctrl+shift+"),
    ("s-", "shift+"),
    ("c-", "ctrl+"),
)


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    Attributes:
        key: Normalized name, e.g. "enter", "ctrl+s", "up", "a", "space", "paste"
        data: Raw text carried by the key (the character typed, or pasted text)
    """
    key: str
    data: str = ""

    @classmethod
    def char(cls, ch: str) -> "KeyEvent":
        """Build the event for typing a single character."""
        return cls("space" if ch == " " else ch, ch)

    @property
    def text(self) -> str:
        """Text this key inserts into an input field, or "" for control keys."""
        if self.key == "paste":
            return self.data
        if self.key == "space":
            return " "
        if len(self.key) == 1 and self.key.isprintable():
            return self.key
        return ""


def key_name(key) -> str:
    """Return the normalized name for a prompt_toolkit key."""
    if key in _NAMED_KEYS:
        return _NAMED_KEYS[key]

    name = key.value if isinstance(key, Keys) else str(key)
    if name == " ":
        return "space"
    for prefix, replacement in _PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            return replacement + name[len(prefix):]
    return name


def from_key_press(key_press) -> KeyEvent:
    """Convert a prompt_toolkit KeyPress into a KeyEvent."""
    name = key_name(key_press.key)
    data = key_press.data if name in ("paste", "space") or len(name) == 1 else ""
    return KeyEvent(name, data or "")
