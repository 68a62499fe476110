"""
Text Widget Module

Line-editing widgets used by the screens: a single-line TextInput for the
search, hint, query and path fields, and a multi-line TextArea for the post
composer. Both support emacs-style shortcuts and paste normalization.
"""

from dataclasses import dataclass

from tui.keys import KeyEvent


@dataclass
class TextInput:
    """Single-line text field with basic line editing.

    handle_key() returns True when the key was consumed by the field.
    """

    placeholder: str = ""
    buffer: str = ""
    cursor_pos: int = 0
    kill_buffer: str = ""
    char_limit: int = 0

    @property
    def value(self) -> str:
        return self.buffer

    def set_value(self, text: str) -> None:
        self.buffer = text or ""
        self.cursor_pos = len(self.buffer)

    def reset(self) -> None:
        self.buffer = ""
        self.cursor_pos = 0

    def display(self, cursor_char: str = "▌") -> str:
        """Return the buffer with the cursor drawn at its position."""
        return self.buffer[:self.cursor_pos] + cursor_char + self.buffer[self.cursor_pos:]

    def _normalize_paste(self, text: str) -> str:
        return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", " ")

    def _insert_text(self, text: str) -> None:
        if self.char_limit:
            room = self.char_limit - len(self.buffer)
            if room <= 0:
                return
            text = text[:room]
        self.buffer = self.buffer[:self.cursor_pos] + text + self.buffer[self.cursor_pos:]
        self.cursor_pos += len(text)

    def _delete_before_cursor(self) -> None:
        if self.cursor_pos > 0:
            self.buffer = self.buffer[:self.cursor_pos - 1] + self.buffer[self.cursor_pos:]
            self.cursor_pos -= 1

    def _delete_at_cursor(self) -> None:
        if self.cursor_pos < len(self.buffer):
            self.buffer = self.buffer[:self.cursor_pos] + self.buffer[self.cursor_pos + 1:]

    def _delete_prev_word(self) -> None:
        if self.cursor_pos == 0:
            return
        i = self.cursor_pos
        while i > 0 and self.buffer[i - 1].isspace():
            i -= 1
        while i > 0 and not self.buffer[i - 1].isspace():
            i -= 1
        self.kill_buffer = self.buffer[i:self.cursor_pos]
        self.buffer = self.buffer[:i] + self.buffer[self.cursor_pos:]
        self.cursor_pos = i

    def _line_start(self) -> int:
        return self.buffer.rfind("\n", 0, self.cursor_pos) + 1

    def _line_end(self) -> int:
        end = self.buffer.find("\n", self.cursor_pos)
        return len(self.buffer) if end == -1 else end

    def handle_key(self, event: KeyEvent) -> bool:
        key = event.key
        if key == "paste":
            self._insert_text(self._normalize_paste(event.data))
        elif key in ("left", "ctrl+b"):
            self.cursor_pos = max(0, self.cursor_pos - 1)
        elif key in ("right", "ctrl+f"):
            self.cursor_pos = min(len(self.buffer), self.cursor_pos + 1)
        elif key in ("home", "ctrl+a"):
            self.cursor_pos = self._line_start()
        elif key in ("end", "ctrl+e"):
            self.cursor_pos = self._line_end()
        elif key == "backspace":
            self._delete_before_cursor()
        elif key in ("delete", "ctrl+d"):
            self._delete_at_cursor()
        elif key == "ctrl+w":
            self._delete_prev_word()
        elif key == "ctrl+k":
            end = self._line_end()
            self.kill_buffer = self.buffer[self.cursor_pos:end]
            self.buffer = self.buffer[:self.cursor_pos] + self.buffer[end:]
        elif key == "ctrl+u":
            start = self._line_start()
            self.kill_buffer = self.buffer[start:self.cursor_pos]
            self.buffer = self.buffer[:start] + self.buffer[self.cursor_pos:]
            self.cursor_pos = start
        elif key == "ctrl+y":
            if self.kill_buffer:
                self._insert_text(self.kill_buffer)
        elif event.text:
            self._insert_text(event.text)
        else:
            return False
        return True


@dataclass
class TextArea(TextInput):
    """Multi-line text field.

    Enter inserts a newline and up/down move between lines, keeping the
    column where possible.
    """

    def _normalize_paste(self, text: str) -> str:
        return text.replace("\r\n", "\n").replace("\r", "\n")

    def _move_vertical(self, direction: int) -> None:
        start = self._line_start()
        column = self.cursor_pos - start
        if direction < 0:
            if start == 0:
                self.cursor_pos = 0
                return
            prev_start = self.buffer.rfind("\n", 0, start - 1) + 1
            self.cursor_pos = min(prev_start + column, start - 1)
        else:
            end = self._line_end()
            if end == len(self.buffer):
                self.cursor_pos = end
                return
            next_start = end + 1
            next_end = self.buffer.find("\n", next_start)
            if next_end == -1:
                next_end = len(self.buffer)
            self.cursor_pos = min(next_start + column, next_end)

    def lines(self) -> list:
        return self.buffer.split("\n")

    def handle_key(self, event: KeyEvent) -> bool:
        if event.key == "enter":
            self._insert_text("\n")
            return True
        if event.key == "up":
            self._move_vertical(-1)
            return True
        if event.key == "down":
            self._move_vertical(1)
            return True
        return super().handle_key(event)
