from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List

ChangeListener = Callable[[str], None]

THEMES = ("light", "dark")


@dataclass(frozen=True)
class EditorConfig:
    theme: str = "light"
    syntax_mode: str = "markdown"

    def __post_init__(self):
        if self.theme not in THEMES:
            raise ValueError(f"Unknown theme: {self.theme!r} (expected one of {', '.join(THEMES)})")


class EditorSurface(ABC):
    """
    A stateful text editor the sync controller drives.

    Change events carry the full document, never deltas, and fire for every
    document change, including replace_all().
    """

    def __init__(self, config: EditorConfig):
        self.config = config
        self._listeners: List[ChangeListener] = []
        self.destroyed = False

    @property
    @abstractmethod
    def text(self) -> str:
        """Live document content."""
        raise NotImplementedError

    @abstractmethod
    def replace_all(self, text: str) -> None:
        raise NotImplementedError

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def destroy(self) -> None:
        self._listeners.clear()
        self.destroyed = True

    def _emit(self) -> None:
        text = self.text
        for listener in list(self._listeners):
            listener(text)


class BufferSurface(EditorSurface):
    """In-memory surface with a cursor and undo history; used headless and in tests."""

    def __init__(self, config: EditorConfig, text: str = ""):
        super().__init__(config)
        self._text = text
        self.cursor = len(text)
        self.undo_stack: List[str] = []
        self.replace_count = 0

    @property
    def text(self) -> str:
        return self._text

    def replace_all(self, text: str) -> None:
        self.replace_count += 1
        self._set(text, cursor=min(self.cursor, len(text)))

    def type(self, chars: str) -> None:
        """Insert at the cursor, as a keystroke would."""
        new = self._text[:self.cursor] + chars + self._text[self.cursor:]
        self._set(new, cursor=self.cursor + len(chars))

    def undo(self) -> None:
        if self.undo_stack:
            previous = self.undo_stack.pop()
            self._text = previous
            self.cursor = min(self.cursor, len(previous))
            self._emit()

    def _set(self, text: str, cursor: int) -> None:
        if text == self._text:
            return
        self.undo_stack.append(self._text)
        self._text = text
        self.cursor = cursor
        self._emit()
