from __future__ import annotations

from prompt_toolkit.document import Document
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.styles import Style, merge_styles, style_from_pygments_cls
from prompt_toolkit.widgets import TextArea
from pygments.lexers.markup import MarkdownLexer
from pygments.styles import get_style_by_name

from .surface import EditorConfig, EditorSurface

_LEXERS = {
    "markdown": MarkdownLexer,
}

_CHROME = {
    "light": {
        "editor": "bg:#ffffff #1e1e1e",
        "line-number": "fg:#999999",
        "status": "bg:#e4e4e4 #1e1e1e",
        "status.score": "bg:#005f87 #ffffff bold",
        "frame.label": "bold",
    },
    "dark": {
        "editor": "bg:#282c34 #abb2bf",
        "line-number": "fg:#636d83",
        "status": "bg:#21252b #abb2bf",
        "status.score": "bg:#98c379 #282c34 bold",
        "frame.label": "bold #61afef",
    },
}

_PYGMENTS_STYLE = {"light": "default", "dark": "monokai"}


def build_style(theme: str) -> Style:
    return merge_styles([
        style_from_pygments_cls(get_style_by_name(_PYGMENTS_STYLE[theme])),
        Style.from_dict(_CHROME[theme]),
    ])


class TextAreaSurface(EditorSurface):
    """
    prompt_toolkit TextArea as the editor surface.

    Lexer and style are chosen once, here; a different theme needs a new
    surface.
    """

    def __init__(self, config: EditorConfig, text: str = ""):
        super().__init__(config)
        lexer_cls = _LEXERS.get(config.syntax_mode)
        self.style = build_style(config.theme)
        self.text_area = TextArea(
            text=text,
            lexer=PygmentsLexer(lexer_cls) if lexer_cls else None,
            scrollbar=True,
            line_numbers=True,
            style="class:editor",
            focus_on_click=True,
        )
        self.text_area.buffer.on_text_changed += self._on_buffer_changed

    @property
    def text(self) -> str:
        return self.text_area.text

    def replace_all(self, text: str) -> None:
        cursor = min(self.text_area.buffer.cursor_position, len(text))
        self.text_area.buffer.set_document(Document(text, cursor_position=cursor), bypass_readonly=True)

    def destroy(self) -> None:
        self.text_area.buffer.on_text_changed -= self._on_buffer_changed
        super().destroy()

    def _on_buffer_changed(self, _buffer) -> None:
        self._emit()
