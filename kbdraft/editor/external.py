from __future__ import annotations

from typing import Optional

import click

from .surface import EditorConfig, EditorSurface


class ExternalEditorSurface(EditorSurface):
    """
    $EDITOR as the editor surface: each open() is one editing round.

    Styling belongs to the external editor, so the theme is only recorded.
    """

    def __init__(self, config: EditorConfig, text: str = "", editor: Optional[str] = None):
        super().__init__(config)
        self._text = text
        self.editor = editor

    @property
    def text(self) -> str:
        return self._text

    def replace_all(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        self._emit()

    def open(self) -> bool:
        """Run the editor; returns True if the document changed."""
        edited = click.edit(self._text, editor=self.editor, extension=".md", require_save=True)
        # click.edit returns None when the file was closed without saving
        if edited is None or edited == self._text:
            return False
        self._text = edited
        self._emit()
        return True
