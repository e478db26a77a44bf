from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from .surface import ChangeListener, EditorConfig, EditorSurface

SurfaceFactory = Callable[[EditorConfig, str], EditorSurface]


class EditorSyncController:
    """
    Keeps an externally owned Markdown value and an editor surface in step
    without echoing writes back and forth.

    ``last_external_value`` is the last value this controller pushed into the
    surface or received from it. An external value is applied only when it
    differs from both that and the live editor text, so a producer echoing
    what the user just typed never rewrites the editor (cursor and undo
    history stay intact).
    """

    def __init__(self, factory: SurfaceFactory, value: str = "", *,
                 config: Optional[EditorConfig] = None,
                 on_change: Optional[ChangeListener] = None):
        self._factory = factory
        self._on_change = on_change
        self.config = config or EditorConfig()
        self.value = value
        self.last_external_value = value
        self.surface: Optional[EditorSurface] = None
        self._build()

    def _build(self) -> None:
        surface = self._factory(self.config, self.value)
        surface.add_listener(self._handle_local_edit)
        self.surface = surface
        self.last_external_value = self.value

    def teardown(self) -> None:
        if self.surface is not None:
            self.surface.destroy()
            self.surface = None

    def set_theme(self, theme: str) -> bool:
        """Rebuild the surface with a new theme. Returns False if unchanged."""
        if theme == self.config.theme:
            return False
        new_config = replace(self.config, theme=theme)
        self.teardown()
        self.config = new_config
        self._build()
        return True

    def set_value(self, value: str) -> bool:
        """Deliver a new external value; returns True if the surface was rewritten."""
        self.value = value
        surface = self.surface
        if surface is None or value == self.last_external_value:
            return False
        if value == surface.text:
            return False
        # record before replacing: the surface fires a change event synchronously
        self.last_external_value = value
        surface.replace_all(value)
        return True

    def _handle_local_edit(self, text: str) -> None:
        self.last_external_value = text
        self.value = text
        if self._on_change is not None:
            self._on_change(text)
