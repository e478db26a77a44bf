from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Template:
    """A named article skeleton; ``output_structure`` is the Markdown it seeds the editor with."""
    id: str
    name: str
    slug: str
    description: str
    output_structure: str
    is_builtin: bool = True
