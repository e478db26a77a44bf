from __future__ import annotations

from typing import Dict, FrozenSet, Optional

# canonical field -> accepted "## " header spellings (lowercase)
SECTIONS: Dict[str, FrozenSet[str]] = {
    "problem": frozenset({"problem"}),
    "solution": frozenset({"solution", "resolution"}),
    "expected_result": frozenset({"expected result", "expected outcome"}),
    "prerequisites": frozenset({"prerequisites", "requirements"}),
    "additional_notes": frozenset({"additional notes", "notes"}),
    "tags": frozenset({"tags", "labels"}),
}

# Headers written by serialize(), in output order.
HEADINGS: Dict[str, str] = {
    "problem": "Problem",
    "solution": "Solution",
    "expected_result": "Expected Result",
    "prerequisites": "Prerequisites",
    "additional_notes": "Additional Notes",
    "tags": "Tags",
}

_ALIASES: Dict[str, str] = {
    alias: canonical
    for canonical, aliases in SECTIONS.items()
    for alias in aliases
}


def canonical_section(header: str) -> Optional[str]:
    """Map header text (without the leading ``##``) to its canonical field, or None."""
    return _ALIASES.get(header.strip().lower())
