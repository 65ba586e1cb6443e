from __future__ import annotations

from typing import List

# Darkest to lightest blue.
BLUE_PALETTE: List[str] = [
    "#3b82f6",
    "#538ef8",
    "#6899fa",
    "#7aa5fb",
    "#8cb1fc",
    "#9dbdfd",
    "#aec9fe",
    "#bfd4ff",
    "#d0e0ff",
]


def palette_color(index: int) -> str:
    return BLUE_PALETTE[index % len(BLUE_PALETTE)]
