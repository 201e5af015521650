from __future__ import annotations

__all__ = [
    "easing",
    "geom",
    "math",
]
