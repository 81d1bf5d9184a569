"""
Palette color assignment for tags and workstations.

New entities without an explicit color get the palette color currently
used the fewest times; ties go to the earliest palette entry. Batch
operations thread a ``ColorTally`` through every assignment so that
colors stay balanced inside the batch as well.
"""

from collections.abc import Iterable, Sequence

# 16-color preset palette, stored as HEX
TAG_COLOR_PALETTE: tuple[str, ...] = (
    # Green
    "#4A9A5E",
    "#358660",
    # Teal
    "#0F9B89",
    "#16827D",
    # Cyan
    "#33A3B4",
    "#398BA9",
    # Azure
    "#5DA1C8",
    # Blue
    "#488ACB",
    "#537ABB",
    "#5365A3",
    # Indigo
    "#7470B9",
    "#6D5C9C",
    # Purple
    "#8E70B0",
    "#825E93",
    # Slate
    "#798898",
    "#576574",
)


def normalize_color(color: str | None) -> str | None:
    """Trim a user-supplied color; blank means "pick one for me"."""
    if color is None:
        return None
    trimmed = color.strip()
    return trimmed or None


class ColorTally:
    """Running per-color usage counts over a fixed palette."""

    def __init__(
        self,
        used_colors: Iterable[str] = (),
        palette: Sequence[str] = TAG_COLOR_PALETTE,
    ):
        self.palette = tuple(palette)
        self._counts: dict[str, int] = {color.lower(): 0 for color in self.palette}
        for color in used_colors:
            self.record(color)

    def record(self, color: str | None) -> None:
        """Count one more use of ``color``. Off-palette colors are ignored."""
        if not color:
            return
        normalized = color.strip().lower()
        if normalized in self._counts:
            self._counts[normalized] += 1

    def count(self, color: str) -> int:
        return self._counts.get(color.strip().lower(), 0)

    def least_used(self) -> str:
        """Palette color with the fewest uses, first in palette order on ties."""
        selected = self.palette[0]
        min_count: int | None = None
        for color in self.palette:
            current = self._counts[color.lower()]
            if min_count is None or current < min_count:
                min_count = current
                selected = color
        return selected

    def assign(self) -> str:
        """Pick the least used color and record it."""
        color = self.least_used()
        self.record(color)
        return color


def pick_color(
    used_colors: Iterable[str], palette: Sequence[str] = TAG_COLOR_PALETTE
) -> str:
    """Least used palette color given the colors already in use."""
    return ColorTally(used_colors, palette).least_used()


def resolve_color(explicit: str | None, tally: ColorTally) -> str:
    """
    Return the explicit color (trimmed) or assign one from ``tally``.

    An explicit palette color is still recorded so later picks in the same
    batch account for it.
    """
    color = normalize_color(explicit)
    if color is None:
        return tally.assign()
    tally.record(color)
    return color
