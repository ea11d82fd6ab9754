"""Named color map for painting onto the terminal grid.

Views refer to colors by name (``"status"``, ``"completion"``...) and the
map turns a name plus a highlight flag into the SGR prefix that the
terminal emits in front of the painted text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

COLORS: dict[str, int] = {
    "default": 9,
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
}

ATTRS: dict[str, int] = {
    "bold": 1,
    "dim": 2,
    "underline": 4,
    "reverse": 7,
}


@dataclass(frozen=True)
class ColorSpec:
    fg: str = "default"
    bg: str = "default"
    attrs: tuple[str, ...] = ()
    highlight_fg: str | None = None
    highlight_bg: str | None = None
    highlight_attrs: tuple[str, ...] | None = None

    def sgr(self, highlight: bool = False) -> str:
        fg, bg, attrs = self.fg, self.bg, self.attrs
        if highlight:
            fg = self.highlight_fg or fg
            bg = self.highlight_bg or bg
            attrs = (
                self.highlight_attrs
                if self.highlight_attrs is not None
                else attrs + ("reverse",)
            )
        codes = [str(ATTRS[a]) for a in attrs]
        codes.append(str(30 + COLORS[fg]))
        codes.append(str(40 + COLORS[bg]))
        return f"\x1b[0;{';'.join(codes)}m"


DEFAULT_COLORS: dict[str, ColorSpec] = {
    "none": ColorSpec(),
    "status": ColorSpec("white", "blue", ("bold",)),
    "text": ColorSpec(),
    "completion": ColorSpec("cyan"),
    "completion_header": ColorSpec("white", attrs=("bold",)),
    "directory": ColorSpec("blue", attrs=("bold",)),
    "marked": ColorSpec("yellow", attrs=("bold",)),
    "error": ColorSpec("red", attrs=("bold",)),
}


class Colormap:
    """Maps color names to SGR sequences, with highlight variants."""

    def __init__(self, colors: dict[str, ColorSpec] | None = None) -> None:
        self._colors: dict[str, ColorSpec] = dict(DEFAULT_COLORS)
        if colors:
            self._colors.update(colors)

    def add(self, name: str, spec: ColorSpec) -> None:
        """Register or replace the color *name*."""
        for color in (spec.fg, spec.bg, spec.highlight_fg, spec.highlight_bg):
            if color is not None and color not in COLORS:
                raise ValueError(f"unknown color: {color!r}")
        self._colors[name] = spec

    def __contains__(self, name: str) -> bool:
        return name in self._colors

    def color_for(self, name: str | None, highlight: bool = False) -> str:
        """Return the SGR prefix for *name*; unknown names fall back to ``none``."""
        spec = self._colors.get(name or "none")
        if spec is None:
            logger.debug("unknown color %r, using default", name)
            spec = self._colors["none"]
        return spec.sgr(highlight)
