"""Font resolution and text measurement for table rendering.

The rasterizer only needs two capabilities from a font: measuring the
advance width of a string and drawing it.  ``load_fonts`` resolves a
regular/bold pair with Pillow, trying the configured family, then a list of
common sans-serif files, then Pillow's bundled default font.
"""

import logging
from dataclasses import dataclass
from typing import Any

from PIL import ImageFont

from tabledeck.errors import FontUnavailable
from tabledeck.schema.models import TableStyle

logger = logging.getLogger(__name__)


# Known font file names per family: (regular files, bold files).
_FAMILY_FILES = {
    "arial": (("arial.ttf", "Arial.ttf"),
              ("arialbd.ttf", "Arial Bold.ttf", "Arial_Bold.ttf")),
    "dejavu sans": (("DejaVuSans.ttf",), ("DejaVuSans-Bold.ttf",)),
    "liberation sans": (("LiberationSans-Regular.ttf",),
                        ("LiberationSans-Bold.ttf",)),
    "helvetica": (("Helvetica.ttc", "Helvetica.ttf"),
                  ("Helvetica-Bold.ttf",)),
}

# Tried in order after the configured family.
_FALLBACK_FAMILIES = ("arial", "liberation sans", "dejavu sans", "helvetica")


@dataclass(frozen=True)
class FontPair:
    """Regular and bold faces at one size."""
    regular: Any
    bold: Any
    name: str = ""


def text_width(font, text: str) -> float:
    """Advance width of ``text`` in pixels (0 for empty text)."""
    if not text:
        return 0.0
    return font.getlength(text)


def _family_files(family: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Candidate (regular, bold) file names for a family or font path."""
    key = family.strip().lower()
    if key in _FAMILY_FILES:
        return _FAMILY_FILES[key]
    if key.endswith((".ttf", ".otf", ".ttc")):
        return (family,), ()
    compact = family.replace(" ", "")
    return ((f"{family}.ttf", f"{compact}.ttf", f"{compact}-Regular.ttf"),
            (f"{compact}-Bold.ttf", f"{compact}bd.ttf"))


def _try_truetype(names, size):
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return None


def _load_family(family: str, size: int) -> FontPair | None:
    regular_names, bold_names = _family_files(family)
    regular = _try_truetype(regular_names, size)
    if regular is None:
        return None
    bold = _try_truetype(bold_names, size)
    if bold is None:
        logger.debug("No bold face for %s, using regular", family)
        bold = regular
    return FontPair(regular=regular, bold=bold, name=family)


def load_fonts(style: TableStyle) -> FontPair:
    """Resolve the regular/bold font pair for a table style.

    Raises:
        FontUnavailable: If no candidate family loads and the bundled
            default font is disabled or unavailable.
    """
    families = [style.font_family]
    families += [f for f in _FALLBACK_FAMILIES if f != style.font_family.lower()]

    for family in families:
        pair = _load_family(family, style.font_size)
        if pair is not None:
            if family != style.font_family:
                logger.info("Font %r not found, using %r", style.font_family, family)
            return pair

    if style.allow_default_font:
        try:
            default = ImageFont.load_default(size=style.font_size)
        except (OSError, TypeError) as exc:
            raise FontUnavailable("No usable font found on this system") from exc
        logger.info("No system font found, using Pillow's default font")
        return FontPair(regular=default, bold=default, name="default")

    raise FontUnavailable(
        f"No usable font found (tried: {', '.join(families)})"
    )
