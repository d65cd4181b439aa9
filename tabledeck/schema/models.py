"""Deck configuration models - the contract between reader, renderer, and assembler.

Defines how many rows go on a slide, the slide canvas and margin (in EMU),
and the pixel geometry and colours used when a table page is rasterized.
All values have defaults; a config is built explicitly and passed down, never
read from module-level state.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from tabledeck.errors import ConfigError


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMU_PER_INCH = 914400
EMU_PER_PIXEL = 9525                 # 914400 / 96 DPI

SLIDE_WIDTH_EMU = 9144000            # 10"    (16:9)
SLIDE_HEIGHT_EMU = 5143500           # 5.625"
NOTES_WIDTH_EMU = 6858000
NOTES_HEIGHT_EMU = 9144000

SLIDE_ID_BASE = 256                  # first id python-pptx hands out in sldIdLst


# ---------------------------------------------------------------------------
# TableStyle — raster geometry and colours
# ---------------------------------------------------------------------------

@dataclass
class TableStyle:
    """Pixel geometry, typography and colours of a rendered table page."""
    # Typography
    font_family: str = "Arial"
    font_size: int = 20
    allow_default_font: bool = True      # fall back to Pillow's bundled font

    # Geometry (pixels)
    cell_padding: int = 15
    header_height: int = 60
    row_height: int = 45
    border_width: int = 1

    # Colors
    header_fill: str = "#E6E6E6"
    body_fill: str = "#FFFFFF"
    border_color: str = "#000000"
    text_color: str = "#000000"

    def validate(self) -> None:
        """Raise ConfigError if any size is not a positive integer."""
        for name in ("font_size", "header_height", "row_height", "border_width"):
            _require_positive_int(name, getattr(self, name))
        if not isinstance(self.cell_padding, int) or self.cell_padding < 0:
            raise ConfigError(f"cell_padding must be a non-negative integer, "
                              f"got {self.cell_padding!r}")
        for name in ("header_fill", "body_fill", "border_color", "text_color"):
            _require_hex_color(name, getattr(self, name))

    def to_dict(self) -> dict:
        return {
            "typography": {
                "font_family": self.font_family,
                "font_size": self.font_size,
                "allow_default_font": self.allow_default_font,
            },
            "geometry": {
                "cell_padding": self.cell_padding,
                "header_height": self.header_height,
                "row_height": self.row_height,
                "border_width": self.border_width,
            },
            "colors": {
                "header_fill": self.header_fill,
                "body_fill": self.body_fill,
                "border_color": self.border_color,
                "text_color": self.text_color,
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TableStyle":
        typo = d.get("typography", {})
        geo = d.get("geometry", {})
        colors = d.get("colors", {})
        return cls(
            font_family=typo.get("font_family", "Arial"),
            font_size=typo.get("font_size", 20),
            allow_default_font=typo.get("allow_default_font", True),
            cell_padding=geo.get("cell_padding", 15),
            header_height=geo.get("header_height", 60),
            row_height=geo.get("row_height", 45),
            border_width=geo.get("border_width", 1),
            header_fill=colors.get("header_fill", "#E6E6E6"),
            body_fill=colors.get("body_fill", "#FFFFFF"),
            border_color=colors.get("border_color", "#000000"),
            text_color=colors.get("text_color", "#000000"),
        )


# ---------------------------------------------------------------------------
# DeckConfig — top-level container
# ---------------------------------------------------------------------------

@dataclass
class DeckConfig:
    """Complete configuration for one deck build.

    Slide geometry is in EMU (English Metric Units); ``emu_per_pixel``
    converts raster pixels to slide length at a fixed 96 DPI.
    """
    rows_per_slide: int = 30
    slide_width: int = SLIDE_WIDTH_EMU
    slide_height: int = SLIDE_HEIGHT_EMU
    margin: int = 400000
    emu_per_pixel: int = EMU_PER_PIXEL
    style: TableStyle = field(default_factory=TableStyle)

    @property
    def available_width(self) -> int:
        return self.slide_width - 2 * self.margin

    @property
    def available_height(self) -> int:
        return self.slide_height - 2 * self.margin

    @property
    def is_widescreen(self) -> bool:
        """True when the canvas is exactly 16:9."""
        return self.slide_width * 9 == self.slide_height * 16

    def validate(self) -> None:
        """Raise ConfigError for values the pipeline cannot work with."""
        for name in ("rows_per_slide", "slide_width", "slide_height",
                     "emu_per_pixel"):
            _require_positive_int(name, getattr(self, name))
        if not isinstance(self.margin, int) or self.margin < 0:
            raise ConfigError(f"margin must be a non-negative integer, "
                              f"got {self.margin!r}")
        if self.available_width <= 0 or self.available_height <= 0:
            raise ConfigError(
                f"margin {self.margin} leaves no drawable area on a "
                f"{self.slide_width}x{self.slide_height} slide"
            )
        self.style.validate()

    def with_overrides(self, **overrides: Any) -> "DeckConfig":
        """Return a copy with non-None top-level or style fields replaced."""
        top_names = {f.name for f in fields(self)} - {"style"}
        style_names = {f.name for f in fields(TableStyle)}
        top: dict[str, Any] = {}
        style: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key in top_names:
                top[key] = value
            elif key in style_names:
                style[key] = value
            else:
                raise ConfigError(f"Unknown config field '{key}'")
        new_style = TableStyle(**{**self.style.__dict__, **style})
        values = {name: getattr(self, name) for name in top_names}
        values.update(top)
        return DeckConfig(style=new_style, **values)

    def to_dict(self) -> dict:
        return {
            "rows_per_slide": self.rows_per_slide,
            "slide": {
                "width": self.slide_width,
                "height": self.slide_height,
                "margin": self.margin,
                "emu_per_pixel": self.emu_per_pixel,
            },
            "style": self.style.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DeckConfig":
        slide = d.get("slide", {})
        return cls(
            rows_per_slide=d.get("rows_per_slide", 30),
            slide_width=slide.get("width", SLIDE_WIDTH_EMU),
            slide_height=slide.get("height", SLIDE_HEIGHT_EMU),
            margin=slide.get("margin", 400000),
            emu_per_pixel=slide.get("emu_per_pixel", EMU_PER_PIXEL),
            style=TableStyle.from_dict(d.get("style", {})),
        )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")


def _require_hex_color(name: str, value: Any) -> None:
    h = value.lstrip("#") if isinstance(value, str) else ""
    try:
        ok = len(h) == 6 and bytes.fromhex(h) is not None
    except ValueError:
        ok = False
    if not ok:
        raise ConfigError(f"{name} must be a '#RRGGBB' color, got {value!r}")
