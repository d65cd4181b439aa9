"""Presentation generator package — table rendering and PPTX assembly.

Modules:
    fonts: Font resolution and text measurement
    table_image: Table page rasterizer
    placement: Image fitting and centring on the slide canvas
    pptx_builder: Picture-per-slide package assembly
"""

from .fonts import FontPair, load_fonts, text_width
from .placement import PlacementRect, compute_placement
from .pptx_builder import (
    PresentationAssembler,
    SlideEntry,
    build_presentation,
    write_atomic,
)
from .table_image import TableRasterizer, render_table_image

__all__ = [
    "FontPair",
    "PlacementRect",
    "PresentationAssembler",
    "SlideEntry",
    "TableRasterizer",
    "build_presentation",
    "compute_placement",
    "load_fonts",
    "render_table_image",
    "text_width",
    "write_atomic",
]
