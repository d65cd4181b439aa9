"""Table rasterizer — renders a header and one chunk of rows as a grid image.

Column widths are computed per chunk from the widest text in each column.
The image is sized exactly to the table; nothing is resized afterwards.

Usage::

    from tabledeck.generator.table_image import TableRasterizer

    rasterizer = TableRasterizer(config.style)
    image = rasterizer.render(["A", "B"], [["1", "2"], ["3", "4"]])
    image.save("page.png")
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw

from tabledeck.errors import RenderError
from tabledeck.schema.models import TableStyle

from .fonts import FontPair, load_fonts, text_width

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' hex string to an (r, g, b) tuple."""
    h = hex_color.lstrip("#")
    return tuple(bytes.fromhex(h))


def _cell(row, index: int) -> str:
    """Text of a row's cell, or "" when the row is too short."""
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


# ---------------------------------------------------------------------------
# TableRasterizer
# ---------------------------------------------------------------------------

class TableRasterizer:
    """Renders table pages as RGB images.

    Parameters
    ----------
    style : TableStyle
        Geometry, typography and colours.
    fonts : FontPair, optional
        Pre-loaded fonts.  Resolved from ``style`` on first use if omitted.
    """

    def __init__(self, style: TableStyle, fonts: FontPair | None = None) -> None:
        self.style = style
        self._fonts = fonts

    @property
    def fonts(self) -> FontPair:
        if self._fonts is None:
            self._fonts = load_fonts(self.style)
        return self._fonts

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def column_widths(self, header: list[str], chunk: list[list[str]]) -> list[int]:
        """Pixel width of each column for this chunk.

        Every cell, header included, is measured with the regular face.
        """
        font = self.fonts.regular
        pad = self.style.cell_padding
        widths = []
        for c, title in enumerate(header):
            max_w = text_width(font, str(title))
            for row in chunk:
                max_w = max(max_w, text_width(font, _cell(row, c)))
            widths.append(int(max_w) + pad * 2)
        return widths

    def canvas_size(self, header: list[str], chunk: list[list[str]]) -> tuple[int, int]:
        widths = self.column_widths(header, chunk)
        return sum(widths), self.style.header_height + len(chunk) * self.style.row_height

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, header: list[str], chunk: list[list[str]]) -> Image.Image:
        """Render the header and chunk rows into a new image."""
        if not header:
            raise RenderError("Cannot render a table with no columns")

        style = self.style
        fonts = self.fonts
        widths = self.column_widths(header, chunk)
        width = sum(widths)
        height = style.header_height + len(chunk) * style.row_height
        if width <= 0:
            raise RenderError(
                f"Table has {len(widths)} column(s) but no visible width; "
                f"every cell is empty and cell_padding is 0"
            )

        try:
            image = Image.new("RGB", (width, height), _hex_to_rgb(style.body_fill))
            draw = ImageDraw.Draw(image)
            draw.rectangle((0, 0, width - 1, style.header_height - 1),
                           fill=_hex_to_rgb(style.header_fill))

            self._draw_row(draw, header, widths, 0, style.header_height,
                           fonts.bold, (width, height))
            y = style.header_height
            for row in chunk:
                self._draw_row(draw, row, widths, y, style.row_height,
                               fonts.regular, (width, height))
                y += style.row_height
        except (OSError, ValueError) as exc:
            raise RenderError(f"Failed to render {width}x{height} table image") from exc

        logger.debug("Rendered table %dx%d (%d cols, %d rows)",
                     width, height, len(widths), len(chunk))
        return image

    def _draw_row(self, draw, row, widths, y, cell_height, font, canvas) -> None:
        """Draw one band of bordered cells with left-aligned text."""
        style = self.style
        border = _hex_to_rgb(style.border_color)
        text_color = _hex_to_rgb(style.text_color)
        max_x, max_y = canvas[0] - 1, canvas[1] - 1

        x = 0
        for c, col_width in enumerate(widths):
            if col_width <= 0:
                continue
            draw.rectangle(
                (x, y, min(x + col_width, max_x), min(y + cell_height, max_y)),
                outline=border, width=style.border_width,
            )
            text = _cell(row, c)
            if text:
                # Quarter-height offset, not vertical centring.
                origin = (x + style.cell_padding, y + cell_height // 4)
                draw.text(origin, text, fill=text_color, font=font)
            x += col_width

    def render_to_file(self, header: list[str], chunk: list[list[str]],
                       path: str | Path) -> Path:
        """Render and save the image as PNG; returns the path."""
        path = Path(path)
        image = self.render(header, chunk)
        try:
            image.save(path, format="PNG")
        except OSError as exc:
            raise RenderError(f"Failed to write table image {path}") from exc
        finally:
            image.close()
        return path


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def render_table_image(header: list[str], chunk: list[list[str]],
                       style: TableStyle | None = None) -> Image.Image:
    """One-shot convenience: render a table page with a default style."""
    return TableRasterizer(style or TableStyle()).render(header, chunk)
