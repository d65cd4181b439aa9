"""Image placement — fits a raster image inside the slide canvas.

The image is shown at its natural size (pixels x EMU-per-pixel) unless it
exceeds the area left inside the margin, in which case it is scaled down.
It is never scaled up.  The result is centred on the slide.
"""

from dataclasses import dataclass

from tabledeck.schema.models import EMU_PER_PIXEL


@dataclass(frozen=True)
class PlacementRect:
    """Position and size of a placed image, in EMU."""
    x: int
    y: int
    width: int
    height: int
    scale: float

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


def compute_placement(pixel_width: int, pixel_height: int,
                      slide_width: int, slide_height: int,
                      margin: int, emu_per_pixel: int = EMU_PER_PIXEL) -> PlacementRect:
    """Compute the centred, aspect-preserving rectangle for an image.

    The height check recomputes the scale from the height ratio alone
    rather than composing it with the width ratio.

    Raises:
        ValueError: If the pixel size is not positive or the margin leaves
            no room on the slide.
    """
    if pixel_width <= 0 or pixel_height <= 0:
        raise ValueError(f"Image size must be positive, got {pixel_width}x{pixel_height}")
    avail_w = slide_width - 2 * margin
    avail_h = slide_height - 2 * margin
    if avail_w <= 0 or avail_h <= 0:
        raise ValueError(f"Margin {margin} leaves no room on a "
                         f"{slide_width}x{slide_height} slide")

    natural_w = pixel_width * emu_per_pixel
    natural_h = pixel_height * emu_per_pixel

    scale = 1.0
    if natural_w > avail_w:
        scale = avail_w / natural_w
    if natural_h * scale > avail_h:
        scale = avail_h / natural_h

    final_w = int(natural_w * scale)
    final_h = int(natural_h * scale)
    x = (slide_width - final_w) // 2
    y = (slide_height - final_h) // 2
    return PlacementRect(x=x, y=y, width=final_w, height=final_h, scale=scale)
