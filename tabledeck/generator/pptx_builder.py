"""PPTX assembler — builds a picture-per-slide presentation package.

Starts from python-pptx's default package, reduces the slide master to a
single shared blank layout, sets a fixed canvas, and adds one slide per
table image with the image centred inside the margin.

Usage::

    from tabledeck.generator.pptx_builder import PresentationAssembler
    from tabledeck.schema import DeckConfig

    assembler = PresentationAssembler(DeckConfig())
    for png in image_paths:
        assembler.add_slide(png)
    assembler.save("tables.pptx")
"""

import io
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from PIL import Image
from pptx import Presentation
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.parts.image import Image as PackageImage, ImagePart
from pptx.util import Emu

from tabledeck.errors import PackageBuildFailure
from tabledeck.schema.models import DeckConfig

from .placement import PlacementRect, compute_placement

logger = logging.getLogger(__name__)

_LAYOUT_NAME = "Blank"
_BLANK_LAYOUT_INDEX = 6
_PICTURE_NAME = "TableImage"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SlideEntry:
    """One assembled slide and the identifiers wired into it."""
    index: int              # 0-based position in the deck
    slide_id: int           # sldId/@id in presentation.xml
    rel_id: str             # presentation -> slide relationship
    image_rel_id: str       # slide -> image relationship
    shape_id: int           # picture's id within the slide's shape tree
    pixel_size: tuple[int, int]
    placement: PlacementRect


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_image_bytes(image: str | Path | bytes | IO[bytes]) -> bytes:
    """Load image content from a path, raw bytes, or a binary stream."""
    if isinstance(image, bytes):
        return image
    if isinstance(image, (str, Path)):
        with open(image, "rb") as f:
            return f.read()
    return image.read()


def _pixel_size(data: bytes) -> tuple[int, int]:
    """Real pixel dimensions of encoded image bytes."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size


# ---------------------------------------------------------------------------
# PresentationAssembler
# ---------------------------------------------------------------------------

class PresentationAssembler:
    """Assembles a deck with one centred picture per slide.

    Parameters
    ----------
    config : DeckConfig
        Slide canvas, margin and pixel-to-EMU conversion.
    """

    def __init__(self, config: DeckConfig) -> None:
        self.config = config
        self.slide_entries: list[SlideEntry] = []
        try:
            self.prs = Presentation()
            self.layout = self._reduce_to_single_layout()
            self._set_canvas()
        except Exception as exc:
            raise PackageBuildFailure("Failed to initialise presentation package") from exc

    # ------------------------------------------------------------------
    # Package skeleton
    # ------------------------------------------------------------------

    def _reduce_to_single_layout(self):
        """Keep only the blank layout on the (single) slide master."""
        layouts = self.prs.slide_layouts
        keep = layouts.get_by_name(_LAYOUT_NAME)
        if keep is None:
            keep = layouts[min(_BLANK_LAYOUT_INDEX, len(layouts) - 1)]
        for layout in list(layouts):
            if layout.part is not keep.part:
                layouts.remove(layout)
        return keep

    def _set_canvas(self) -> None:
        """Set the canvas; python-pptx keeps presentation.xml in schema order."""
        presentation = self.prs.part._element
        presentation.get_or_add_sldIdLst()
        self.prs.slide_width = Emu(self.config.slide_width)
        self.prs.slide_height = Emu(self.config.slide_height)
        sld_sz = presentation.sldSz
        sld_sz.set("type", "screen16x9" if self.config.is_widescreen else "custom")

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    def add_slide(self, image: str | Path | bytes | IO[bytes]) -> SlideEntry:
        """Add a slide showing ``image`` (PNG/JPEG path, bytes or stream)."""
        index = len(self.slide_entries)
        try:
            data = _read_image_bytes(image)
            pixel_size = _pixel_size(data)
            cfg = self.config
            rect = compute_placement(
                pixel_size[0], pixel_size[1],
                cfg.slide_width, cfg.slide_height,
                cfg.margin, cfg.emu_per_pixel,
            )

            slide = self.prs.slides.add_slide(self.layout)
            image_rel_id = self._add_image_part(slide, data)
            shapes = slide.shapes
            pic = shapes._add_pic_from_image_part(
                slide.part.related_part(image_rel_id), image_rel_id,
                Emu(rect.x), Emu(rect.y), Emu(rect.width), Emu(rect.height),
            )
            picture = shapes._shape_factory(pic)
            picture.name = _PICTURE_NAME

            sld_id = self.prs.slides._sldIdLst[-1]
            entry = SlideEntry(
                index=index,
                slide_id=slide.slide_id,
                rel_id=sld_id.rId,
                image_rel_id=image_rel_id,
                shape_id=picture.shape_id,
                pixel_size=pixel_size,
                placement=rect,
            )
        except Exception as exc:
            raise PackageBuildFailure(f"Failed to add slide {index + 1}") from exc

        self.slide_entries.append(entry)
        logger.debug("Slide %d: id=%d image=%dx%d px scale=%.3f",
                     index + 1, entry.slide_id, pixel_size[0], pixel_size[1],
                     rect.scale)
        return entry

    def _add_image_part(self, slide, data: bytes) -> str:
        """Embed ``data`` as a new image part owned by ``slide``.

        ``shapes.add_picture`` would reuse any part with the same SHA-1, so
        identical tables on two slides would share one media file.
        """
        image_part = ImagePart.new(self.prs.part.package, PackageImage.from_blob(data))
        return slide.part.relate_to(image_part, RT.IMAGE)

    def add_slides(self, images) -> list[SlideEntry]:
        return [self.add_slide(image) for image in images]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Serialize the package and return the .pptx content."""
        buf = io.BytesIO()
        try:
            self.prs.save(buf)
        except Exception as exc:
            raise PackageBuildFailure("Failed to serialize presentation") from exc
        return buf.getvalue()

    def save(self, path: str | Path) -> Path:
        """Serialize and write to ``path`` without leaving a partial file."""
        return write_atomic(path, self.to_bytes())


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

def _target_mode(path: Path) -> int:
    """Mode for the written file: keep an existing target's, else follow umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomic(path: str | Path, data: bytes) -> Path:
    """Write bytes to a sibling temp file, then move it over ``path``."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        mode = _target_mode(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates the file 0600
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PackageBuildFailure(f"Failed to write {path}") from exc
    return path


def build_presentation(images, config: DeckConfig | None = None) -> bytes:
    """One-shot convenience: build a deck from images and return its bytes."""
    assembler = PresentationAssembler(config or DeckConfig())
    assembler.add_slides(images)
    return assembler.to_bytes()
