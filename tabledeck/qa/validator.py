"""QA validator — inspects a generated table deck package.

Checks the structural contract of a picture-per-slide deck: a single master
with a single shared layout, the configured canvas, schema-ordered
presentation properties, consecutive slide ids, and exactly one picture per
slide whose image resolves to its own part and sits inside the margin.  Uses
python-pptx to read the package back and lxml to inspect raw element order.

Usage::

    from tabledeck.qa.validator import PackageValidator

    validator = PackageValidator(config)
    result = validator.validate(pptx_bytes, expected_slides=3)
    assert result.passed, result.summary()
"""

import io
import zipfile
from collections import Counter
from dataclasses import dataclass, field

from lxml import etree
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.exc import PackageNotFoundError

from tabledeck.schema.models import SLIDE_ID_BASE, DeckConfig

# presentation.xml children that must appear, in schema order.
PRESENTATION_ORDER = (
    "sldMasterIdLst",
    "sldIdLst",
    "sldSz",
    "notesSz",
    "defaultTextStyle",
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # -1 for package-level issues
    category: str       # e.g. "slide_count", "picture_count", "placement"
    message: str

    def __str__(self) -> str:
        loc = "package" if self.slide_index < 0 else f"slide {self.slide_index}"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)
    slide_count: int = 0

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    def add(self, severity: str, slide_index: int, category: str,
            message: str) -> None:
        self.issues.append(Issue(severity, slide_index, category, message))

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s) across {self.slide_count} slide(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# PackageValidator
# ---------------------------------------------------------------------------

class PackageValidator:
    """Validates a generated deck against the config it was built with.

    Parameters
    ----------
    config : DeckConfig
        Canvas size and margin the deck is expected to honour.
    """

    def __init__(self, config: DeckConfig | None = None) -> None:
        self.config = config or DeckConfig()

    def validate(self, pptx_bytes: bytes,
                 expected_slides: int | None = None) -> QAResult:
        """Run all checks on a built package.

        Parameters
        ----------
        pptx_bytes : bytes
            The raw .pptx content.
        expected_slides : int, optional
            Slide count the deck should have (one per chunk).
        """
        result = QAResult()
        try:
            prs = Presentation(io.BytesIO(pptx_bytes))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as exc:
            result.add("error", -1, "package_open", f"Cannot open package: {exc}")
            return result

        result.slide_count = len(prs.slides)
        self._check_masters(prs, result)
        self._check_dimensions(prs, result)
        self._check_property_order(prs, result)
        self._check_slide_ids(prs, result)
        if expected_slides is not None and result.slide_count != expected_slides:
            result.add("error", -1, "slide_count",
                       f"Expected {expected_slides} slides, got {result.slide_count}")

        seen_images: Counter = Counter()
        for index, slide in enumerate(prs.slides):
            self._check_slide(index, slide, result, seen_images)

        for partname, count in seen_images.items():
            if count > 1:
                result.add("error", -1, "shared_image",
                           f"Image part {partname} is shown on {count} slides")
        return result

    # ------------------------------------------------------------------
    # Package-level checks
    # ------------------------------------------------------------------

    def _check_masters(self, prs, result: QAResult) -> None:
        """Exactly one master with exactly one layout, used by every slide."""
        masters = list(prs.slide_masters)
        if len(masters) != 1:
            result.add("error", -1, "master_count",
                       f"Expected 1 slide master, got {len(masters)}")
            return
        layouts = list(masters[0].slide_layouts)
        if len(layouts) != 1:
            result.add("error", -1, "layout_count",
                       f"Expected 1 slide layout, got {len(layouts)}")
            return
        for index, slide in enumerate(prs.slides):
            if slide.slide_layout.part is not layouts[0].part:
                result.add("error", index, "layout",
                           "Slide does not use the shared layout")

    def _check_dimensions(self, prs, result: QAResult) -> None:
        cfg = self.config
        if prs.slide_width != cfg.slide_width or prs.slide_height != cfg.slide_height:
            result.add("error", -1, "dimensions",
                       f"Slide size {prs.slide_width}x{prs.slide_height} != "
                       f"expected {cfg.slide_width}x{cfg.slide_height}")

    def _check_property_order(self, prs, result: QAResult) -> None:
        """presentation.xml properties must be present and in schema order."""
        names = [etree.QName(child).localname for child in prs.part._element
                 if isinstance(child.tag, str)]
        present = [n for n in names if n in PRESENTATION_ORDER]
        missing = [n for n in PRESENTATION_ORDER if n not in present]
        if missing:
            result.add("error", -1, "property_missing",
                       f"presentation.xml is missing: {', '.join(missing)}")
        expected = [n for n in PRESENTATION_ORDER if n in present]
        if present != expected:
            result.add("error", -1, "property_order",
                       f"presentation.xml order {present} != {expected}")

    def _check_slide_ids(self, prs, result: QAResult) -> None:
        """Slide ids run base, base+1, ... and relationship ids are unique."""
        sld_ids = list(prs.slides._sldIdLst)
        ids = [int(s.id) for s in sld_ids]
        expected = list(range(SLIDE_ID_BASE, SLIDE_ID_BASE + len(ids)))
        if ids != expected:
            result.add("error", -1, "slide_ids",
                       f"Slide ids {ids} are not consecutive from {SLIDE_ID_BASE}")
        rel_ids = [s.rId for s in sld_ids]
        if len(set(rel_ids)) != len(rel_ids):
            result.add("error", -1, "relationship_ids",
                       "Duplicate slide relationship ids in presentation")

    # ------------------------------------------------------------------
    # Per-slide checks
    # ------------------------------------------------------------------

    def _check_slide(self, index: int, slide, result: QAResult,
                     seen_images: Counter) -> None:
        shape_ids = slide.shapes._spTree.xpath(".//p:cNvPr/@id")
        duplicates = [i for i, n in Counter(shape_ids).items() if n > 1]
        if duplicates:
            result.add("error", index, "shape_ids",
                       f"Duplicate shape ids: {', '.join(sorted(duplicates))}")

        pictures = [s for s in slide.shapes
                    if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
        if len(pictures) != 1:
            result.add("error", index, "picture_count",
                       f"Expected 1 picture, got {len(pictures)}")
        others = len(slide.shapes) - len(pictures)
        if others:
            result.add("warning", index, "extra_shapes",
                       f"{others} non-picture shape(s) on slide")

        for picture in pictures:
            self._check_picture(index, picture, result, seen_images)

    def _check_picture(self, index: int, picture, result: QAResult,
                       seen_images: Counter) -> None:
        try:
            image = picture.image
        except (KeyError, ValueError) as exc:
            result.add("error", index, "image_missing",
                       f"Picture image does not resolve: {exc}")
            return
        image_part = picture.part.related_part(picture._element.blip_rId)
        seen_images[str(image_part.partname)] += 1

        cfg = self.config
        left, top = picture.left, picture.top
        right, bottom = left + picture.width, top + picture.height
        if (left < cfg.margin or top < cfg.margin
                or right > cfg.slide_width - cfg.margin
                or bottom > cfg.slide_height - cfg.margin):
            result.add("error", index, "placement",
                       f"Picture ({left}, {top}, {right}, {bottom}) extends "
                       f"into the {cfg.margin} EMU margin")

        # Centred to within one EMU of rounding.
        if abs((left + right) - cfg.slide_width) > 1 or abs((top + bottom) - cfg.slide_height) > 1:
            result.add("warning", index, "placement",
                       "Picture is not centred on the slide")

        px_w, px_h = image.size
        if px_w and px_h and picture.height:
            drift = abs(picture.width / picture.height - px_w / px_h) / (px_w / px_h)
            if drift > 0.01:
                result.add("warning", index, "aspect_ratio",
                           f"Picture aspect ratio differs from image by {drift:.1%}")


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def validate_presentation(pptx_bytes: bytes, config: DeckConfig | None = None,
                          expected_slides: int | None = None) -> QAResult:
    """One-shot convenience: validate a deck package."""
    return PackageValidator(config).validate(pptx_bytes, expected_slides)
