"""Deck pipeline — runs read, chunk, rasterize, assemble and write in order.

Each stage yields a ``StageResult``.  The first failing stage ends the run;
the ``RunReport`` names that stage, the error kind, and its cause.  Table
images live in a temporary directory that is removed on every exit path.

Usage::

    from tabledeck.pipeline import run
    from tabledeck.schema import DeckConfig

    report = run("data.xlsx", DeckConfig(), output="tables.pptx")
    if not report.ok:
        print(report.failure_message())
"""

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from tabledeck.errors import TableDeckError
from tabledeck.generator.pptx_builder import (
    PresentationAssembler,
    SlideEntry,
    write_atomic,
)
from tabledeck.generator.table_image import TableRasterizer
from tabledeck.processor.chunking import RowChunker
from tabledeck.processor.ingestion import read_rows, split_header
from tabledeck.schema.models import DeckConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class StageResult:
    """Outcome of one pipeline stage."""
    stage: str                          # "config", "read", "chunk", ...
    ok: bool
    detail: str = ""
    error: TableDeckError | None = None

    def __str__(self) -> str:
        if self.ok:
            return f"{self.stage}: {self.detail}"
        return f"{self.stage} failed: {self.error.describe()}"


@dataclass
class RunReport:
    """Aggregated outcome of a pipeline run."""
    stages: list[StageResult] = field(default_factory=list)
    header: list[str] = field(default_factory=list)
    row_count: int = 0
    chunk_sizes: list[int] = field(default_factory=list)
    slides: list[SlideEntry] = field(default_factory=list)
    pptx_bytes: bytes | None = None
    output: Path | None = None

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.stages)

    @property
    def failure(self) -> StageResult | None:
        """The stage that ended the run, if any."""
        for s in self.stages:
            if not s.ok:
                return s
        return None

    @property
    def error(self) -> TableDeckError | None:
        failure = self.failure
        return failure.error if failure else None

    def failure_message(self) -> str:
        failure = self.failure
        return str(failure) if failure else ""

    def summary(self) -> str:
        """One-line summary string."""
        if not self.ok:
            return f"FAILED at {self.failure.stage}: {self.error.kind}"
        return (f"OK: {len(self.slides)} slide(s) from {self.row_count} "
                f"data row(s) x {len(self.header)} column(s)")


def _stage(report: RunReport, name: str, func, *args):
    """Run one stage, recording its result; returns the stage's value."""
    try:
        value, detail = func(*args)
    except TableDeckError as exc:
        report.stages.append(StageResult(name, False, error=exc))
        logger.error("Stage %s failed: %s", name, exc.describe())
        return None
    report.stages.append(StageResult(name, True, detail))
    logger.info("%s: %s", name, detail)
    return value


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def _check_config(config: DeckConfig):
    config.validate()
    return config, (f"{config.rows_per_slide} rows/slide, "
                    f"{config.slide_width}x{config.slide_height} EMU canvas")


def _read(source, sheet):
    rows = read_rows(source, sheet)
    return rows, f"Read {len(rows)} row(s) from {source}"


def _chunk(rows, config: DeckConfig):
    header, data = split_header(rows)
    chunks = RowChunker(config.rows_per_slide).chunk(data)
    detail = (f"Found {len(header)} columns and {len(data)} data rows "
              f"-> {len(chunks)} page(s)")
    return (header, data, chunks), detail


def _rasterize(header, chunks, config: DeckConfig, workdir: Path):
    rasterizer = TableRasterizer(config.style)
    paths = []
    for i, chunk in enumerate(chunks):
        path = workdir / f"table_part_{i}.png"
        paths.append(rasterizer.render_to_file(header, chunk, path))
    return paths, f"Rendered {len(paths)} table image(s) with font {rasterizer.fonts.name!r}"


def _assemble(paths, config: DeckConfig):
    assembler = PresentationAssembler(config)
    entries = assembler.add_slides(paths)
    data = assembler.to_bytes()
    return (entries, data), f"Assembled {len(entries)} slide(s) ({len(data):,} bytes)"


def _write(output, data: bytes):
    path = write_atomic(output, data)
    return path, f"Written: {path} ({len(data):,} bytes)"


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def build_deck(rows, config: DeckConfig | None = None,
               report: RunReport | None = None) -> RunReport:
    """Build a deck from rows already read (header first).

    The built package is returned in ``report.pptx_bytes``; nothing is
    written to disk except temporary table images.
    """
    config = config or DeckConfig()
    report = report or RunReport()

    if not any(s.stage == "config" for s in report.stages):
        _stage(report, "config", _check_config, config)
        if not report.ok:
            return report

    chunked = _stage(report, "chunk", _chunk, rows, config)
    if not report.ok:
        return report
    header, data, chunks = chunked
    report.header = header
    report.row_count = len(data)
    report.chunk_sizes = [len(c) for c in chunks]

    with tempfile.TemporaryDirectory(prefix="tabledeck-") as workdir:
        paths = _stage(report, "rasterize", _rasterize, header, chunks,
                       config, Path(workdir))
        if not report.ok:
            return report
        assembled = _stage(report, "assemble", _assemble, paths, config)
        if not report.ok:
            return report

    report.slides, report.pptx_bytes = assembled
    return report


def run(source, config: DeckConfig | None = None, output=None,
        sheet=None) -> RunReport:
    """Read a spreadsheet and build its deck.

    Parameters
    ----------
    source : str | Path
        Excel workbook or CSV file; the first row is the header.
    config : DeckConfig, optional
        Defaults to ``DeckConfig()``.
    output : str | Path, optional
        If given, the deck is written there once every stage has succeeded.
    sheet : str | int, optional
        Worksheet name or index for Excel sources.
    """
    config = config or DeckConfig()
    report = RunReport()
    _stage(report, "config", _check_config, config)
    if not report.ok:
        return report

    rows = _stage(report, "read", _read, source, sheet)
    if not report.ok:
        return report

    build_deck(rows, config, report)
    if not report.ok or output is None:
        return report

    report.output = _stage(report, "write", _write, output, report.pptx_bytes)
    return report
