"""Data processor module for Table Deck Builder."""

from .chunking import RowChunker, chunk_plan, chunk_rows
from .ingestion import (
    cell_text,
    detect_encoding,
    frame_to_rows,
    read_csv_rows,
    read_excel_rows,
    read_rows,
    split_header,
)
