"""Deck configuration package — typed settings for the deck pipeline.

- models.py: DeckConfig and TableStyle dataclasses plus EMU constants
- loader.py: YAML serialization/deserialization
"""

from .loader import load_config, save_config
from .models import (
    EMU_PER_INCH,
    EMU_PER_PIXEL,
    NOTES_HEIGHT_EMU,
    NOTES_WIDTH_EMU,
    SLIDE_HEIGHT_EMU,
    SLIDE_ID_BASE,
    SLIDE_WIDTH_EMU,
    DeckConfig,
    TableStyle,
)

__all__ = [
    # Models
    "DeckConfig",
    "TableStyle",
    # Constants
    "EMU_PER_INCH",
    "EMU_PER_PIXEL",
    "NOTES_HEIGHT_EMU",
    "NOTES_WIDTH_EMU",
    "SLIDE_HEIGHT_EMU",
    "SLIDE_ID_BASE",
    "SLIDE_WIDTH_EMU",
    # Loader
    "load_config",
    "save_config",
]
