"""Table Deck Builder — spreadsheet rows rendered as table images on slides."""

__version__ = "0.1.0"
