"""QA validation package for Table Deck Builder.

Validates generated PPTX packages — master/layout counts, canvas size,
presentation property order, slide ids, one picture per slide, and image
placement inside the margin.
"""

from .validator import (
    Issue,
    PackageValidator,
    QAResult,
    validate_presentation,
)

__all__ = [
    "Issue",
    "PackageValidator",
    "QAResult",
    "validate_presentation",
]
