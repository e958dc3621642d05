"""Shared data models for the rendering pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .datasheet import Datasheet


@dataclass
class HeadingEntry:
    """One row of the table of contents.

    ``text`` is the numbered heading text (e.g. "2.1.3 Sensors") and doubles
    as the key used to find the heading in the rendered PDF. ``item`` is the
    table of contents element that receives the page number.
    A page number of 0 means "not resolved yet".
    """

    text: str
    level: int
    anchor: str
    item: Optional[Any] = field(default=None, repr=False, compare=False)
    page_number: int = 0

    @property
    def is_resolved(self) -> bool:
        return self.page_number > 0

    def resolve(self, page_number: int) -> None:
        """Assign the page number. Only allowed once, and only with a 1-based page."""
        if page_number < 1:
            raise ValueError(f"Page numbers are 1-based, got {page_number}")
        if self.is_resolved:
            raise ValueError(f"Heading '{self.text}' already resolved to page {self.page_number}")
        self.page_number = page_number


@dataclass
class RenderOutcome:
    """A successfully rendered datasheet."""

    datasheet: "Datasheet"
    pdf_path: Path
