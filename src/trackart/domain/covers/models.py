"""
Cover domain models.

A reconciliation pass maps every track to one CoverOutcome; the pass result
is an immutable tally of those outcomes rather than shared counters.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from trackart.domain.library.models import Track


class CoverOutcome(str, Enum):
    """How a track ended up with its cover in one pass."""

    EXISTING = "existing"  # Reused an artifact already in the covers directory
    EXTRACTED = "extracted"  # Embedded artwork from the audio file
    DOWNLOADED = "downloaded"  # External catalog lookup
    GENERATED = "generated"  # Procedural gradient placeholder
    ERROR = "error"


# (track) -> finished cover bytes, or None to fall through to the next strategy
CoverSource = Callable[[Track], Optional[bytes]]


@dataclass(frozen=True)
class CoverStrategy:
    """One step of the fallback chain."""

    name: str
    outcome: CoverOutcome
    fetch: CoverSource


@dataclass(frozen=True)
class ReconcileResult:
    """Aggregate counts of one reconciliation pass."""

    total: int = 0
    existing: int = 0
    extracted: int = 0
    downloaded: int = 0
    generated: int = 0
    errors: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[CoverOutcome]) -> "ReconcileResult":
        counts = Counter(outcomes)
        return cls(
            total=sum(counts.values()),
            existing=counts[CoverOutcome.EXISTING],
            extracted=counts[CoverOutcome.EXTRACTED],
            downloaded=counts[CoverOutcome.DOWNLOADED],
            generated=counts[CoverOutcome.GENERATED],
            errors=counts[CoverOutcome.ERROR],
        )

    @property
    def created(self) -> int:
        """Number of new cover artifacts written."""
        return self.extracted + self.downloaded + self.generated

    def summary_rows(self) -> list[tuple[str, int]]:
        return [
            ("Total tracks", self.total),
            ("Existing covers", self.existing),
            ("Extracted from files", self.extracted),
            ("Downloaded from iTunes", self.downloaded),
            ("Generated gradients", self.generated),
            ("Errors", self.errors),
        ]
