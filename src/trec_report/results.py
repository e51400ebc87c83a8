"""Per-element placement outcomes and the aggregated render report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Status(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class PlacementResult:
    status: Status
    reason: str = ""

    @classmethod
    def ok(cls) -> "PlacementResult":
        return cls(Status.OK)

    @classmethod
    def skipped(cls, reason: str) -> "PlacementResult":
        return cls(Status.SKIPPED, reason)

    @classmethod
    def degraded(cls, reason: str) -> "PlacementResult":
        return cls(Status.DEGRADED, reason)

    @property
    def placed(self) -> bool:
        """True when something was drawn, even in a degraded mode."""
        return self.status is not Status.SKIPPED


class RenderError(RuntimeError):
    """The document could not be finalized or written."""


@dataclass
class RenderReport:
    """Ordered log of every element the walker tried to place."""

    entries: List[Tuple[str, PlacementResult]] = field(default_factory=list)
    page_count: int = 0
    output_path: Optional[str] = None

    def record(self, element: str, result: PlacementResult) -> PlacementResult:
        self.entries.append((element, result))
        return result

    def counts(self) -> Counter:
        return Counter(r.status for _, r in self.entries)

    @property
    def skipped(self) -> List[Tuple[str, PlacementResult]]:
        return [e for e in self.entries if e[1].status is Status.SKIPPED]

    @property
    def degraded(self) -> List[Tuple[str, PlacementResult]]:
        return [e for e in self.entries if e[1].status is Status.DEGRADED]

    def summary(self) -> str:
        c = self.counts()
        return (f"{self.page_count} pages, {c[Status.OK]} placed, "
                f"{c[Status.DEGRADED]} degraded, {c[Status.SKIPPED]} skipped")
