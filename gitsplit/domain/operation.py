"""
Operation result domain objects for gitsplit.

Provides standardized result types for a split pass: one detail per
(reference, split configuration) pair, one result per publication, and a
summary collecting them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class SplitStatus(Enum):
    """What happened to one (reference, configuration) pair."""
    SPLIT = "split"      # cache was stale, the splitter ran
    CACHED = "cached"    # cache was fresh, nothing recomputed
    STALE = "stale"      # reported by status only: a split would run
    FAILED = "failed"


class PublishStatus(Enum):
    """Outcome of a push to one target."""
    PUBLISHED = "published"
    ALREADY_PUBLISHED = "already_published"


@dataclass
class SplitDetail:
    """
    Details of a single (reference, split configuration) pair.
    """
    reference: str
    prefixes: List[str]
    status: SplitStatus
    source_id: Optional[str] = None
    target_id: Optional[str] = None
    targets: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'reference': self.reference,
            'prefixes': self.prefixes,
            'status': self.status.value,
            'source_id': self.source_id,
            'target_id': self.target_id,
            'targets': self.targets,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class PublishResult:
    """Result of publishing one reference to one remote."""
    remote: str
    reference: str
    object_id: str
    status: PublishStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            'remote': self.remote,
            'reference': self.reference,
            'object_id': self.object_id,
            'status': self.status.value,
        }


@dataclass
class SplitReport:
    """
    Summary of one split pass.

    Collects statistics and details for every pair the orchestrator visited.
    """
    total: int = 0
    split: int = 0
    cached: int = 0
    failed: int = 0
    details: List[SplitDetail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no failures occurred."""
        return self.failed == 0

    def add_detail(self, detail: SplitDetail) -> None:
        """Add a pair detail and update counts."""
        self.details.append(detail)
        self.total += 1

        if detail.status == SplitStatus.SPLIT:
            self.split += 1
        elif detail.status == SplitStatus.CACHED:
            self.cached += 1
        elif detail.status == SplitStatus.FAILED:
            self.failed += 1
            if detail.error:
                self.errors.append(f"{detail.reference}: {detail.error}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'total': self.total,
            'split': self.split,
            'cached': self.cached,
            'failed': self.failed,
            'errors': self.errors,
        }
