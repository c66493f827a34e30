"""
Typed data models for the branch reconciliation engine.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

CATEGORY_KEYS = (
    "coordinates",
    "entrances",
    "schedule",
    "contacts",
    "naming",
    "activities",
    "services",
    "media",
    "status",
    "links",
    "address",
    "description",
    "prices",
    "other",
)


@dataclass
class CompanyRecord:
    """Canonical feed record (one per location)."""
    company_id: str
    name: str = ""
    address: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    working_time: str = ""  # Free text, e.g. "ежедн. 09:00-21:00"


@dataclass
class BranchRecord:
    """Externally-scraped listing record."""
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    hours_text: Optional[str] = None
    status: Optional[str] = None  # None is treated as published
    url: Optional[str] = None
    changes: List["ChangeEntry"] = field(default_factory=list)


@dataclass(frozen=True)
class NormalizedAddress:
    """Comparable form of a raw address plus extracted street/house tokens."""
    normalized: str = ""
    street: str = ""
    house: str = ""


@dataclass(frozen=True)
class AddressCandidate:
    """A normalized external address paired with the id of its record."""
    record_id: str
    address: NormalizedAddress


@dataclass
class MatchResult:
    """Outcome of pairing one canonical record with the external listing."""
    canonical_id: str
    matched_id: Optional[str] = None
    score: float = 0.0
    method: str = "none"  # "strict" | "weak-structural" | "cached" | "none"

    @property
    def is_match(self) -> bool:
        return self.method != "none"


@dataclass(frozen=True)
class ScheduleInterval:
    start: str  # "HH:MM"
    end: str  # "HH:MM"

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class NormalizedSchedule:
    """
    Structured weekly schedule.

    An empty `by_day` with `is_24x7=False` is the explicit "unknown" state.
    """
    is_24x7: bool = False
    by_day: Dict[str, List[ScheduleInterval]] = field(default_factory=dict)

    @property
    def is_recognized(self) -> bool:
        return self.is_24x7 or any(self.by_day.values())


@dataclass
class ScheduleDiscrepancy:
    """Verdict of comparing a canonical schedule against external hours text."""
    ok: bool
    reasons: List[str] = field(default_factory=list)
    expected_text: str = ""
    actual_text: Optional[str] = None


@dataclass(frozen=True)
class ChangeEntry:
    """One change-log entry scraped for a location. Never mutated after creation."""
    title: str
    timestamp: str  # "DD-MM-YYYY · HH:MM"
    category: str = "other"
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        title: str,
        timestamp: str,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        author: Optional[str] = None,
    ) -> "ChangeEntry":
        # Local import: categorizer depends on this module
        from branchwatch.changes.categorizer import categorize_change

        return cls(
            title=title,
            timestamp=timestamp,
            category=categorize_change(title),
            old_value=old_value,
            new_value=new_value,
            author=author,
        )


@dataclass
class CategoryStats:
    name: str
    total_changes: int = 0
    branches_affected: int = 0
    change_types: Dict[str, int] = field(default_factory=dict)
    recent_changes_24h: int = 0
    recent_changes_7d: int = 0


@dataclass
class ChangeStats:
    """Aggregate change-log counters, bucketed by recency window."""
    total_branches: int = 0
    branches_with_changes: int = 0
    branches_without_changes: int = 0
    total_changes: int = 0
    unique_change_types: int = 0
    average_changes_per_branch: float = 0.0
    unparseable_timestamps: int = 0
    changes_last_24h: int = 0
    changes_last_7d: int = 0
    changes_last_30d: int = 0
    branches_with_recent_changes_24h: int = 0
    branches_with_recent_changes_7d: int = 0
    branches_with_recent_changes_30d: int = 0
    changes_by_type: Dict[str, int] = field(default_factory=dict)
    changes_by_category: Dict[str, CategoryStats] = field(default_factory=dict)
    recent_changes_by_type_24h: Dict[str, int] = field(default_factory=dict)
    recent_changes_by_type_7d: Dict[str, int] = field(default_factory=dict)
    branches_affected_by_category: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class BranchSnapshot:
    """Identity of one published location at a point in time."""
    id: str
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass
class SnapshotDiff:
    added: List[BranchRecord] = field(default_factory=list)
    removed: List[BranchSnapshot] = field(default_factory=list)


@dataclass
class Discrepancy:
    """One reportable problem: schedule mismatch or location not found."""
    company_id: str
    name: str
    address: str
    expected: str
    actual: Optional[str] = None
    url: Optional[str] = None


@dataclass
class ReconcileResult:
    """Everything a reconciliation run produces for the reporting layer."""
    matches: List[MatchResult] = field(default_factory=list)
    discrepancies: List[Discrepancy] = field(default_factory=list)
    unverified: List[CompanyRecord] = field(default_factory=list)
    mapping: Dict[str, str] = field(default_factory=dict)  # company_id -> branch id
