"""Extracted values, outcomes, snapshots and revision records."""

from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketlens.core.models.signatures import ValueKind

Primitive = bool | int | float | str


class TypedValue(BaseModel):
    """A decoded value together with the display text it came from."""

    model_config = ConfigDict(frozen=True)

    raw: Primitive
    formatted: str | None = None
    kind: ValueKind = ValueKind.NUMBER

    def primitive(self) -> Primitive:
        """Return the value placed in canonical rows.

        Timestamps are epoch seconds upstream and become ISO dates here.
        """
        if self.kind is ValueKind.TIMESTAMP:
            return datetime.fromtimestamp(int(self.raw), tz=UTC).date().isoformat()
        return self.raw


class AbsenceReason(str, Enum):
    """缺失原因枚举."""

    MISSING = "missing"
    UNAVAILABLE = "unavailable"
    DISABLED = "disabled"
    INVALID = "invalid"


class Present(BaseModel):
    """A value obtained from ``source_id``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any
    source_id: str

    @property
    def is_present(self) -> bool:
        return True


class Absent(BaseModel):
    """No value, with the reason it is missing."""

    model_config = ConfigDict(frozen=True)

    reason: AbsenceReason
    detail: str | None = None

    @property
    def is_present(self) -> bool:
        return False


Outcome = Present | Absent


class Snapshot(BaseModel):
    """Ordered key → TypedValue mapping captured from one document."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, TypedValue] = Field(default_factory=dict)
    source_id: str
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)

    def keys(self) -> Iterator[str]:
        return iter(self.values)

    @property
    def is_empty(self) -> bool:
        return not self.values

    def get(self, key: str) -> TypedValue | None:
        return self.values.get(key)

    def primitive(self, key: str) -> Primitive | None:
        """Row-ready value for ``key`` or None when the key was not extracted."""
        value = self.values.get(key)
        return value.primitive() if value is not None else None

    def with_values(self, extra: Mapping[str, TypedValue]) -> "Snapshot":
        """Return a new snapshot; existing keys are kept in their position."""
        merged = dict(self.values)
        merged.update(extra)
        return self.model_copy(update={"values": merged})

    def select(self, keys: Iterable[str]) -> "Snapshot":
        wanted = set(keys)
        return self.model_copy(update={"values": {k: v for k, v in self.values.items() if k in wanted}})


class Observation(BaseModel):
    """单个观测值. ``value`` 为 None 表示上游占位符."""

    model_config = ConfigDict(frozen=True)

    date: str
    value: float | None = None
    realtime_start: str | None = None
    realtime_end: str | None = None


class Vintage(BaseModel):
    """Observations as published on ``vintage_date``."""

    model_config = ConfigDict(frozen=True)

    vintage_date: str
    observations: tuple[Observation, ...] = ()


class Revision(BaseModel):
    """Difference between two vintages for one observation date."""

    model_config = ConfigDict(frozen=True)

    observation_date: str
    previous_value: float
    latest_value: float
    delta: float
    delta_percent: float | None = None
    vintage_pair: tuple[str, str]


class RevisionAnalysis(BaseModel):
    """修订分析结果."""

    model_config = ConfigDict(frozen=True)

    has_revisions: bool
    vintages_analyzed: int = 0
    revision: Revision | None = None
    magnitude: str | None = None
    trend: str | None = None
    summary: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
