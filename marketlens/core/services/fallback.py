"""Fallback chain coordination.

When a primary source cannot provide a key, a substitute source listed in
the fallback table is consulted once.
"""

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from loguru import logger

from marketlens.core.models import Absent, AbsenceReason, Outcome, Present

FALLBACK_REASONS = frozenset({AbsenceReason.MISSING, AbsenceReason.UNAVAILABLE})


@dataclass(frozen=True)
class SubstituteDescriptor:
    """Where to look for a substitute value."""

    symbol: str
    field: str = "regularMarketPrice"
    units: str = "Percent"
    source_id: str = "yahoo_finance"


class FallbackTable(Mapping[str, SubstituteDescriptor]):
    """Read-only key → substitute mapping."""

    def __init__(self, entries: Mapping[str, SubstituteDescriptor] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, key: str) -> SubstituteDescriptor:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


_IRX = SubstituteDescriptor("^IRX")
_TNX = SubstituteDescriptor("^TNX")
_TYX = SubstituteDescriptor("^TYX")

DEFAULT_FALLBACK_TABLE = FallbackTable({
    "treasury1m": _IRX,
    "treasury3m": _IRX,
    "treasury6m": _IRX,
    "treasury1y": _TNX,
    "treasury2y": _TNX,
    "treasury5y": _TNX,
    "treasury10y": _TNX,
    "treasury30y": _TYX,
})

SubstituteFetcher = Callable[[SubstituteDescriptor], Awaitable[Any]]


class FallbackCoordinator:
    """Resolve a primary outcome against the fallback table."""

    def __init__(self, table: FallbackTable | None = None):
        self.table = table if table is not None else DEFAULT_FALLBACK_TABLE

    def substitute_for(self, key: str) -> SubstituteDescriptor | None:
        return self.table.get(key)

    async def resolve(self, primary: Outcome, key: str, fetch_substitute: SubstituteFetcher) -> Outcome:
        """Return ``primary`` or, when it is missing or unavailable, the substitute's value.

        Args:
            primary: 主数据源结果
            key: 回退表中的键
            fetch_substitute: 按描述符获取替代值的协程函数, 返回 None 表示未找到

        Returns:
            Outcome: 替代值以替代数据源的 ``source_id`` 标记
        """
        if isinstance(primary, Present) or primary.reason not in FALLBACK_REASONS:
            return primary

        descriptor = self.table.get(key)
        if descriptor is None:
            return primary

        try:
            value = await fetch_substitute(descriptor)
        except Exception as e:
            logger.bind(provider=descriptor.source_id).debug(
                f"Fallback for {key} via {descriptor.symbol} failed: {type(e).__name__}: {e}"
            )
            return Absent(reason=AbsenceReason.UNAVAILABLE, detail=f"fallback {descriptor.symbol} failed")

        if value is None:
            logger.debug(f"Fallback for {key} via {descriptor.symbol} returned no {descriptor.field}")
            return Absent(reason=AbsenceReason.MISSING, detail=f"fallback {descriptor.symbol} had no value")

        logger.info(f"Resolved {key} from fallback {descriptor.symbol}")
        return Present(value=value, source_id=descriptor.source_id)
