"""Embedded-value extraction from quote pages."""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from marketlens.core.extraction.decoding import to_typed_value
from marketlens.core.extraction.dom import DomIndex
from marketlens.core.extraction.json_fragments import extract_values
from marketlens.core.http import RawDocument
from marketlens.core.models import (
    DomAttributePattern,
    EmbeddedJsonPattern,
    FieldSignature,
    Snapshot,
    TypedValue,
)

DEFAULT_PLAUSIBILITY: dict[str, float] = {"trailingPE": 10.0}


def _single(candidates: list[TypedValue], key: str) -> TypedValue | None:
    """The agreed value of all candidates, or None on conflict."""
    if not candidates:
        return None
    first = candidates[0]
    if any(candidate.raw != first.raw for candidate in candidates[1:]):
        logger.debug(f"Conflicting occurrences for {key}, treating as missing")
        return None
    return first


class EmbeddedValueExtractor:
    """Turn a fetched page into a :class:`Snapshot`.

    Embedded JSON and DOM attribute readings are collected per key. When
    both exist the DOM reading wins only if it passes the plausibility
    threshold configured for that key.
    """

    def __init__(self, plausibility: Mapping[str, float] | None = None):
        self.plausibility = dict(DEFAULT_PLAUSIBILITY if plausibility is None else plausibility)

    def is_plausible(self, key: str, value: TypedValue) -> bool:
        threshold = self.plausibility.get(key)
        if threshold is None:
            return True
        return isinstance(value.raw, int | float) and not isinstance(value.raw, bool) and value.raw >= threshold

    def _json_value(self, text: str, signature: FieldSignature) -> TypedValue | None:
        pattern = signature.pattern
        assert isinstance(pattern, EmbeddedJsonPattern)
        typed = [to_typed_value(v, signature.kind) for v in extract_values(text, pattern.field, pattern.scope)]
        return _single([v for v in typed if v is not None], signature.key)

    def _dom_value(self, dom: DomIndex, signature: FieldSignature, symbol: str | None) -> TypedValue | None:
        pattern = signature.pattern
        assert isinstance(pattern, DomAttributePattern)
        if pattern.match_symbol and symbol is None:
            return None
        readings = dom.field_values(pattern.field, symbol if pattern.match_symbol else None)
        typed = [to_typed_value(v, signature.kind) for v in readings]
        return _single([v for v in typed if v is not None], signature.key)

    def extract(
        self,
        document: RawDocument | str,
        signatures: Iterable[FieldSignature],
        symbol: str | None = None,
        source_id: str | None = None,
    ) -> Snapshot:
        """Extract every signature from ``document``.

        Never raises for missing or malformed data; an empty snapshot means
        nothing was found. A snapshot of a :class:`RawDocument` carries the
        document's ``fetched_at``, so extracting it again gives an equal snapshot.
        """
        stamp = {}
        if isinstance(document, RawDocument):
            text = document.text
            source_id = source_id or document.source_id
            stamp["fetched_at"] = document.fetched_at
        else:
            text = document
        source_id = source_id or "unknown"

        json_hits: dict[str, TypedValue] = {}
        dom_hits: dict[str, TypedValue] = {}
        order: list[str] = []
        dom: DomIndex | None = None

        for signature in signatures:
            if signature.key not in order:
                order.append(signature.key)
            if isinstance(signature.pattern, DomAttributePattern):
                if signature.key in dom_hits:
                    continue
                if dom is None:
                    dom = DomIndex(text)
                value = self._dom_value(dom, signature, symbol)
                if value is not None:
                    dom_hits[signature.key] = value
            else:
                if signature.key in json_hits:
                    continue
                value = self._json_value(text, signature)
                if value is not None:
                    json_hits[signature.key] = value

        values: dict[str, TypedValue] = {}
        for key in order:
            dom_value = dom_hits.get(key)
            json_value = json_hits.get(key)
            if dom_value is not None and json_value is not None:
                if self.is_plausible(key, dom_value):
                    values[key] = dom_value
                else:
                    logger.debug(f"DOM value for {key} failed plausibility ({dom_value.raw}), using embedded JSON")
                    values[key] = json_value
            elif dom_value is not None or json_value is not None:
                values[key] = dom_value if dom_value is not None else json_value  # type: ignore[assignment]
            else:
                logger.debug(f"No value found for {key}")

        return Snapshot(values=values, source_id=source_id, **stamp)


def extract_array(document: RawDocument | str, field: str, scope: str | None = None) -> list[Any] | None:
    """The agreed array value of ``field``, or None when absent or conflicting."""
    text = document.text if isinstance(document, RawDocument) else document
    arrays = [value for value in extract_values(text, field, scope) if isinstance(value, list)]
    if not arrays or any(value != arrays[0] for value in arrays[1:]):
        return None
    return arrays[0]
