"""Core data models."""

from marketlens.core.models.rows import build_row, coalesce, dump_json, today
from marketlens.core.models.signatures import (
    DomAttributePattern,
    EmbeddedJsonPattern,
    FieldSignature,
    ValueKind,
    dom_field,
    json_field,
)
from marketlens.core.models.values import (
    Absent,
    AbsenceReason,
    Observation,
    Outcome,
    Present,
    Primitive,
    Revision,
    RevisionAnalysis,
    Snapshot,
    TypedValue,
    Vintage,
)

__all__ = [
    "Absent",
    "AbsenceReason",
    "DomAttributePattern",
    "EmbeddedJsonPattern",
    "FieldSignature",
    "Observation",
    "Outcome",
    "Present",
    "Primitive",
    "Revision",
    "RevisionAnalysis",
    "Snapshot",
    "TypedValue",
    "ValueKind",
    "Vintage",
    "build_row",
    "coalesce",
    "dump_json",
    "dom_field",
    "json_field",
    "today",
]
