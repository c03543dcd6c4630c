"""Field signatures describing where a value lives inside a fetched document."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ValueKind(str, Enum):
    """值类型枚举."""

    NUMBER = "number"
    INTEGER = "integer"
    PERCENT = "percent"
    BOOLEAN = "boolean"
    STRING = "string"
    TIMESTAMP = "timestamp"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.NUMBER, ValueKind.INTEGER, ValueKind.PERCENT, ValueKind.TIMESTAMP)


class EmbeddedJsonPattern(BaseModel):
    """Locate ``"<field>":`` inside JSON embedded in the page.

    When ``scope`` is set the search is restricted to the block that follows
    the enclosing ``"<scope>":`` key.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    scope: str | None = None


class DomAttributePattern(BaseModel):
    """Read elements carrying ``data-field="<field>"``.

    ``match_symbol`` restricts the scan to elements whose ``data-symbol``
    equals the symbol being extracted.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    match_symbol: bool = False


class FieldSignature(BaseModel):
    """字段签名: 输出键 + 定位模式 + 值类型."""

    model_config = ConfigDict(frozen=True)

    key: str
    pattern: EmbeddedJsonPattern | DomAttributePattern
    kind: ValueKind = ValueKind.NUMBER


def json_field(field: str, kind: ValueKind = ValueKind.NUMBER, scope: str | None = None) -> FieldSignature:
    """Shorthand for an embedded JSON signature keyed by its field name."""
    return FieldSignature(key=field, pattern=EmbeddedJsonPattern(field=field, scope=scope), kind=kind)


def dom_field(field: str, kind: ValueKind = ValueKind.NUMBER, match_symbol: bool = False) -> FieldSignature:
    """Shorthand for a DOM attribute signature keyed by its field name."""
    return FieldSignature(key=field, pattern=DomAttributePattern(field=field, match_symbol=match_symbol), kind=kind)
