"""Canonical warehouse types produced by the type mappers."""

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict


class TypeKind(str, Enum):
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    NUMBER = "NUMBER"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    VARCHAR = "VARCHAR"
    CHAR = "CHAR"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP_NTZ = "TIMESTAMP_NTZ"
    TIMESTAMP_TZ = "TIMESTAMP_TZ"
    VARIANT = "VARIANT"
    BINARY = "BINARY"
    ARRAY = "ARRAY"
    UNMAPPED = "UNMAPPED"


# Kinds whose single parameter is a length
_LENGTH_KINDS = frozenset({TypeKind.VARCHAR, TypeKind.CHAR, TypeKind.BINARY})
# Kinds whose single parameter is fractional-seconds precision
_TEMPORAL_KINDS = frozenset({TypeKind.TIME, TypeKind.TIMESTAMP_NTZ, TypeKind.TIMESTAMP_TZ})


class CanonicalType(BaseModel):
    """A warehouse column type.

    ``precision``/``scale`` apply to NUMBER, ``precision`` alone to the
    temporal kinds, ``length`` to VARCHAR, CHAR and BINARY (None means
    unbounded). ARRAY carries the mapped ``element`` type and UNMAPPED keeps the
    verbatim ``original_type``.
    """

    model_config = ConfigDict(frozen=True)

    kind: TypeKind
    precision: int | None = None
    scale: int | None = None
    length: int | None = None
    element: "CanonicalType | None" = None
    original_type: str | None = None

    @classmethod
    def unmapped(cls, original_type: str) -> "CanonicalType":
        return cls(kind=TypeKind.UNMAPPED, original_type=original_type)

    @classmethod
    def array(cls, element: "CanonicalType") -> "CanonicalType":
        return cls(kind=TypeKind.ARRAY, element=element)

    @property
    def is_unmapped(self) -> bool:
        return self.kind == TypeKind.UNMAPPED

    def render(self) -> str:
        """Return the type as written in warehouse DDL."""
        if self.kind == TypeKind.UNMAPPED:
            return TypeKind.VARCHAR.value
        if self.kind == TypeKind.NUMBER and self.precision is not None:
            return f"NUMBER({self.precision},{self.scale or 0})"
        if self.kind in _LENGTH_KINDS and self.length is not None:
            return f"{self.kind.value}({self.length})"
        if self.kind in _TEMPORAL_KINDS and self.precision is not None:
            return f"{self.kind.value}({self.precision})"
        return self.kind.value

    def describe(self) -> str:
        """Like :meth:`render`, but spells out array elements and unmapped origins."""
        if self.kind == TypeKind.ARRAY and self.element is not None:
            return f"ARRAY({self.element.describe()})"
        if self.kind == TypeKind.UNMAPPED:
            return f"UNMAPPED({self.original_type})"
        return self.render()


CanonicalType.model_rebuild()


class TypeMapping(NamedTuple):
    """Result of mapping one column"""

    canonical: CanonicalType
    warning: str | None = None
    identity: bool = False
