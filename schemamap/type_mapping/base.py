"""Shared machinery for the table-driven type mappers.

Each engine module describes its native types as data: a ``RULES`` table
keyed by normalized native type name and an ``IDENTITY_ALIASES`` table that
rewrites auto-increment variants (``serial``) to their base integer type. The
identity flag is set separately from the base mapping so non-identity integers
share the exact same rule.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Protocol

from schemamap.constants import MAX_NUMBER_PRECISION
from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping.canonical import CanonicalType, TypeKind, TypeMapping

_PARAMS_RE = re.compile(r"\(([^()]*)\)")
_IDENTITY_RE = re.compile(r"\b(identity|auto_increment)\b\s*(\([^()]*\))?")
_MODIFIERS = frozenset({"unsigned", "signed", "zerofill"})


class Params(str, Enum):
    """Which declared parameters a rule carries over"""

    NONE = "none"
    PRECISION_SCALE = "precision_scale"
    LENGTH = "length"
    PRECISION = "precision"


@dataclass(frozen=True)
class TypeRule:
    """How one native type maps to a canonical type.

    Fixed ``precision``/``scale``/``length`` values are used when the column
    declares none (MySQL ``decimal`` means ``decimal(10,0)``).
    """

    kind: TypeKind
    params: Params = Params.NONE
    precision: int | None = None
    scale: int | None = None
    length: int | None = None
    note: str | None = None


@dataclass(frozen=True)
class NativeType:
    """A native type name split into its parts"""

    original: str
    base: str
    params: tuple[str, ...] = ()
    modifiers: frozenset[str] = field(default_factory=frozenset)
    identity: bool = False
    is_array: bool = False
    element: str | None = None


def parse_native_type(type_name: str) -> NativeType:
    """Normalize a native type name.

    Examples::

        parse_native_type("NUMERIC(10, 2)")              -> base "numeric", params ("10", "2")
        parse_native_type("timestamp(3) with time zone") -> base "timestamp with time zone"
        parse_native_type("INT UNSIGNED")                -> base "int", modifiers {"unsigned"}
        parse_native_type("integer[]")                   -> array of "integer"
        parse_native_type("int identity(1,1)")           -> base "int", identity
    """
    text = " ".join(type_name.strip().lower().split())

    if text.endswith("[]"):
        element = text
        while element.endswith("[]"):
            element = element[:-2].rstrip()
        return NativeType(original=type_name, base="array", is_array=True, element=element)

    identity = False
    if _IDENTITY_RE.search(text):
        identity = True
        text = _IDENTITY_RE.sub(" ", text)

    params: tuple[str, ...] = ()
    match = _PARAMS_RE.search(text)
    if match:
        params = tuple(p.strip() for p in match.group(1).split(",") if p.strip())
        text = text[: match.start()] + " " + text[match.end() :]

    words = text.split()
    modifiers = frozenset(w for w in words if w in _MODIFIERS)
    base = " ".join(w for w in words if w not in _MODIFIERS)

    return NativeType(original=type_name, base=base, params=params, modifiers=modifiers, identity=identity)


def int_param(params: tuple[str, ...], index: int) -> int | None:
    if index >= len(params):
        return None
    value = params[index]
    if value == "max":
        return -1
    try:
        return int(value)
    except ValueError:
        return None


def unmapped(column: ColumnDescriptor) -> TypeMapping:
    """Fallback for anything the rules do not cover."""
    return TypeMapping(
        canonical=CanonicalType.unmapped(column.data_type),
        warning=f"unmapped source type '{column.data_type}' stored as VARCHAR",
        identity=False,
    )


class TypeMapper(Protocol):
    """Maps native column types of one source engine to canonical types"""

    engine: SourceEngine

    def map_column(self, column: ColumnDescriptor) -> TypeMapping: ...


class TableDrivenTypeMapper:
    """Type mapper driven by a rules table and an identity alias table.

    Engine variants set ``engine``, ``RULES`` and ``IDENTITY_ALIASES`` and may
    override :meth:`map_special` for types whose mapping depends on their
    parameters (MySQL ``tinyint(1)``).
    """

    engine: SourceEngine
    RULES: dict[str, TypeRule] = {}
    IDENTITY_ALIASES: dict[str, str] = {}

    def map_column(self, column: ColumnDescriptor) -> TypeMapping:
        native = parse_native_type(column.data_type)
        identity = column.is_identity or native.identity

        alias = self.IDENTITY_ALIASES.get(native.base)
        if alias is not None:
            native = replace(native, base=alias)
            identity = True

        canonical, warning = self._map_native(native, column)
        if canonical.is_unmapped:
            return unmapped(column)
        return TypeMapping(canonical=canonical, warning=warning, identity=identity)

    def map_special(
        self, native: NativeType, column: ColumnDescriptor
    ) -> tuple[CanonicalType, str | None] | None:
        """Engine hook for parameter-dependent types. Returns None to use the rules."""
        return None

    def _map_native(self, native: NativeType, column: ColumnDescriptor) -> tuple[CanonicalType, str | None]:
        special = self.map_special(native, column)
        if special is not None:
            return special

        if native.is_array:
            return self._map_array(native, column)

        rule = self.RULES.get(native.base)
        if rule is None:
            return CanonicalType.unmapped(column.data_type), None
        return apply_rule(rule, native, column)

    def _map_array(self, native: NativeType, column: ColumnDescriptor) -> tuple[CanonicalType, str | None]:
        element_name = native.element or "unknown"
        element_column = column.model_copy(
            update={"data_type": element_name, "precision": None, "scale": None, "length": None, "is_identity": False}
        )
        element = self.map_column(element_column).canonical
        return CanonicalType.array(element), f"array of {element_name} ({element.describe()}) stored as ARRAY"


def apply_rule(rule: TypeRule, native: NativeType, column: ColumnDescriptor) -> tuple[CanonicalType, str | None]:
    """Build the canonical type for a matched rule, carrying declared parameters over."""
    warnings: list[str] = [rule.note] if rule.note else []
    precision = rule.precision
    scale = rule.scale
    length = rule.length

    match rule.params:
        case Params.PRECISION_SCALE:
            declared_precision = column.precision if column.precision is not None else int_param(native.params, 0)
            declared_scale = column.scale if column.scale is not None else int_param(native.params, 1)
            if declared_precision is not None:
                precision = declared_precision
                scale = declared_scale if declared_scale is not None else 0
            if precision is None:
                warnings.append(
                    f"'{native.original}' has no declared precision; warehouse NUMBER defaults to (38,0)"
                )
            elif precision > MAX_NUMBER_PRECISION:
                warnings.append(
                    f"precision {precision} exceeds the warehouse maximum of {MAX_NUMBER_PRECISION}"
                )
        case Params.LENGTH:
            declared_length = column.length if column.length is not None else int_param(native.params, 0)
            if declared_length is not None:
                length = None if declared_length < 0 else declared_length
        case Params.PRECISION:
            declared_precision = column.precision if column.precision is not None else int_param(native.params, 0)
            if declared_precision is not None:
                precision = declared_precision

    canonical = CanonicalType(kind=rule.kind, precision=precision, scale=scale, length=length)
    return canonical, "; ".join(warnings) if warnings else None
