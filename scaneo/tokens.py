"""
Struct descriptors extracted from Go source.

Field types are first captured as small immutable type expressions and then
rendered to the normalized text the templates work with.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Ident:
    """A bare type name such as ``int`` or a local ``Post``."""

    name: str


@dataclass(frozen=True)
class Pointer:
    """Pointer to another type expression (``*T``)."""

    elem: "TypeExpr"


@dataclass(frozen=True)
class Slice:
    """Slice of another type expression (``[]T``)."""

    elem: "TypeExpr"


@dataclass(frozen=True)
class Qualified:
    """A type imported from another package (``pkg.Name``)."""

    package: str
    name: str


@dataclass(frozen=True)
class Unsupported:
    """Any shape scaneo does not handle (maps, channels, funcs, ...)."""

    kind: str


TypeExpr = Union[Ident, Pointer, Slice, Qualified, Unsupported]


def type_text(expr: TypeExpr) -> Optional[str]:
    """
    Render a type expression as Go source text.

    Args:
        expr: Type expression to render

    Returns:
        Normalized type text, or None when the expression contains an
        unsupported shape anywhere
    """
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, Qualified):
        return f"{expr.package}.{expr.name}"
    if isinstance(expr, (Pointer, Slice)):
        inner = type_text(expr.elem)
        if inner is None:
            return None
        prefix = "*" if isinstance(expr, Pointer) else "[]"
        return prefix + inner
    return None


@dataclass
class FieldToken:
    """A named struct field and its normalized type text."""

    name: str
    type: str


@dataclass
class StructToken:
    """A struct declaration with its fields in declaration order."""

    name: str
    fields: List[FieldToken] = field(default_factory=list)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]
