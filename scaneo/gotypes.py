"""
Go type knowledge for the fixture template.

Maps normalized field type text to a Go expression that builds a random
value of that type, and to the packages that expression refers to.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from .logging_config import get_logger

logger = get_logger(__name__)

# Package qualifier -> Go import path.
DEFAULT_IMPORT_PATHS: Dict[str, str] = {
    "pq": "github.com/lib/pq",
    "rand": "math/rand",
    "sql": "database/sql",
    "strconv": "strconv",
    "time": "time",
}

INT_TYPES = {
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "byte",
    "rune",
}

FLOAT_TYPES = {"float32", "float64"}

COMPLEX_TYPES = {"complex64", "complex128"}

_RANDOM_TIME = "time.Unix(rand.Int63n(1<<31), 0).UTC()"
_RANDOM_STRING = "strconv.FormatInt(rand.Int63(), 36)"


@dataclass(frozen=True)
class RandLiteral:
    """A Go expression and the package qualifiers it uses."""

    expr: str
    packages: FrozenSet[str] = field(default_factory=frozenset)


WRAPPER_LITERALS: Dict[str, RandLiteral] = {
    "time.Time": RandLiteral(_RANDOM_TIME, frozenset({"time", "rand"})),
    "pq.NullTime": RandLiteral(
        f"pq.NullTime{{Time: {_RANDOM_TIME}, Valid: true}}",
        frozenset({"pq", "time", "rand"}),
    ),
    "sql.NullString": RandLiteral(
        f"sql.NullString{{String: {_RANDOM_STRING}, Valid: true}}",
        frozenset({"sql", "strconv", "rand"}),
    ),
    "sql.NullInt64": RandLiteral(
        "sql.NullInt64{Int64: rand.Int63(), Valid: true}",
        frozenset({"sql", "rand"}),
    ),
    "sql.NullFloat64": RandLiteral(
        "sql.NullFloat64{Float64: rand.Float64(), Valid: true}",
        frozenset({"sql", "rand"}),
    ),
    "sql.NullBool": RandLiteral(
        "sql.NullBool{Bool: rand.Intn(2) == 1, Valid: true}",
        frozenset({"sql", "rand"}),
    ),
}


def rand_literal(type_text: str) -> RandLiteral:
    """
    Build the random-value expression for a field type.

    Args:
        type_text: Normalized type text (``int``, ``*time.Time``, ...)

    Returns:
        The literal and the packages it references
    """
    if not isinstance(type_text, str):
        raise TypeError(f"rand expects a type name, got {type(type_text).__name__}")

    # pointers and slices start out nil
    if type_text.startswith(("*", "[]")):
        return RandLiteral("nil")

    if type_text in WRAPPER_LITERALS:
        return WRAPPER_LITERALS[type_text]

    if type_text == "bool":
        return RandLiteral("rand.Intn(2) == 1", frozenset({"rand"}))
    if type_text == "string":
        return RandLiteral(_RANDOM_STRING, frozenset({"strconv", "rand"}))
    if type_text in INT_TYPES:
        return RandLiteral(f"{type_text}(rand.Int63())", frozenset({"rand"}))
    if type_text in FLOAT_TYPES:
        return RandLiteral(f"{type_text}(rand.Float64())", frozenset({"rand"}))
    if type_text in COMPLEX_TYPES:
        return RandLiteral(
            f"{type_text}(complex(rand.Float64(), rand.Float64()))",
            frozenset({"rand"}),
        )

    packages = {"rand"}
    qualifier = type_qualifier(type_text)
    if qualifier:
        packages.add(qualifier)
    return RandLiteral(f"{type_text}(rand.Int63())", frozenset(packages))


def type_qualifier(type_text: str) -> Optional[str]:
    """Return ``pkg`` for ``pkg.Name`` type text, None otherwise."""
    if type_text.startswith(("*", "[]")) or "." not in type_text:
        return None
    return type_text.split(".", 1)[0]


def import_paths_for(
    packages: Iterable[str], import_paths: Optional[Dict[str, str]] = None
) -> List[str]:
    """
    Resolve package qualifiers to sorted Go import paths.

    Qualifiers without a known path are logged and left out.
    """
    table = DEFAULT_IMPORT_PATHS if import_paths is None else import_paths
    resolved = set()
    for package in packages:
        path = table.get(package)
        if path is None:
            logger.warning("No import path known for package %r; add it to import_paths", package)
            continue
        resolved.add(path)
    return sorted(resolved)
