"""
Naming utilities for generated Go code.

Handles the case conversions the templates rely on and the Go package
name rules the CLI checks.
"""

import re
from typing import List


# Go reserved words
GO_RESERVED_WORDS = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def to_title(name: str) -> str:
    """Upper-case the first letter and leave the rest as written."""
    return name[:1].upper() + name[1:]


def to_snake_case(name: str) -> str:
    """
    Convert an identifier to snake_case.

    Acronym runs stay together: ``SemURL`` becomes ``sem_url`` and
    ``HTTPServer`` becomes ``http_server``.
    """
    name = name.replace("-", "_")
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    name = re.sub(r"_+", "_", name.lower())
    return name.strip("_")


def package_name_from_dir(dirname: str) -> str:
    """Derive a Go package name from a directory name (``my-pkg`` -> ``mypkg``)."""
    cleaned = re.sub(r"[^a-z0-9_]", "", dirname.lower())
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"pkg{cleaned}"
    if cleaned in GO_RESERVED_WORDS:
        cleaned = f"{cleaned}pkg"
    return cleaned


def validate_go_package_name(name: str) -> List[str]:
    """
    Validate Go package name according to Go naming rules.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not name:
        errors.append("Package name cannot be empty")
        return errors

    if not name.isidentifier() or not name.isascii():
        errors.append(f"'{name}' is not a valid Go identifier")

    if name[0].isupper():
        errors.append("Package names should be lowercase")

    if "_" in name:
        errors.append("Package names should not contain underscores")

    if name in GO_RESERVED_WORDS:
        errors.append(f"'{name}' is a Go reserved word")

    return errors
