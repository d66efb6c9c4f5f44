"""
Go struct extraction.

Parses Go source with tree-sitter and turns top-level struct declarations
into :class:`~scaneo.tokens.StructToken` lists. The same parser validates
generated code.
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional, Set, Union

import tree_sitter_go
from tree_sitter import Language, Parser, Tree

from .logging_config import get_logger
from .tokens import (
    FieldToken,
    Ident,
    Pointer,
    Qualified,
    Slice,
    StructToken,
    TypeExpr,
    Unsupported,
    type_text,
)

logger = get_logger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

# Declaration nodes that can hold a struct definition.
_TYPE_SPEC_NODES = ("type_spec", "type_alias")


class ParseError(Exception):
    """Raised when Go source does not parse."""

    def __init__(self, path: str, line: int, column: int, message: str):
        self.path = path
        self.line = line
        self.column = column
        self.message = message
        super().__init__(f"{path}:{line}:{column}: {message}")


_parser = None


def _get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser(GO_LANGUAGE)
    return _parser


def _node_text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace")


def _check_encoding(source: bytes, path: str) -> None:
    """Raise :class:`ParseError` at the first byte that is not valid UTF-8."""
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as e:
        head = source[: e.start]
        line = head.count(b"\n") + 1
        column = e.start - (head.rfind(b"\n") + 1) + 1
        raise ParseError(path, line, column, "illegal UTF-8 encoding") from e


def _first_error(node: Any) -> Optional[Any]:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def parse_source(source: Union[str, bytes], path: str = "<source>") -> Tree:
    """
    Parse Go source text.

    Args:
        source: Go source as text or UTF-8 bytes
        path: Name used in error messages

    Returns:
        The tree-sitter syntax tree

    Raises:
        ParseError: If the source has a syntax error, invalid UTF-8 or no package clause
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    _check_encoding(source, path)

    tree = _get_parser().parse(source)
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
        if bad.is_missing:
            message = f"syntax error: missing {bad.type!r}"
        else:
            snippet = _node_text(bad).splitlines()[0][:40] if bad.text else ""
            message = f"syntax error near {snippet!r}"
        raise ParseError(path, line, column, message)

    if not any(child.type == "package_clause" for child in root.children):
        raise ParseError(path, 1, 1, "expected 'package' clause")

    return tree


def validate_go_source(source: Union[str, bytes], path: str = "<generated>") -> None:
    """Raise :class:`ParseError` unless ``source`` is syntactically valid Go."""
    parse_source(source, path)


def _type_expr(node: Any) -> TypeExpr:
    """Map a tree-sitter type node onto a type expression."""
    kind = node.type

    if kind == "type_identifier":
        return Ident(_node_text(node))

    if kind == "pointer_type":
        inner = [c for c in node.named_children if c.type != "comment"]
        if len(inner) != 1:
            return Unsupported(kind)
        return Pointer(_type_expr(inner[0]))

    if kind == "slice_type":
        elem = node.child_by_field_name("element")
        if elem is None:
            return Unsupported(kind)
        return Slice(_type_expr(elem))

    if kind == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is None or name is None or package.type != "package_identifier":
            return Unsupported(kind)
        return Qualified(_node_text(package), _node_text(name))

    return Unsupported(kind)


def _struct_fields(struct_name: str, struct_node: Any) -> List[FieldToken]:
    fields: List[FieldToken] = []

    body = next(
        (c for c in struct_node.named_children if c.type == "field_declaration_list"),
        None,
    )
    if body is None:
        return fields

    for decl in body.named_children:
        if decl.type != "field_declaration":
            continue

        names = decl.children_by_field_name("name")
        if not names:
            # embedded field
            continue

        type_node = decl.child_by_field_name("type")
        text = type_text(_type_expr(type_node)) if type_node is not None else None
        if text is None:
            logger.debug(
                "Dropping %s field(s) %s: unsupported type %s",
                struct_name,
                ", ".join(_node_text(n) for n in names),
                type_node.type if type_node is not None else "<none>",
            )
            continue

        for name in names:
            fields.append(FieldToken(name=_node_text(name), type=text))

    return fields


def _type_specs(root: Any) -> Iterable[Any]:
    """Yield every top-level type spec in file order."""
    for decl in root.named_children:
        if decl.type != "type_declaration":
            continue
        for spec in decl.named_children:
            if spec.type in _TYPE_SPEC_NODES:
                yield spec


def extract_source(
    source: Union[str, bytes],
    whitelist: Optional[Iterable[str]] = None,
    path: str = "<source>",
) -> List[StructToken]:
    """
    Extract struct tokens from Go source text.

    Args:
        source: Go source as text or UTF-8 bytes
        whitelist: Struct names to keep; empty or None keeps all
        path: Name used in error messages and logs

    Returns:
        Struct tokens in declaration order

    Raises:
        ParseError: If the source does not parse
    """
    wanted: Set[str] = set(whitelist or ())
    tree = parse_source(source, path)

    tokens: List[StructToken] = []
    for spec in _type_specs(tree.root_node):
        name_node = spec.child_by_field_name("name")
        type_node = spec.child_by_field_name("type")
        if name_node is None or type_node is None or type_node.type != "struct_type":
            continue

        name = _node_text(name_node)
        if wanted and name not in wanted:
            continue

        token = StructToken(name=name, fields=_struct_fields(name, type_node))
        logger.debug("%s: struct %s with %d field(s)", path, name, len(token.fields))
        tokens.append(token)

    return tokens


def extract(
    path: Union[str, Path], whitelist: Optional[Iterable[str]] = None
) -> List[StructToken]:
    """
    Extract struct tokens from a Go file.

    Args:
        path: Go source file
        whitelist: Struct names to keep; empty or None keeps all

    Returns:
        Struct tokens in declaration order

    Raises:
        ParseError: If the file does not parse
        OSError: If the file cannot be read
    """
    path = Path(path)
    source = path.read_bytes()
    return extract_source(source, whitelist, str(path))


def extract_files(
    paths: Iterable[Union[str, Path]], whitelist: Optional[Iterable[str]] = None
) -> List[StructToken]:
    """Extract tokens from each file in order and concatenate them."""
    wanted = list(whitelist or ())
    tokens: List[StructToken] = []
    for path in paths:
        found = extract(path, wanted)
        logger.info("Parsed %s: %d struct(s)", path, len(found))
        tokens.extend(found)
    return tokens
