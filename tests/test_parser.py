from __future__ import annotations

from pathlib import Path

import pytest

from scaneo.parser import ParseError, extract, extract_files, extract_source, parse_source
from scaneo.tokens import FieldToken, StructToken


def _struct(name: str, *fields: tuple[str, str]) -> StructToken:
    return StructToken(name=name, fields=[FieldToken(n, t) for n, t in fields])


FILE_STRUCTS = {
    "access.go": [
        _struct("Exported", ("A", "int"), ("B", "int")),
        _struct("unexported", ("a", "int"), ("b", "int")),
        _struct("ExAndUn", ("a", "int"), ("b", "int")),
        _struct("unAndEx", ("A", "int"), ("B", "int")),
    ],
    "declarations.go": [
        _struct("t0", ("a", "int"), ("b", "bool")),
        _struct("t1", ("a", "int"), ("b", "bool")),
        _struct("t2", ("a", "string"), ("b", "byte")),
        _struct(
            "t3",
            ("a", "int"),
            ("b", "int"),
            ("c", "int"),
            ("d", "bool"),
            ("e", "bool"),
            ("f", "bool"),
        ),
        _struct("t4", ("a", "int"), ("b", "bool")),
    ],
    "methods.go": [
        _struct(
            "Post",
            ("ID", "int"),
            ("SemURL", "string"),
            ("Created", "time.Time"),
            ("Modified", "time.Time"),
            ("Published", "pq.NullTime"),
            ("Draft", "bool"),
            ("Title", "string"),
            ("Body", "string"),
        ),
    ],
    "types.go": [
        _struct("boolean", ("a", "bool")),
        _struct(
            "numerics",
            ("a", "uint8"),
            ("b", "uint16"),
            ("c", "uint32"),
            ("d", "uint64"),
            ("e", "int8"),
            ("f", "int16"),
            ("g", "int32"),
            ("h", "int64"),
            ("i", "float32"),
            ("j", "float64"),
            ("k", "complex64"),
            ("l", "complex128"),
            ("m", "byte"),
            ("n", "rune"),
            ("o", "uint"),
            ("p", "int"),
            ("q", "uintptr"),
        ),
        _struct("str", ("a", "string")),
        _struct("structs", ("a", "sql.NullString")),
        _struct(
            "slices",
            ("a", "[]bool"),
            ("b", "[]time.Time"),
            ("c", "[]*byte"),
            ("d", "[]*sql.NullString"),
        ),
        _struct(
            "pointers",
            ("a", "*bool"),
            ("b", "*time.Time"),
            ("c", "*[]byte"),
            ("d", "*[]sql.NullString"),
        ),
    ],
    "shapes.go": [
        _struct("Base", ("Id", "int64")),
        _struct(
            "Account",
            ("Id", "int64"),
            ("Owner", "*Base"),
            ("Name", "string"),
            ("Tags", "[]string"),
            ("Nested", "[][]int"),
        ),
        _struct("Pair", ("Left", "T"), ("Right", "T")),
        _struct("Legacy", ("Code", "string")),
    ],
}


@pytest.mark.parametrize("filename", sorted(FILE_STRUCTS))
def test_extract_all_structs(testdata: Path, filename: str):
    assert extract(testdata / filename) == FILE_STRUCTS[filename]


def test_whitelist_keeps_members_only(testdata: Path):
    tokens = extract(testdata / "access.go", {"Exported", "unexported"})

    assert [t.name for t in tokens] == ["Exported", "unexported"]
    assert all(len(t.fields) == 2 for t in tokens)
    assert all(f.type == "int" for t in tokens for f in t.fields)


def test_whitelist_preserves_file_order(testdata: Path):
    tokens = extract(testdata / "access.go", ["unAndEx", "Exported", "missing"])
    assert [t.name for t in tokens] == ["Exported", "unAndEx"]


def test_whitelist_is_subset_of_unfiltered(testdata: Path):
    everything = extract(testdata / "types.go")
    whitelist = {"slices", "str", "nope"}

    filtered = extract(testdata / "types.go", whitelist)

    assert filtered == [t for t in everything if t.name in whitelist]
    assert len(filtered) == len({t.name for t in everything} & whitelist)


def test_empty_whitelist_means_no_filter(testdata: Path):
    assert extract(testdata / "access.go", set()) == extract(testdata / "access.go")


def test_unsupported_fields_dropped_siblings_kept():
    source = """
package p

type Row struct {
	Before   int
	Lookup   map[string]int
	Done     chan bool
	Handler  func() error
	Inner    struct{ X int }
	Iface    interface{ Close() error }
	Generic  List[int]
	After    *[]sql.NullString
}
"""
    (token,) = extract_source(source)

    assert token.fields == [
        FieldToken("Before", "int"),
        FieldToken("After", "*[]sql.NullString"),
    ]


def test_wrapped_unsupported_shape_is_dropped():
    source = "package p\n\ntype T struct {\n\tA []map[int]int\n\tB *chan int\n\tC bool\n}\n"
    (token,) = extract_source(source)
    assert token.field_names == ["C"]


def test_embedded_fields_are_skipped():
    source = "package p\n\ntype T struct {\n\tBase\n\t*Other\n\tpkg.Mixin\n\tName string\n}\n"
    (token,) = extract_source(source)
    assert token.fields == [FieldToken("Name", "string")]


def test_non_struct_types_and_local_types_ignored(testdata: Path):
    names = [t.name for t in extract(testdata / "declarations.go")]
    assert "notAStruct" not in names
    assert "alias" not in names
    assert "inner" not in names


def test_repeated_names_are_not_deduplicated():
    source = "package p\n\ntype A struct{ X int }\n\ntype (\n\tA struct{ Y int }\n)\n"
    tokens = extract_source(source)
    assert [t.name for t in tokens] == ["A", "A"]
    assert [t.field_names for t in tokens] == [["X"], ["Y"]]


def test_empty_struct_has_no_fields():
    (token,) = extract_source("package p\n\ntype Empty struct{}\n")
    assert token == StructToken("Empty", [])


def test_syntax_error_raises_parse_error(tmp_path: Path):
    bad = tmp_path / "bad.go"
    bad.write_text("package p\n\ntype Broken struct {\n\tA int\n\n", encoding="utf-8")

    with pytest.raises(ParseError) as exc_info:
        extract(bad)

    err = exc_info.value
    assert err.path == str(bad)
    assert err.line >= 1 and err.column >= 1
    assert str(bad) in str(err)
    assert "syntax error" in err.message


@pytest.mark.parametrize(
    "source, line, column",
    [
        (b"package p\n\ntype A\xff struct {\n\tX int\n}\n", 3, 7),
        (b"package p\n\ntype A struct {\n\tX int\n}\n\xff\xfe garbage\n", 6, 1),
    ],
)
def test_invalid_utf8_is_a_parse_error(source: bytes, line: int, column: int):
    with pytest.raises(ParseError, match="illegal UTF-8 encoding") as exc_info:
        extract_source(source, path="bad.go")

    assert (exc_info.value.line, exc_info.value.column) == (line, column)


def test_missing_package_clause_is_a_parse_error():
    with pytest.raises(ParseError, match="package"):
        extract_source("type A struct { X int }\n")


def test_missing_file_raises_os_error(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        extract(tmp_path / "nope.go")


def test_extract_files_concatenates_in_caller_order(testdata: Path):
    tokens = extract_files([testdata / "methods.go", testdata / "access.go"], ["Post", "Exported"])
    assert [t.name for t in tokens] == ["Post", "Exported"]


def test_parse_source_accepts_valid_go():
    tree = parse_source(b"package p\n\nfunc f() {}\n")
    assert tree.root_node.type == "source_file"
