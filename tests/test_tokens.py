from scaneo.tokens import (
    FieldToken,
    Ident,
    Pointer,
    Qualified,
    Slice,
    StructToken,
    Unsupported,
    type_text,
)


def test_type_text_bare_and_qualified():
    assert type_text(Ident("int")) == "int"
    assert type_text(Qualified("time", "Time")) == "time.Time"


def test_type_text_composes_prefixes():
    expr = Pointer(Slice(Qualified("sql", "NullString")))
    assert type_text(expr) == "*[]sql.NullString"
    assert type_text(Slice(Pointer(Ident("byte")))) == "[]*byte"


def test_type_text_unsupported_anywhere_is_none():
    assert type_text(Unsupported("map_type")) is None
    assert type_text(Pointer(Slice(Unsupported("channel_type")))) is None


def test_struct_token_field_names():
    token = StructToken("Post", [FieldToken("Id", "int64"), FieldToken("Title", "string")])
    assert token.field_names == ["Id", "Title"]
