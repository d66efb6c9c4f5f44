import json
from pathlib import Path

from conftest import top_level
from scaneo.cli import main
from scaneo.parser import parse_source


def test_generates_output_file(testdata: Path, tmp_path: Path):
    out = tmp_path / "scans.go"

    code = main(["-o", str(out), "-p", "testing", "-u", "-w", "Exported,unexported", str(testdata / "access.go")])

    assert code == 0
    tree = parse_source(out.read_text(encoding="utf-8"))
    assert top_level(tree, "function_declaration") == [
        "scanExported",
        "scanUnexported",
        "scanExporteds",
        "scanUnexporteds",
    ]


def test_stdout_output(testdata: Path, capsys):
    code = main(["--stdout", "-p", "models", str(testdata / "methods.go")])

    assert code == 0
    out = capsys.readouterr().out
    assert "package models" in out
    assert "func ScanPost(r *sql.Row) (Post, error) {" in out


def test_default_package_from_directory(testdata: Path, tmp_path: Path, monkeypatch):
    workdir = tmp_path / "my-models"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    assert main([str(testdata / "access.go")]) == 0
    assert "package mymodels" in (workdir / "scans.go").read_text(encoding="utf-8")


def test_fixture_template(testdata: Path, tmp_path: Path):
    out = tmp_path / "fixtures_test.go"

    assert main(["-t", "scans_test", "-o", str(out), "-p", "testdata", str(testdata)]) == 0
    assert "func randPost() Post {" in out.read_text(encoding="utf-8")


def test_parse_error_leaves_no_output(tmp_path: Path, capsys):
    bad = tmp_path / "bad.go"
    bad.write_text("package p\n\ntype X struct {\n", encoding="utf-8")
    out = tmp_path / "scans.go"

    assert main(["-o", str(out), "-p", "p", str(bad)]) == 1
    assert not out.exists()
    assert "Parse error" in capsys.readouterr().err


def test_invalid_utf8_input_is_reported(tmp_path: Path, capsys):
    bad = tmp_path / "bad.go"
    bad.write_bytes(b"package p\n\ntype A\xff struct {\n\tX int\n}\n")

    assert main(["--stdout", "-p", "p", str(bad)]) == 1
    captured = capsys.readouterr()
    assert "Parse error" in captured.err
    assert "package p" not in captured.out


def test_unknown_template(testdata: Path, tmp_path: Path, capsys):
    out = tmp_path / "scans.go"
    assert main(["-t", "nope", "-o", str(out), "-p", "p", str(testdata / "access.go")]) == 1
    assert not out.exists()
    assert "Template error" in capsys.readouterr().err


def test_missing_input(tmp_path: Path):
    assert main(["-p", "p", "-o", str(tmp_path / "x.go"), str(tmp_path / "missing.go")]) == 1


def test_config_file_and_write_config(testdata: Path, tmp_path: Path):
    config_path = tmp_path / "scaneo.json"
    config_path.write_text(json.dumps({"package_name": "fromfile", "unexport": True}), encoding="utf-8")
    written = tmp_path / "effective.json"

    assert main(["--config", str(config_path), "-w", "Post", "--write-config", str(written)]) == 0

    data = json.loads(written.read_text(encoding="utf-8"))
    assert data["package_name"] == "fromfile"
    assert data["unexport"] is True
    assert data["whitelist"] == ["Post"]


def test_list_templates(capsys):
    assert main(["--list-templates"]) == 0
    err = capsys.readouterr().err
    assert "scans_test" in err
