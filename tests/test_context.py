"""Tests for cxxlint.context: SourceUnit, create_source_unit, load_source, load_sources."""

import logging
from pathlib import Path

import pytest

from cxxlint.context import SourceUnit, create_source_unit, load_source, load_sources
from cxxlint.lexer import ScanError, TokenKind, tokenize


def test_create_source_unit_splits_tokens_and_comments():
    """The unit separates code tokens from comment tokens."""
    unit = create_source_unit("int a; // note\n/* block */ int b;\n")
    assert [t.lexeme for t in unit.comments] == ["// note", "/* block */"]
    assert all(t.kind is not TokenKind.COMMENT for t in unit.code_tokens)
    assert all(t.kind is not TokenKind.END_OF_FILE for t in unit.code_tokens)
    assert unit.end_of_file.kind is TokenKind.END_OF_FILE
    assert len(unit.tokens) == len(unit.code_tokens) + len(unit.comments) + 1


def test_source_unit_keeps_path_and_text(tmp_path):
    """Path and original text are kept on the unit."""
    path = tmp_path / "main.cpp"
    unit = create_source_unit("int main() { return 0; }\n", path=path)
    assert unit.path == path
    assert unit.text == "int main() { return 0; }\n"
    assert unit.structure.tokens == unit.code_tokens


def test_line_text_one_based():
    """line_text() uses 1-based line numbers."""
    unit = SourceUnit("first\r\nsecond\n", tokenize("first\r\nsecond\n"))
    assert unit.line_text(1) == "first"
    assert unit.line_text(2) == "second"
    assert unit.line_text(3) == ""
    assert unit.line_text(0) == ""
    assert unit.line_text(99) == ""


def test_contains_position():
    """Positions past the last line or column are outside the unit."""
    unit = create_source_unit("int a;\n")
    assert unit.contains_position(1, 1)
    assert unit.contains_position(1, 7)
    assert not unit.contains_position(1, 8)
    assert unit.contains_position(2, 1)
    assert not unit.contains_position(2, 2)
    assert not unit.contains_position(0, 1)
    assert not unit.contains_position(3, 1)


def test_create_source_unit_propagates_scan_error():
    """A scan error surfaces unchanged from create_source_unit()."""
    with pytest.raises(ScanError):
        create_source_unit('auto s = "open;\n')


def test_create_source_unit_logs(caplog):
    """Building a unit logs its token count."""
    with caplog.at_level(logging.INFO, logger="cxxlint.context"):
        create_source_unit("int a;\n", path=Path("a.cpp"))
    assert "Scanned a.cpp" in caplog.text


def test_load_source_reads_text(tmp_path):
    """load_source() returns the file text."""
    path = tmp_path / "a.cpp"
    path.write_text("int a;\n", encoding="utf-8")
    assert load_source(path) == "int a;\n"


def test_load_source_replaces_undecodable_bytes(tmp_path):
    """Invalid UTF-8 is replaced rather than failing the file."""
    path = tmp_path / "latin1.cpp"
    path.write_bytes(b"// caf\xe9\nint a;\n")
    text = load_source(path)
    assert text is not None
    assert "int a;" in text


def test_load_source_nonexistent_logs_error(caplog):
    """A missing file logs an error and returns None."""
    with caplog.at_level(logging.ERROR):
        assert load_source(Path("/nonexistent/file.cpp")) is None
    assert "Failed to read file" in caplog.text


def test_load_sources_keeps_order_and_skips_unreadable(tmp_path):
    """load_sources() keeps input order and drops unreadable paths."""
    a = tmp_path / "a.cpp"
    b = tmp_path / "b.cpp"
    a.write_text("int a;\n")
    b.write_text("int b;\n")
    sources = load_sources([b, tmp_path / "missing.cpp", a])
    assert list(sources) == [b, a]
    assert sources[a] == "int a;\n"
