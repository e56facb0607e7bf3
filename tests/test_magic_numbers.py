"""Unit tests for the magic_numbers rule and literal_value()."""

import pytest

from cxxlint.context import create_source_unit
from cxxlint.findings.models import Severity
from cxxlint.rules.magic_numbers import MagicNumbersRule, literal_value


def _run_rule(source: str) -> list:
    """Scan source, run MagicNumbersRule, return findings."""
    return MagicNumbersRule().run(create_source_unit(source))


def _lexemes(findings) -> list[str]:
    return [f.message.split()[2] for f in findings]


@pytest.mark.parametrize(
    "lexeme, value",
    [
        ("42", 42),
        ("0x10", 16),
        ("0xFFu", 255),
        ("0b101", 5),
        ("017", 15),
        ("1'000", 1000),
        ("10ull", 10),
        ("3.14f", 3.14),
        ("1e3", 1000.0),
        ("0x1p4", 16.0),
        ("0.0", 0.0),
    ],
)
def test_literal_value(lexeme, value):
    """C++ literal syntax parses to its numeric value."""
    assert literal_value(lexeme) == value


def test_literal_value_unparseable():
    """Malformed literals parse to None."""
    assert literal_value("0xZZ") is None


def test_bare_literal_flagged():
    """A literal in an expression is reported with its text."""
    findings = _run_rule("int scale(int x) {\n    return x * 42;\n}")
    assert len(findings) == 1
    f = findings[0]
    assert f.rule_id == "magic_numbers"
    assert (f.line, f.column) == (2, 16)
    assert f.severity is Severity.STYLE
    assert f.message == "Magic number 42 should be replaced with a named constant."


def test_zero_and_one_exempt():
    """0 and 1 in any spelling are never reported."""
    source = "void f() { int a = 0; int b = 1; int c = -1; double d = 1.0; double e = 0.0f; }"
    assert _run_rule(source) == []


def test_floating_literal_flagged_with_suffix_in_message():
    """The message quotes the literal as written."""
    findings = _run_rule("void f() { g(3.14f); }")
    assert _lexemes(findings) == ["3.14f"]


def test_named_constants_exempt():
    source = """
constexpr int kMaxItems = 100;
const double kPi = 3.14159;
static const int kWidth{64};
constinit int kDepth = 8;
"""
    assert _run_rule(source) == []


def test_non_constant_declaration_flagged():
    """Only const/constexpr initialisers are exempt."""
    assert _lexemes(_run_rule("void f() { int x = 10; }")) == ["10"]


def test_enum_values_exempt():
    """Enumerator values are named already."""
    source = "enum Color { Red = 2, Green = 4 };\nenum class Mode : int { Fast = 10 };"
    assert _run_rule(source) == []


def test_array_sizes_exempt():
    source = """
int buffer[256];
char grid[8][8];
void f() {
    int* p = new int[100];
    std::string* names = new std::string[12];
}
"""
    assert _run_rule(source) == []


def test_subscripts_flagged():
    """Indexing with a literal is reported; array sizes are not."""
    assert _lexemes(_run_rule("void f() { arr[5] = 3; }")) == ["5", "3"]


def test_template_argument_flagged():
    """Template arguments get no exemption."""
    assert _lexemes(_run_rule("std::array<int, 16> values;")) == ["16"]


def test_preprocessor_exempt():
    """Literals on directive lines are ignored."""
    source = "#define BUFFER_SIZE 4096\n#if VERSION > 2\n#endif\nint x;"
    assert _run_rule(source) == []


def test_literals_in_strings_and_comments_ignored():
    """Digits in strings and comments are not literals."""
    source = 'const char* s = "42"; // 99 bottles\n/* 7 */'
    assert _run_rule(source) == []
