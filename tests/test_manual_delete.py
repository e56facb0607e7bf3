"""Unit tests for the manual_delete rule."""

from cxxlint.context import create_source_unit
from cxxlint.rules.manual_delete import ManualDeleteRule


def _run_rule(source: str) -> list:
    """Scan source, run ManualDeleteRule, return findings."""
    return ManualDeleteRule().run(create_source_unit(source))


def test_delete_in_function_flagged():
    """`delete` in an ordinary function is reported."""
    findings = _run_rule("void release(Widget* w) {\n    delete w;\n}")
    assert len(findings) == 1
    f = findings[0]
    assert f.rule_id == "manual_delete"
    assert (f.line, f.column) == (2, 5)
    assert "'delete'" in f.message


def test_array_delete_flagged_with_form_in_message():
    """`delete[]` is reported with that form in the message."""
    findings = _run_rule("void release(int* p) { delete[] p; }")
    assert len(findings) == 1
    assert "'delete[]'" in findings[0].message


def test_delete_in_destructor_not_flagged():
    source = """
class Buffer {
public:
    ~Buffer() {
        delete[] data_;
    }
    virtual ~Buffer2() noexcept { if (owned_) { delete other_; } }
private:
    int* data_;
};

Buffer::~Buffer() { delete data_; }
"""
    assert _run_rule(source) == []


def test_delete_in_constructor_flagged():
    source = """
class Buffer {
public:
    Buffer() { delete data_; }
};
"""
    assert len(_run_rule(source)) == 1


def test_deleted_functions_not_flagged():
    source = """
class NoCopy {
public:
    NoCopy(const NoCopy&) = delete;
    NoCopy& operator=(const NoCopy&) = delete;
};
"""
    assert _run_rule(source) == []


def test_operator_delete_not_flagged():
    """`operator delete` and `= delete` are not deallocations."""
    assert _run_rule("void operator delete(void* p) noexcept;") == []


def test_delete_in_comment_or_string_not_flagged():
    """`delete` in comments and strings is ignored."""
    assert _run_rule('// delete p;\nconst char* s = "delete p";') == []


def test_each_delete_reported():
    """Each delete gets its own finding."""
    findings = _run_rule("void f(int* a, int* b) { delete a; delete b; }")
    assert len(findings) == 2
    assert findings[0].column < findings[1].column
