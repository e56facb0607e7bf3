# Raw allocation detection: flags `new` expressions whose result is stored in a raw pointer

from __future__ import annotations

from typing import Optional

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.lexer import TokenKind
from cxxlint.rules.base import Rule, RuleDescriptor
from cxxlint.structure import BUILTIN_TYPE_KEYWORDS, StructureView

# Owning wrappers and factories; a `new` handed to one of these is already managed.
SMART_POINTER_NAMES = frozenset(
    {
        "unique_ptr",
        "shared_ptr",
        "weak_ptr",
        "auto_ptr",
        "scoped_ptr",
        "scoped_array",
        "shared_array",
        "intrusive_ptr",
        "make_unique",
        "make_shared",
        "make_unique_for_overwrite",
        "make_shared_for_overwrite",
        "allocate_shared",
        "reset",
    }
)

_TYPE_START_KEYWORDS = BUILTIN_TYPE_KEYWORDS | {"const", "volatile", "auto", "typename", "decltype", "struct", "class"}


def _has_allocated_type(view: StructureView, index: int) -> bool:
    """True if the `new` at index is followed by a type (after optional placement args)."""
    j = index + 1
    tok = view.token(j)
    if tok is not None and tok.is_symbol("(") and j in view.matching:
        j = view.matching[j] + 1
        tok = view.token(j)
    if tok is not None and tok.is_symbol("::"):
        tok = view.token(j + 1)
    if tok is None:
        return False
    return tok.is_identifier() or (tok.kind is TokenKind.KEYWORD and tok.lexeme in _TYPE_START_KEYWORDS)


def _names_smart_pointer(view: StructureView, start: int, end: int) -> bool:
    return any(
        t.is_identifier(*SMART_POINTER_NAMES) for t in view.tokens[start:end]
    )


def _in_member_initializer_list(view: StructureView, member: int) -> bool:
    """
    True if the identifier at member names an entry of a constructor's
    member-initializer list, i.e. `) : a(x), b{y}, member(`.
    """
    j = member - 1
    while True:
        tok = view.token(j)
        if tok is None:
            return False
        if tok.is_symbol(":"):
            before = view.token(j - 1)
            return before is not None and (before.is_symbol(")") or before.is_keyword("noexcept"))
        if not tok.is_symbol(","):
            return False
        closer = view.token(j - 1)
        if closer is None or not closer.is_symbol(")", "}") or (j - 1) not in view.matching:
            return False
        opener = view.matching[j - 1]
        name = view.token(opener - 1)
        if name is None or not name.is_identifier():
            return False
        j = opener - 2


def _is_raw_pointer_initializer(view: StructureView, opener: int) -> bool:
    """
    The `new` sits directly inside `(`/`{` at opener. True when that bracket
    initializes a raw pointer declarator (`T* p(new T)`) or a member in a
    constructor's initializer list (`: data_(new int[4])`).
    """
    callee = view.token(opener - 1)
    if callee is None:
        return False
    if callee.is_symbol(">"):
        # Functional cast of a template type, e.g. std::unique_ptr<T>(new T).
        return False
    if not callee.is_identifier() or callee.lexeme in SMART_POINTER_NAMES:
        return False
    before = view.token(opener - 2)
    if before is None:
        return False
    if before.is_symbol("*"):
        start = view.statement_start(opener)
        return not _names_smart_pointer(view, start, opener)
    if before.is_symbol(":", ","):
        return _in_member_initializer_list(view, opener - 1)
    return False


def _conditional_anchor(view: StructureView, index: int) -> Optional[int]:
    """
    For a `new` that is an operand of `?:`, walk back to the `=`, `(` or `{`
    holding the whole conditional and return its index. None when the walk
    leaves the expression first or crosses no `?`.
    """
    saw_question = False
    j = index - 1
    while j >= 0:
        tok = view.tokens[j]
        if tok.is_symbol(")", "]") and j in view.matching:
            j = view.matching[j] - 1
            continue
        if tok.is_symbol("?"):
            saw_question = True
        elif tok.is_symbol("=", "(", "{"):
            return j if saw_question else None
        elif tok.is_symbol(";", "}", ","):
            return None
        j -= 1
    return None


class PreferSmartPointersRule(Rule):
    """Flags `new` whose result is assigned to, or initializes, a raw pointer."""

    descriptor = RuleDescriptor(
        id="prefer_smart_pointers",
        title="Raw pointer owns a new allocation",
        default_severity=Severity.WARNING,
        suggestion=(
            "Allocate with std::make_unique or std::make_shared, or use a container such as "
            "std::vector, so the memory is released automatically."
        ),
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if not tok.is_keyword("new") or view.in_preprocessor(i):
                continue
            if self._allocates_into_raw_pointer(view, i):
                findings.append(
                    self.finding(
                        unit,
                        tok,
                        "Result of 'new' is owned by a raw pointer; prefer std::make_unique or std::make_shared.",
                    )
                )
        return findings

    def _allocates_into_raw_pointer(self, view: StructureView, index: int) -> bool:
        prev = view.token(index - 1)
        if prev is None or prev.is_keyword("operator"):
            return False
        if not _has_allocated_type(view, index):
            return False
        if prev.is_symbol("="):
            start = view.statement_start(index)
            return not _names_smart_pointer(view, start, index)
        if prev.is_symbol("(", "{"):
            return _is_raw_pointer_initializer(view, index - 1)
        if prev.is_symbol("?", ":"):
            anchor = _conditional_anchor(view, index)
            if anchor is None:
                return False
            if view.tokens[anchor].is_symbol("="):
                start = view.statement_start(anchor)
                return not _names_smart_pointer(view, start, index)
            return _is_raw_pointer_initializer(view, anchor)
        return False
