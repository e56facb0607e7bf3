# Magic number detection: flags bare numeric literals that are not bound to a named constant

from __future__ import annotations

import re
from typing import Optional, Union

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.lexer import TokenKind
from cxxlint.rules.base import Rule, RuleDescriptor
from cxxlint.structure import BUILTIN_TYPE_KEYWORDS, SCOPE_ENUM, SCOPE_INIT, StructureView

# 0 and 1 (and therefore -1, which is unary minus applied to 1) are never magic.
EXEMPT_VALUES = frozenset({0, 1})

CONSTANT_QUALIFIERS = frozenset({"const", "constexpr", "constinit"})

_DECIMAL = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?")
_HEX_EXPONENT = re.compile(r"[+-]?\d+")
_TYPE_KEYWORDS = BUILTIN_TYPE_KEYWORDS | {"const", "volatile", "typename", "struct", "class"}
# Bound on how far back an array-new type is searched for its `new`.
_MAX_NEW_TYPE_TOKENS = 16


def literal_value(lexeme: str) -> Optional[Union[int, float]]:
    """
    Numeric value of a C++ literal, ignoring suffixes and digit separators.

    Returns None when the text is not a recognisable number.
    """
    text = lexeme.replace("'", "").lower()
    try:
        if text.startswith("0x"):
            if "p" in text:
                mantissa, exponent = text.split("p", 1)
                exp = _HEX_EXPONENT.match(exponent)
                if exp is None:
                    return None
                return float.fromhex(f"{mantissa}p{exp.group()}")
            return int(text[2:].rstrip("ulz"), 16)
        if text.startswith("0b"):
            return int(text[2:].rstrip("ulz"), 2)
        match = _DECIMAL.match(text)
        if match is None:
            return None
        number = match.group()
        if "." in number or "e" in number:
            return float(number)
        if len(number) > 1 and number.startswith("0"):
            return int(number, 8)
        return int(number)
    except ValueError:
        return None


def _first_bracket_of_chain(view: StructureView, opener: int) -> int:
    """For `a[2][3]`, step from any `[` back to the first one in the chain."""
    while True:
        prev = view.token(opener - 1)
        if prev is None or not prev.is_symbol("]") or (opener - 1) not in view.matching:
            return opener
        opener = view.matching[opener - 1]


def _is_declarator_bracket(view: StructureView, first: int) -> bool:
    """True for `T name[`, `T* name[` and `new T[` (plus qualified/template types)."""
    name = view.token(first - 1)
    if name is None:
        return False
    if name.is_keyword(*BUILTIN_TYPE_KEYWORDS) or name.is_identifier() or name.is_symbol(">", "*"):
        # array-new: walk the type back to the `new` keyword
        for k in range(first - 1, max(first - 1 - _MAX_NEW_TYPE_TOKENS, -1), -1):
            tok = view.tokens[k]
            if tok.is_keyword("new"):
                return True
            if not (
                tok.is_identifier()
                or tok.is_keyword(*_TYPE_KEYWORDS)
                or tok.is_symbol("::", "<", ">", ",", "*")
            ):
                break
    if not name.is_identifier():
        return False
    declared_type = view.token(first - 2)
    if declared_type is None:
        return False
    if declared_type.is_symbol("*", "&"):
        declared_type = view.token(first - 3)
        if declared_type is None:
            return False
    return view.is_type_name(declared_type) or declared_type.is_identifier() or declared_type.is_symbol(">")


def _in_array_size(view: StructureView, index: int) -> bool:
    j = index - 1
    while j >= 0:
        tok = view.tokens[j]
        if tok.is_symbol(")", "]") and j in view.matching:
            j = view.matching[j] - 1
            continue
        if tok.is_symbol("["):
            return _is_declarator_bracket(view, _first_bracket_of_chain(view, j))
        if tok.is_symbol("(", "{", "}", ";", ","):
            return False
        j -= 1
    return False


def _initializes_named_constant(view: StructureView, index: int) -> bool:
    """True if the literal sits in the initializer of a const/constexpr/constinit declaration."""
    start = view.statement_start(index)
    for k in range(start, index):
        tok = view.tokens[k]
        is_initializer = tok.is_symbol("=") or (
            tok.is_symbol("{") and view.scope_kind.get(k) == SCOPE_INIT
        )
        if is_initializer:
            return any(t.is_keyword(*CONSTANT_QUALIFIERS) for t in view.tokens[start:k])
    return False


class MagicNumbersRule(Rule):
    """
    Flags numeric literals other than 0 and 1 that appear outside a named-constant
    initializer, an enum body, an array-size context or a preprocessor directive.
    """

    descriptor = RuleDescriptor(
        id="magic_numbers",
        title="Magic number",
        default_severity=Severity.STYLE,
        suggestion="Give the value a name: a constexpr variable or an enumerator.",
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if tok.kind is not TokenKind.NUMERIC_LITERAL:
                continue
            value = literal_value(tok.lexeme)
            if value is None or value in EXEMPT_VALUES:
                continue
            if self._is_exempt_context(view, i):
                continue
            findings.append(
                self.finding(
                    unit,
                    tok,
                    f"Magic number {tok.lexeme} should be replaced with a named constant.",
                )
            )
        return findings

    def _is_exempt_context(self, view: StructureView, index: int) -> bool:
        if view.in_preprocessor(index):
            return True
        if view.innermost_scope(index) == SCOPE_ENUM:
            return True
        if _in_array_size(view, index):
            return True
        return _initializes_named_constant(view, index)
