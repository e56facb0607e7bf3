# C-style cast detection: flags `(Type)expr` casts

from __future__ import annotations

from typing import Optional

from cxxlint.context import SourceUnit
from cxxlint.findings.models import Finding, Severity
from cxxlint.lexer import Token, TokenKind
from cxxlint.rules.base import Rule, RuleDescriptor
from cxxlint.structure import BUILTIN_TYPE_KEYWORDS, StructureView

# Keywords whose parenthesised operand is a type or expression, never a cast.
NON_CAST_KEYWORDS = frozenset(
    {
        "sizeof", "alignof", "alignas", "decltype", "typeid", "noexcept",
        "static_assert", "operator", "requires", "throw",
    }
) | BUILTIN_TYPE_KEYWORDS

EXPRESSION_KEYWORDS = frozenset(
    {
        "this", "true", "false", "nullptr", "sizeof", "alignof", "new", "typeid",
        "static_cast", "const_cast", "reinterpret_cast", "dynamic_cast",
    }
)

EXPRESSION_PREFIX_SYMBOLS = frozenset({"(", "!", "~", "-", "+", "*", "&", "++", "--", "::"})

_CV = ("const", "volatile")
_ELABORATED = ("typename", "struct", "class", "enum", "union")


def _starts_expression(tok: Token) -> bool:
    if tok.kind in (TokenKind.IDENTIFIER, TokenKind.NUMERIC_LITERAL, TokenKind.STRING_LITERAL):
        return True
    if tok.kind is TokenKind.KEYWORD:
        return tok.lexeme in EXPRESSION_KEYWORDS
    return tok.is_symbol(*EXPRESSION_PREFIX_SYMBOLS)


def _skip_template_args(tokens: tuple[Token, ...], k: int) -> int:
    """k points at `<`; return the index just past its matching `>` (or len(tokens))."""
    depth = 0
    while k < len(tokens):
        tok = tokens[k]
        if tok.is_symbol("<"):
            depth += 1
        elif tok.is_symbol(">"):
            depth -= 1
        elif tok.is_symbol(">>"):
            depth -= 2
        k += 1
        if depth <= 0:
            return k
    return k


def cast_type_name(view: StructureView, start: int, end: int) -> Optional[str]:
    """
    If tokens[start:end] spell a type name (cv-qualifiers, builtin keywords or a
    possibly qualified known type, then */&), return it as text; otherwise None.
    """
    tokens = view.tokens[start:end]
    k = 0
    while k < len(tokens) and tokens[k].is_keyword(*_CV):
        k += 1
    if k >= len(tokens):
        return None

    if tokens[k].is_keyword(*BUILTIN_TYPE_KEYWORDS):
        while k < len(tokens) and tokens[k].is_keyword(*BUILTIN_TYPE_KEYWORDS, *_CV):
            k += 1
    else:
        if tokens[k].is_keyword(*_ELABORATED):
            k += 1
        if k < len(tokens) and tokens[k].is_symbol("::"):
            k += 1
        last: Optional[Token] = None
        while k < len(tokens) and tokens[k].is_identifier():
            last = tokens[k]
            k += 1
            if k < len(tokens) and tokens[k].is_symbol("<"):
                k = _skip_template_args(tokens, k)
            if k < len(tokens) and tokens[k].is_symbol("::"):
                k += 1
                continue
            break
        if last is None or not view.is_type_name(last):
            return None

    while k < len(tokens) and (tokens[k].is_symbol("*", "&", "&&") or tokens[k].is_keyword(*_CV)):
        k += 1
    if k != len(tokens):
        return None
    return _spell(tokens)


def _spell(tokens: tuple[Token, ...]) -> str:
    """Type tokens as source-like text: `const char*`, `std::size_t`, `char* const`."""
    words = (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
    text = ""
    prev: Optional[Token] = None
    for tok in tokens:
        if prev is not None and tok.kind in words and (
            prev.kind in words or prev.is_symbol("*", "&", "&&")
        ):
            text += " "
        text += tok.lexeme
        prev = tok
    return text


class CStyleCastRule(Rule):
    """
    Flags `(Type)expr`.

    The parenthesised text must resolve to a known type name: a builtin type,
    a well-known library type, or a type declared in the same unit. Parentheses
    after a callee (`f(int)`, `T(x)`) or after sizeof/decltype/etc. are not casts.
    """

    descriptor = RuleDescriptor(
        id="c_style_cast",
        title="C-style cast",
        default_severity=Severity.WARNING,
        suggestion="Use static_cast (or const_cast/reinterpret_cast where that is really meant).",
    )

    def run(self, unit: SourceUnit) -> list[Finding]:
        findings: list[Finding] = []
        view = unit.structure
        for i, tok in enumerate(view.tokens):
            if not tok.is_symbol("(") or view.in_preprocessor(i):
                continue
            close = view.matching.get(i)
            if close is None or close <= i + 1:
                continue
            prev = view.token(i - 1)
            if prev is not None and (
                prev.is_identifier()
                or (prev.is_symbol(")") and not view.closes_control_condition(i - 1))
                or prev.is_symbol("]", ">")
                or prev.is_keyword(*NON_CAST_KEYWORDS)
            ):
                continue
            type_name = cast_type_name(view, i + 1, close)
            if type_name is None:
                continue
            after = view.token(close + 1)
            if after is None or not _starts_expression(after):
                continue
            findings.append(
                self.finding(
                    unit,
                    tok,
                    f"C-style cast to '{type_name}'; use static_cast or another named C++ cast.",
                )
            )
        return findings
