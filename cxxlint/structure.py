# Lightweight structural view over the code tokens of one unit: bracket pairs,
# brace scope kinds (destructor, enum, class, ...), preprocessor lines, statement
# starts and type names declared in the unit. This is not a parser; it only knows
# as much structure as the rules need.

from __future__ import annotations

import logging
from typing import Optional, Sequence

from cxxlint.lexer import Token, TokenKind

logger = logging.getLogger(__name__)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")": "(", "]": "[", "}": "{"}

SCOPE_DESTRUCTOR = "destructor"
SCOPE_FUNCTION = "function"
SCOPE_ENUM = "enum"
SCOPE_CLASS = "class"
SCOPE_NAMESPACE = "namespace"
SCOPE_INIT = "init"
SCOPE_BLOCK = "block"

BUILTIN_TYPE_KEYWORDS: frozenset[str] = frozenset(
    {
        "bool", "char", "char8_t", "char16_t", "char32_t", "wchar_t", "short",
        "int", "long", "signed", "unsigned", "float", "double", "void",
    }
)

LIBRARY_TYPE_NAMES: frozenset[str] = frozenset(
    {
        "size_t", "ssize_t", "ptrdiff_t", "intptr_t", "uintptr_t", "intmax_t",
        "uintmax_t", "int8_t", "int16_t", "int32_t", "int64_t", "uint8_t",
        "uint16_t", "uint32_t", "uint64_t", "byte", "nullptr_t", "string",
        "wstring", "string_view", "FILE",
    }
)

_CONTROL_KEYWORDS = frozenset({"if", "while", "for", "switch", "catch"})
_ACCESS_KEYWORDS = frozenset({"public", "private", "protected"})
_CLASS_KEYS = frozenset({"class", "struct", "union"})
# Tokens that may sit between a function's closing parenthesis and its body.
_TRAILING_SPECIFIERS = frozenset({"const", "volatile", "noexcept", "override", "final", "mutable"})
_INIT_BRACE_PREDECESSORS = frozenset({"=", "(", ",", "[", "return", "?", "<<", "{"})


class StructureView:
    """
    Derived, read-only structure for a token sequence.

    tokens are the code tokens of a unit (comments and END_OF_FILE removed);
    every index taken or returned by this class is an index into that sequence.
    """

    def __init__(self, tokens: Sequence[Token], lines: Sequence[str]) -> None:
        self.tokens = tuple(tokens)
        self._lines = lines
        self.matching: dict[int, int] = {}
        self.enclosing_brace: list[int] = [-1] * len(self.tokens)
        self.scope_kind: dict[int, str] = {}
        self.preprocessor: frozenset[int] = self._find_preprocessor_tokens()
        self._match_brackets()
        self._classify_scopes()
        self.declared_types: frozenset[str] = self._collect_declared_types()
        logger.debug(
            "Structure: %d bracket pair(s), %d brace scope(s), %d preprocessor token(s), %d declared type(s)",
            len(self.matching) // 2,
            len(self.scope_kind),
            len(self.preprocessor),
            len(self.declared_types),
        )

    # -- queries ------------------------------------------------------------

    def token(self, index: int) -> Optional[Token]:
        """Token at index, or None when out of range (including negative)."""
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def in_preprocessor(self, index: int) -> bool:
        return index in self.preprocessor

    def innermost_scope(self, index: int) -> Optional[str]:
        brace = self.enclosing_brace[index]
        if brace < 0:
            return None
        return self.scope_kind.get(brace)

    def in_scope(self, index: int, kind: str) -> bool:
        """True if any enclosing brace scope of the token has the given kind."""
        brace = self.enclosing_brace[index]
        while brace >= 0:
            if self.scope_kind.get(brace) == kind:
                return True
            brace = self.enclosing_brace[brace]
        return False

    def is_type_name(self, token: Token) -> bool:
        """True for builtin type keywords, well-known library types and declared types."""
        if token.kind is TokenKind.KEYWORD:
            return token.lexeme in BUILTIN_TYPE_KEYWORDS
        if token.kind is TokenKind.IDENTIFIER:
            return token.lexeme in LIBRARY_TYPE_NAMES or token.lexeme in self.declared_types
        return False

    def closes_control_condition(self, index: int) -> bool:
        """True if the token at index is the `)` of an if/while/for/switch/catch head."""
        tok = self.token(index)
        if tok is None or not tok.is_symbol(")") or index not in self.matching:
            return False
        owner = self.token(self.matching[index] - 1)
        return owner is not None and owner.is_keyword(*_CONTROL_KEYWORDS)

    def statement_start(self, index: int) -> int:
        """
        Index of the first token of the statement or declaration containing index.

        Walks backwards over balanced brackets and initializer braces and stops at
        the previous `;`, at a block brace, after an access specifier, or at a
        preprocessor line.
        """
        j = index - 1
        while j >= 0:
            if j in self.preprocessor:
                break
            tok = self.tokens[j]
            if tok.is_symbol(";"):
                break
            if tok.is_symbol("}"):
                opener = self.matching.get(j)
                if opener is not None and self.scope_kind.get(opener) == SCOPE_INIT:
                    j = opener - 1
                    continue
                break
            if tok.is_symbol("{"):
                if self.scope_kind.get(j) == SCOPE_INIT:
                    j -= 1
                    continue
                break
            if tok.is_symbol(")", "]") and j in self.matching:
                j = self.matching[j] - 1
                continue
            if tok.is_symbol(":") and j > 0 and self.tokens[j - 1].is_keyword(*_ACCESS_KEYWORDS):
                break
            j -= 1
        return j + 1

    def statement_end(self, index: int) -> int:
        """Index of the `;` ending the statement containing index, or len(tokens)."""
        j = index
        while j < len(self.tokens):
            tok = self.tokens[j]
            if tok.is_symbol(";"):
                return j
            if tok.is_symbol("(", "[") and j in self.matching:
                j = self.matching[j] + 1
                continue
            if tok.is_symbol("{"):
                if self.scope_kind.get(j) == SCOPE_INIT and j in self.matching:
                    j = self.matching[j] + 1
                    continue
                return j
            if tok.is_symbol("}"):
                return j
            j += 1
        return len(self.tokens)

    # -- construction -------------------------------------------------------

    def _find_preprocessor_tokens(self) -> frozenset[int]:
        marked: set[int] = set()
        directive_end_line = 0
        for i, tok in enumerate(self.tokens):
            if tok.line <= directive_end_line:
                marked.add(i)
                continue
            if tok.is_symbol("#") and self._line_text(tok.line).lstrip().startswith("#"):
                end = tok.line
                while self._line_text(end).rstrip().endswith("\\"):
                    end += 1
                directive_end_line = end
                marked.add(i)
        return frozenset(marked)

    def _line_text(self, line: int) -> str:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1]
        return ""

    def _match_brackets(self) -> None:
        stack: list[int] = []
        for i, tok in enumerate(self.tokens):
            if i in self.preprocessor or tok.kind is not TokenKind.PUNCTUATION:
                if stack:
                    self.enclosing_brace[i] = self._innermost_brace(stack)
                continue
            if stack:
                self.enclosing_brace[i] = self._innermost_brace(stack)
            if tok.lexeme in _OPENERS:
                stack.append(i)
            elif tok.lexeme in _CLOSERS:
                # Pop back to the nearest matching opener; mismatched openers are dropped.
                for depth in range(len(stack) - 1, -1, -1):
                    if self.tokens[stack[depth]].lexeme == _CLOSERS[tok.lexeme]:
                        opener = stack[depth]
                        del stack[depth:]
                        self.matching[opener] = i
                        self.matching[i] = opener
                        break
                if stack:
                    self.enclosing_brace[i] = self._innermost_brace(stack)
                else:
                    self.enclosing_brace[i] = -1
        if stack:
            logger.debug("%d unmatched bracket(s) left open at end of unit", len(stack))

    def _innermost_brace(self, stack: list[int]) -> int:
        for opener in reversed(stack):
            if self.tokens[opener].lexeme == "{":
                return opener
        return -1

    def _classify_scopes(self) -> None:
        for i, tok in enumerate(self.tokens):
            if tok.is_symbol("{") and i not in self.preprocessor:
                self.scope_kind[i] = self._classify_brace(i)

    def _classify_brace(self, index: int) -> str:
        prev = self.token(index - 1)
        if prev is None:
            return SCOPE_BLOCK
        if prev.lexeme in _INIT_BRACE_PREDECESSORS and prev.kind is not TokenKind.IDENTIFIER:
            if prev.lexeme != "{" or self.scope_kind.get(index - 1) == SCOPE_INIT:
                return SCOPE_INIT

        head_start = self._head_start(index)
        head = self.tokens[head_start:index]
        top_level = self._top_level(head_start, index)

        if any(t.is_keyword("enum") for t in top_level):
            return SCOPE_ENUM
        if head and head[0].is_keyword("namespace", "inline", "extern") and not any(
            t.is_symbol("(") for t in top_level
        ):
            return SCOPE_NAMESPACE
        if any(t.is_keyword(*_CLASS_KEYS) for t in top_level) and not any(
            t.is_symbol("(") for t in top_level
        ):
            return SCOPE_CLASS

        close = self._skip_trailing_specifiers(index - 1, head_start)
        if close is not None:
            opener = self.matching[close]
            callee = self.token(opener - 1)
            before = self.token(opener - 2)
            if callee is not None and callee.is_keyword(*_CONTROL_KEYWORDS):
                return SCOPE_BLOCK
            if callee is not None and callee.is_identifier() and before is not None and before.is_symbol("~"):
                return SCOPE_DESTRUCTOR
            return SCOPE_FUNCTION

        if prev.kind is TokenKind.IDENTIFIER or prev.is_symbol("]", ">"):
            return SCOPE_INIT
        return SCOPE_BLOCK

    def _head_start(self, index: int) -> int:
        """First token of the construct that introduces the brace at index."""
        j = index - 1
        while j >= 0:
            if j in self.preprocessor:
                break
            tok = self.tokens[j]
            if tok.is_symbol(";", "{", "}"):
                break
            if tok.is_symbol(")", "]") and j in self.matching:
                j = self.matching[j] - 1
                continue
            if tok.is_symbol(":") and j > 0 and self.tokens[j - 1].is_keyword(*_ACCESS_KEYWORDS):
                break
            j -= 1
        return j + 1

    def _top_level(self, start: int, end: int) -> list[Token]:
        """Tokens in [start, end) that are not nested inside () or []."""
        result: list[Token] = []
        j = start
        while j < end:
            tok = self.tokens[j]
            result.append(tok)
            if tok.is_symbol("(", "[") and j in self.matching and self.matching[j] < end:
                result.append(self.tokens[self.matching[j]])
                j = self.matching[j] + 1
                continue
            j += 1
        return result

    def _skip_trailing_specifiers(self, j: int, head_start: int) -> Optional[int]:
        """
        From the token before a `{`, step back over const/noexcept/override and
        `noexcept(...)`/`throw(...)` groups. Returns the index of the closing
        parenthesis of the parameter list, or None when there is none.
        """
        while j >= head_start:
            tok = self.tokens[j]
            if tok.is_keyword(*_TRAILING_SPECIFIERS) or tok.is_identifier("override", "final"):
                j -= 1
                continue
            if tok.is_symbol(")") and j in self.matching:
                opener = self.matching[j]
                owner = self.token(opener - 1)
                if owner is not None and owner.is_keyword("noexcept", "throw"):
                    j = opener - 2
                    continue
                if opener >= head_start:
                    return j
                return None
            return None
        return None

    def _collect_declared_types(self) -> frozenset[str]:
        names: set[str] = set()
        tokens = self.tokens
        for i, tok in enumerate(tokens):
            nxt = self.token(i + 1)
            if nxt is None:
                break
            if tok.is_keyword(*_CLASS_KEYS) or tok.is_keyword("enum"):
                j = i + 1
                # enum class / enum struct, attributes and alignas(...) before the name
                while j < len(tokens) and (
                    tokens[j].is_keyword("class", "struct", "alignas") or tokens[j].is_symbol("[", "]", "(", ")")
                ):
                    if tokens[j].is_symbol("(", "[") and j in self.matching:
                        j = self.matching[j]
                    j += 1
                name = self.token(j)
                if name is not None and name.is_identifier():
                    names.add(name.lexeme)
            elif tok.is_keyword("typename") and nxt.is_identifier():
                prev = self.token(i - 1)
                if prev is not None and prev.is_symbol("<", ","):
                    names.add(nxt.lexeme)
            elif tok.is_keyword("using") and nxt.is_identifier():
                after = self.token(i + 2)
                if after is not None and after.is_symbol("="):
                    names.add(nxt.lexeme)
            elif tok.is_keyword("typedef"):
                end = self.statement_end(i)
                name = self.token(end - 1)
                if name is not None and name.is_identifier():
                    names.add(name.lexeme)
        return frozenset(names)
