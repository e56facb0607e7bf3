# Lexical scanner: convert C++ source text into classified tokens with line/column.
# Comments, string literals and numbers are resolved here, so rules never have to
# guess whether a piece of text is code, a comment, or the inside of a literal.

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class TokenKind(enum.Enum):
    """Token classes produced by the scanner."""

    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    NUMERIC_LITERAL = "numeric_literal"
    STRING_LITERAL = "string_literal"
    OPERATOR = "operator"
    COMMENT = "comment"
    PUNCTUATION = "punctuation"
    END_OF_FILE = "eof"


@dataclass(frozen=True)
class Token:
    """
    One lexical token.

    line and column are 1-based and point at the first character of the lexeme.
    String and character literals keep their quotes, prefix and suffix in lexeme;
    comments keep their delimiters.
    """

    kind: TokenKind
    lexeme: str
    line: int
    column: int

    @property
    def position(self) -> tuple[int, int]:
        return self.line, self.column

    def is_keyword(self, *words: str) -> bool:
        return self.kind is TokenKind.KEYWORD and (not words or self.lexeme in words)

    def is_identifier(self, *names: str) -> bool:
        return self.kind is TokenKind.IDENTIFIER and (not names or self.lexeme in names)

    def is_symbol(self, *symbols: str) -> bool:
        """True for an operator or punctuation token whose text is one of symbols."""
        return (
            self.kind in (TokenKind.OPERATOR, TokenKind.PUNCTUATION)
            and self.lexeme in symbols
        )


class ScanErrorKind(enum.Enum):
    UNTERMINATED_STRING = "unterminated_string"
    UNTERMINATED_COMMENT = "unterminated_comment"
    INVALID_ESCAPE_SEQUENCE = "invalid_escape_sequence"


class ScanError(Exception):
    """
    Raised when the source cannot be tokenized.

    Attributes:
        kind: What went wrong (ScanErrorKind).
        line: 1-based line of the offending literal, comment or escape.
        column: 1-based column of the same.
    """

    def __init__(self, kind: ScanErrorKind, message: str, line: int, column: int) -> None:
        super().__init__(f"line {line}, column {column}: {message}")
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column


KEYWORDS: frozenset[str] = frozenset(
    {
        "alignas", "alignof", "asm", "auto", "bool", "break", "case", "catch",
        "char", "char8_t", "char16_t", "char32_t", "class", "concept", "const",
        "consteval", "constexpr", "constinit", "const_cast", "continue",
        "co_await", "co_return", "co_yield", "decltype", "default", "delete",
        "do", "double", "dynamic_cast", "else", "enum", "explicit", "export",
        "extern", "false", "float", "for", "friend", "goto", "if", "inline",
        "int", "long", "mutable", "namespace", "new", "noexcept", "nullptr",
        "operator", "private", "protected", "public", "register",
        "reinterpret_cast", "requires", "return", "short", "signed", "sizeof",
        "static", "static_assert", "static_cast", "struct", "switch",
        "template", "this", "thread_local", "throw", "true", "try", "typedef",
        "typeid", "typename", "union", "unsigned", "using", "virtual", "void",
        "volatile", "wchar_t", "while",
    }
)

# Longest first: the scanner takes the first entry that matches.
OPERATORS: tuple[str, ...] = (
    "<=>", "<<=", ">>=", "->*", "...",
    "::", "->", "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", ".*", "##",
    "+", "-", "*", "/", "%", "=", "<", ">", "!", "~", "&", "|", "^", "?", ":", ".",
)

PUNCTUATION: frozenset[str] = frozenset({"{", "}", "(", ")", "[", "]", ";", ",", "#"})

STRING_PREFIXES: frozenset[str] = frozenset({"L", "u", "U", "u8"})
RAW_STRING_PREFIXES: frozenset[str] = frozenset({"R", "LR", "uR", "UR", "u8R"})

_SIMPLE_ESCAPES = frozenset("'\"?\\abfnrtv")
_DECIMAL_DIGITS = frozenset("0123456789")
_OCTAL_DIGITS = frozenset("01234567")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_IDENTIFIER = re.compile(r"[^\W\d]\w*")
# C++ preprocessing-number: covers integer/floating forms, digit separators and suffixes.
_PP_NUMBER = re.compile(r"\.?[0-9](?:[eEpP][+-]|'[0-9A-Za-z_]|[0-9A-Za-z_.])*")
_HEADER_NAME = re.compile(r"<[^>\n]*>")
_RAW_DELIMITER = re.compile(r'[^\s()\\"]{0,16}\(')

_INCLUDE_DIRECTIVES = frozenset({"include", "include_next", "import"})
# Directives whose operand is free text; quotes in it do not start literals.
_MESSAGE_DIRECTIVES = frozenset({"error", "warning"})
_CONDITIONAL_OPENERS = frozenset({"if", "ifdef", "ifndef"})
_CONDITIONAL_BRANCHES = frozenset({"else", "elif", "elifdef", "elifndef"})
_DIRECTIVE_LINE = re.compile(r"[ \t]*#[ \t]*([A-Za-z_]\w*)")


def tokenize(source: str) -> list[Token]:
    """
    Tokenize C++ source text.

    Returns every token in source order, comments included, followed by exactly
    one END_OF_FILE token.

    Raises:
        ScanError: on an unterminated string/character literal, an unterminated
            block comment, or an invalid escape sequence inside a literal.
    """
    tokens = _Lexer(source).tokenize()
    logger.debug("Tokenized %d character(s) into %d token(s)", len(source), len(tokens))
    return tokens


class _Lexer:
    """Scanner state: absolute offset plus the 1-based line/column it maps to."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        while True:
            self._skip_whitespace()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenKind.END_OF_FILE, "", self._line, self._column))
        return self._tokens

    # -- position helpers ---------------------------------------------------

    def _current(self) -> str:
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        index = self._pos + offset
        if index < len(self._source):
            return self._source[index]
        return ""

    def _advance_to(self, end: int) -> None:
        """Move to absolute offset end, keeping line/column in step."""
        segment = self._source[self._pos : end]
        newlines = segment.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(segment) - segment.rfind("\n")
        else:
            self._column += len(segment)
        self._pos = end

    def _advance(self, count: int = 1) -> None:
        self._advance_to(min(self._pos + count, len(self._source)))

    def _at_line_splice(self) -> int:
        """Length of a backslash-newline at the current offset, or 0."""
        if self._current() != "\\":
            return 0
        if self._peek() == "\n":
            return 2
        if self._peek() == "\r" and self._peek(2) == "\n":
            return 3
        return 0

    def _emit(self, kind: TokenKind, start: int, line: int, column: int) -> None:
        self._tokens.append(Token(kind, self._source[start : self._pos], line, column))

    # -- scanning -----------------------------------------------------------

    def _skip_whitespace(self) -> None:
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n\f\v":
                self._advance()
                continue
            splice = self._at_line_splice()
            if splice:
                self._advance(splice)
                continue
            break

    def _scan_token(self) -> None:
        ch = self._current()
        start, line, column = self._pos, self._line, self._column

        if ch == "/" and self._peek() == "/":
            self._scan_line_comment()
            self._emit(TokenKind.COMMENT, start, line, column)
            return
        if ch == "/" and self._peek() == "*":
            self._scan_block_comment(line, column)
            self._emit(TokenKind.COMMENT, start, line, column)
            return

        if ch in "\"'":
            self._scan_quoted(ch, line, column)
            self._emit(TokenKind.STRING_LITERAL, start, line, column)
            return

        if ch in _DECIMAL_DIGITS or (ch == "." and self._peek() in _DECIMAL_DIGITS):
            match = _PP_NUMBER.match(self._source, self._pos)
            self._advance_to(match.end())
            self._emit(TokenKind.NUMERIC_LITERAL, start, line, column)
            if self._opens_disabled_block():
                self._scan_disabled_block()
            return

        match = _IDENTIFIER.match(self._source, self._pos)
        if match is not None:
            word = match.group()
            self._advance_to(match.end())
            quote = self._current()
            if word in RAW_STRING_PREFIXES and quote == '"':
                self._scan_raw_string(line, column)
                self._emit(TokenKind.STRING_LITERAL, start, line, column)
            elif word in STRING_PREFIXES and quote in ('"', "'"):
                self._scan_quoted(quote, line, column)
                self._emit(TokenKind.STRING_LITERAL, start, line, column)
            else:
                kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENTIFIER
                self._emit(kind, start, line, column)
                if self._after_directive(_MESSAGE_DIRECTIVES):
                    self._scan_directive_message()
            return

        if ch == "<" and self._after_directive(_INCLUDE_DIRECTIVES):
            header = _HEADER_NAME.match(self._source, self._pos)
            if header is not None:
                self._advance_to(header.end())
                self._emit(TokenKind.STRING_LITERAL, start, line, column)
                return

        for op in OPERATORS:
            if self._source.startswith(op, self._pos):
                self._advance(len(op))
                self._emit(TokenKind.OPERATOR, start, line, column)
                return

        # Punctuation, plus any stray character (`@`, `$`, a lone backslash) kept as a
        # single-character token so the stream stays complete.
        self._advance()
        self._emit(TokenKind.PUNCTUATION, start, line, column)

    def _after_directive(self, names: frozenset[str]) -> bool:
        """True right after `#name` on the current line, for name in names."""
        if len(self._tokens) < 2:
            return False
        hash_token, name = self._tokens[-2], self._tokens[-1]
        return (
            hash_token.lexeme == "#"
            and hash_token.kind is TokenKind.PUNCTUATION
            and name.lexeme in names
            and name.line == self._line
        )

    def _scan_directive_message(self) -> None:
        """
        The text of `#error` / `#warning` up to the end of the logical line (or a
        comment) becomes one STRING_LITERAL token; an apostrophe in it is prose.
        """
        while self._current() in (" ", "\t"):
            self._advance()
        start, line, column = self._pos, self._line, self._column
        while self._pos < len(self._source):
            splice = self._at_line_splice()
            if splice:
                self._advance(splice)
                continue
            ch = self._current()
            if ch == "\n" or (ch == "/" and self._peek() in ("/", "*")):
                break
            self._advance()
        end = self._pos
        while end > start and self._source[end - 1] in " \t\r":
            end -= 1
        if end > start:
            self._tokens.append(Token(TokenKind.STRING_LITERAL, self._source[start:end], line, column))

    def _opens_disabled_block(self) -> bool:
        """True right after the `0` of `#if 0`."""
        if len(self._tokens) < 3:
            return False
        hash_token, name, value = self._tokens[-3:]
        return (
            hash_token.lexeme == "#"
            and hash_token.kind is TokenKind.PUNCTUATION
            and name.lexeme == "if"
            and value.lexeme == "0"
            and hash_token.line == value.line
        )

    def _scan_disabled_block(self) -> None:
        """
        The lines of an `#if 0` group, up to its own #else/#elif/#endif (nested
        conditionals counted), become one COMMENT token. Nothing in them is
        tokenized, so unbalanced quotes there are not scan errors.
        """
        while self._current() in (" ", "\t"):
            self._advance()
        if self._current() == "/" and self._peek() == "/":
            start, line, column = self._pos, self._line, self._column
            self._scan_line_comment()
            self._emit(TokenKind.COMMENT, start, line, column)
        if self._current() == "\r" and self._peek() == "\n":
            self._advance()
        if self._current() != "\n":
            return
        self._advance()

        start, line, column = self._pos, self._line, self._column
        end = len(self._source)
        depth = 0
        offset = start
        while offset < len(self._source):
            newline = self._source.find("\n", offset)
            line_end = len(self._source) if newline < 0 else newline
            directive = _DIRECTIVE_LINE.match(self._source, offset, line_end)
            if directive is not None:
                word = directive.group(1)
                if word in _CONDITIONAL_OPENERS:
                    depth += 1
                elif word == "endif" and depth > 0:
                    depth -= 1
                elif word == "endif" or (depth == 0 and word in _CONDITIONAL_BRANCHES):
                    end = offset
                    break
            offset = line_end + 1

        while end > start and self._source[end - 1] in "\r\n":
            end -= 1
        if end > start:
            self._advance_to(end)
            self._emit(TokenKind.COMMENT, start, line, column)

    def _scan_line_comment(self) -> None:
        # A backslash-newline continues a // comment onto the next line.
        while self._pos < len(self._source):
            splice = self._at_line_splice()
            if splice:
                self._advance(splice)
                continue
            if self._current() == "\n":
                break
            self._advance()
        if self._source[self._pos - 1 : self._pos] == "\r":
            # Keep the token free of a trailing carriage return.
            self._pos -= 1
            self._column -= 1

    def _scan_block_comment(self, line: int, column: int) -> None:
        end = self._source.find("*/", self._pos + 2)
        if end < 0:
            raise ScanError(
                ScanErrorKind.UNTERMINATED_COMMENT,
                "unterminated block comment",
                line,
                column,
            )
        self._advance_to(end + 2)

    def _scan_quoted(self, quote: str, line: int, column: int) -> None:
        """Scan a string or character literal starting at the opening quote."""
        what = "string" if quote == '"' else "character"
        self._advance()
        while True:
            ch = self._current()
            if ch == "" or ch == "\n":
                raise ScanError(
                    ScanErrorKind.UNTERMINATED_STRING,
                    f"unterminated {what} literal",
                    line,
                    column,
                )
            if ch == quote:
                self._advance()
                break
            if ch == "\\":
                self._scan_escape(what, line, column)
                continue
            self._advance()
        self._scan_literal_suffix()

    def _scan_escape(self, what: str, line: int, column: int) -> None:
        splice = self._at_line_splice()
        if splice:
            self._advance(splice)
            return

        esc_line, esc_column = self._line, self._column
        ch = self._peek()
        if ch == "":
            raise ScanError(
                ScanErrorKind.UNTERMINATED_STRING,
                f"unterminated {what} literal",
                line,
                column,
            )
        if ch in _SIMPLE_ESCAPES:
            self._advance(2)
            return
        if ch in _OCTAL_DIGITS:
            self._advance(2)
            for _ in range(2):
                if self._current() not in _OCTAL_DIGITS:
                    break
                self._advance()
            return

        required = {"x": 1, "u": 4, "U": 8}.get(ch)
        if required is not None:
            self._advance(2)
            digits = 0
            while self._current() and self._current() in _HEX_DIGITS:
                if ch != "x" and digits == required:
                    break
                self._advance()
                digits += 1
            if digits >= required:
                return

        raise ScanError(
            ScanErrorKind.INVALID_ESCAPE_SEQUENCE,
            f"invalid escape sequence '\\{ch}' in {what} literal",
            esc_line,
            esc_column,
        )

    def _scan_raw_string(self, line: int, column: int) -> None:
        """Scan R"delim( ... )delim" starting at the opening quote."""
        delimiter = _RAW_DELIMITER.match(self._source, self._pos + 1)
        if delimiter is None:
            raise ScanError(
                ScanErrorKind.UNTERMINATED_STRING,
                "malformed raw string delimiter",
                line,
                column,
            )
        terminator = ")" + delimiter.group()[:-1] + '"'
        end = self._source.find(terminator, delimiter.end())
        if end < 0:
            raise ScanError(
                ScanErrorKind.UNTERMINATED_STRING,
                "unterminated raw string literal",
                line,
                column,
            )
        self._advance_to(end + len(terminator))
        self._scan_literal_suffix()

    def _scan_literal_suffix(self) -> None:
        # User-defined literal suffix, e.g. "text"s or "10"_km.
        suffix = _IDENTIFIER.match(self._source, self._pos)
        if suffix is not None:
            self._advance_to(suffix.end())
