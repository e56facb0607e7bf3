# Per-unit analysis context: original text, token stream and derived structure.
# Also handles reading source files from disk with logging, so callers that scan many
# files get one place where unreadable files are reported and skipped.

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from cxxlint.lexer import Token, TokenKind, tokenize
from cxxlint.structure import StructureView

logger = logging.getLogger(__name__)


class SourceUnit:
    """
    Everything the rules see for one input: text, tokens and structure.

    Rules use unit.tokens for the full stream (comments included),
    unit.code_tokens / unit.structure for code-only matching, and
    unit.line_text() for snippets. A unit is never mutated after construction.
    """

    def __init__(
        self,
        text: str,
        tokens: Sequence[Token],
        *,
        path: Optional[Path] = None,
    ) -> None:
        self.text = text
        self.tokens: tuple[Token, ...] = tuple(tokens)
        self.path = path
        # Split on "\n" only, so line numbers agree with the scanner's.
        self.lines: tuple[str, ...] = tuple(line.removesuffix("\r") for line in text.split("\n"))
        self.code_tokens: tuple[Token, ...] = tuple(
            t for t in self.tokens if t.kind not in (TokenKind.COMMENT, TokenKind.END_OF_FILE)
        )
        self.comments: tuple[Token, ...] = tuple(
            t for t in self.tokens if t.kind is TokenKind.COMMENT
        )
        self.structure = StructureView(self.code_tokens, self.lines)

    @property
    def end_of_file(self) -> Token:
        return self.tokens[-1]

    def line_text(self, line: int) -> str:
        """Text of a 1-based line without its newline, or '' if out of range."""
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""

    def contains_position(self, line: int, column: int) -> bool:
        """True if (line, column) lies inside the unit's text (or at its end)."""
        if line < 1 or column < 1:
            return False
        if (line, column) > self.end_of_file.position:
            return False
        return column <= len(self.line_text(line)) + 1


def create_source_unit(text: str, path: Optional[Path] = None) -> SourceUnit:
    """
    Tokenize text and build a SourceUnit.

    Raises:
        ScanError: if the text cannot be tokenized. Nothing is returned in that case.
    """
    tokens = tokenize(text)
    unit = SourceUnit(text, tokens, path=path)
    logger.info(
        "Scanned %s: %d line(s), %d token(s), %d comment(s)",
        path if path is not None else "<text>",
        len(unit.lines),
        len(unit.tokens),
        len(unit.comments),
    )
    return unit


def load_source(path: Path) -> Optional[str]:
    """
    Read a source file as text.

    Undecodable bytes are replaced rather than failing the read. Returns None
    (and logs an error) if the file cannot be read at all.
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None


def load_sources(paths: Iterable[Path]) -> dict[Path, str]:
    """
    Read several files; unreadable ones are logged and left out.

    Returns a dict in input order mapping each readable path to its text.
    """
    sources: dict[Path, str] = {}
    for path in paths:
        text = load_source(path)
        if text is not None:
            sources[path] = text
    return sources
