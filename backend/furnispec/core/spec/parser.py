"""Recursive descent parser: furniture code -> ParsedSpecification.

Grammar::

    spec           := preset_id "(" dimension_list ")" flags
    preset_id      := letter digit+
    dimension_list := dimension ("," dimension)*
    dimension      := digit+        (no leading zeros, "0" alone is allowed)
    flags          := letter*

The parser knows nothing about presets; arity, ranges and flag rules are
checked by the validator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from furnispec.core.spec.tokenizer import Token, TokenType, TokenizeError, tokenize
from furnispec.core.spec.ast_nodes import ParsedSpecification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpecSyntaxError:
    position: int
    reason: str

    @property
    def message(self) -> str:
        return f"Position {self.position}: {self.reason}"


@dataclass
class ParseResult:
    spec: ParsedSpecification | None
    error: SpecSyntaxError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _Abort(Exception):
    """Unwinds the descent on the first syntax error."""

    def __init__(self, error: SpecSyntaxError):
        self.error = error


class Parser:
    """Parses a token stream into a ParsedSpecification."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> ParseResult:
        try:
            spec = self._parse_spec()
        except _Abort as abort:
            return ParseResult(spec=None, error=abort.error)
        return ParseResult(spec=spec)

    def _parse_spec(self) -> ParsedSpecification:
        preset = self._expect(TokenType.PRESET_ID, "preset id (a letter followed by digits)")
        self._expect(TokenType.LPAREN, "'('")
        dimensions = self._parse_dimensions()
        self._expect(TokenType.RPAREN, "')'")
        flags = self._parse_flags()
        return ParsedSpecification(
            preset_id=preset.value,
            dimensions=tuple(dimensions),
            flags=tuple(flags),
        )

    def _parse_dimensions(self) -> list[int]:
        dimensions = [self._parse_dimension()]
        while self._peek().type == TokenType.COMMA:
            self._advance()
            dimensions.append(self._parse_dimension())
        return dimensions

    def _parse_dimension(self) -> int:
        tok = self._expect(TokenType.NUMBER, "dimension in millimeters")
        if len(tok.value) > 1 and tok.value.startswith("0"):
            self._fail(f"Dimension '{tok.value}' has a leading zero", tok)
        return int(tok.value)

    def _parse_flags(self) -> list[str]:
        flags: list[str] = []
        while self._peek().type == TokenType.FLAG:
            tok = self._advance()
            if tok.value in flags:
                self._fail(f"Flag '{tok.value}' appears more than once", tok)
            flags.append(tok.value)
        tok = self._peek()
        if tok.type != TokenType.EOF:
            self._fail(f"Invalid flag character '{tok.value}'", tok)
        return flags

    # ── Helper methods ──

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TokenType.EOF:
            self.pos += 1
        return tok

    def _expect(self, tok_type: TokenType, description: str) -> Token:
        tok = self._peek()
        if tok.type == TokenType.EOF and tok_type != TokenType.EOF:
            self._fail(f"Expected {description}, got end of input", tok)
        if tok.type != tok_type:
            self._fail(f"Expected {description}, got '{tok.value}'", tok)
        return self._advance()

    def _fail(self, reason: str, token: Token):
        raise _Abort(SpecSyntaxError(position=token.col, reason=reason))


def parse(code: str) -> ParseResult:
    """Parse a furniture code string. Never raises for malformed input."""
    try:
        tokens = tokenize(code)
    except TokenizeError as e:
        logger.debug("Rejected code %r: %s", code, e)
        return ParseResult(spec=None, error=SpecSyntaxError(position=e.col, reason=e.reason))

    result = Parser(tokens).parse()
    if not result.ok:
        logger.debug("Rejected code %r: %s", code, result.error.message)
    return result
