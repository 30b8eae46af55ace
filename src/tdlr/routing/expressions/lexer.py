"""Lexer/tokenizer for the routing expression DSL.

Converts expression strings into a stream of tokens for the parser.

Token types:
- Literals: NUMBER, STRING, BOOLEAN
- Identifiers: IDENTIFIER (variables, and functions such as str::len)
- Operators: comparison, logical, arithmetic
- Punctuation: LPAREN, RPAREN, COMMA
"""

import math
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from tdlr.routing.expressions.errors import LexError


class TokenType(Enum):
    """Types of tokens in the expression language."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()

    IDENTIFIER = auto()

    # Comparison
    EQ = auto()          # ==
    NEQ = auto()         # !=
    LT = auto()          # <
    LTE = auto()         # <=
    GT = auto()          # >
    GTE = auto()         # >=

    # Logical
    AND = auto()         # &&
    OR = auto()          # ||
    NOT = auto()         # !

    # Arithmetic
    PLUS = auto()        # +
    MINUS = auto()       # -
    MULTIPLY = auto()    # *
    DIVIDE = auto()      # /

    LPAREN = auto()      # (
    RPAREN = auto()      # )
    COMMA = auto()       # ,

    EOF = auto()


@dataclass(frozen=True)
class Token:
    """One lexed token.

    Attributes:
        type: The token type
        value: Decoded value: a float for numbers, unescaped text for
            strings, True/False for booleans, the name for identifiers
        position: Offset of the first character in the source
        line: 1-based line of the first character
        column: 1-based column of the first character
        lexeme: Source text exactly as written
    """

    type: TokenType
    value: str | float | bool | None
    position: int
    line: int = 1
    column: int = 1
    lexeme: str = ""

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"

    def describe(self) -> str:
        """Human-readable form used in parser diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        return f"'{self.lexeme}'" if self.lexeme else f"'{self.value}'"


# Tried in order, so two-character operators precede their one-character
# prefixes and fractional numbers precede integers.
TOKEN_PATTERNS = [
    (r"\s+", None),
    (r"==", TokenType.EQ),
    (r"!=", TokenType.NEQ),
    (r"<=", TokenType.LTE),
    (r">=", TokenType.GTE),
    (r"&&", TokenType.AND),
    (r"\|\|", TokenType.OR),
    (r"<", TokenType.LT),
    (r">", TokenType.GT),
    (r"!", TokenType.NOT),
    (r"\+", TokenType.PLUS),
    (r"-", TokenType.MINUS),
    (r"\*", TokenType.MULTIPLY),
    (r"/", TokenType.DIVIDE),
    (r"\(", TokenType.LPAREN),
    (r"\)", TokenType.RPAREN),
    (r",", TokenType.COMMA),
    (r"\d+\.\d+", TokenType.NUMBER),
    (r"\d+", TokenType.NUMBER),
    # Double quoted, single line
    (r'"(?:[^"\\\n]|\\[^\n])*"', TokenType.STRING),
    # An identifier, optionally qualified by one namespace: str::len
    (r"[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)?", TokenType.IDENTIFIER),
]

KEYWORDS = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

_ESCAPE_RE = re.compile(r"\\(.)")

# One alternation over the whole table; group T<i> is TOKEN_PATTERNS[i]
_MASTER_RE = re.compile(
    "|".join(f"(?P<T{i}>{pattern})" for i, (pattern, _) in enumerate(TOKEN_PATTERNS))
)


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class Lexer:
    """Tokenizer for the expression DSL.

    Usage:
        lexer = Lexer('if(ext == "mp4", "@videos", "me")')
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Scan and return the token at the current position."""
        while True:
            start = self.position
            if start >= len(self.source):
                return self._token(TokenType.EOF, None, start, "")

            match = _MASTER_RE.match(self.source, start)
            if match is None:
                self._raise_unrecognized(start)

            token_type = TOKEN_PATTERNS[int(match.lastgroup[1:])][1]
            lexeme = match.group()
            self.position = match.end()

            if token_type is None:
                continue

            if token_type == TokenType.NUMBER:
                value = float(lexeme)
                if not math.isfinite(value):
                    raise LexError(
                        "Number literal out of range", start, *self.line_column(start)
                    )
            elif token_type == TokenType.STRING:
                value = _unescape(lexeme[1:-1])
            elif lexeme in KEYWORDS:
                token_type, value = KEYWORDS[lexeme]
            else:
                value = lexeme

            return self._token(token_type, value, start, lexeme)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source, ending with an EOF token."""
        return list(self)

    def line_column(self, position: int) -> tuple[int, int]:
        """1-based line and column of a source offset."""
        line = self.source.count("\n", 0, position) + 1
        column = position - (self.source.rfind("\n", 0, position) + 1) + 1
        return line, column

    def _token(self, token_type: TokenType, value, position: int, lexeme: str) -> Token:
        line, column = self.line_column(position)
        return Token(token_type, value, position, line, column, lexeme)

    def _raise_unrecognized(self, position: int) -> None:
        char = self.source[position]
        line, column = self.line_column(position)
        if char == '"':
            raise LexError("Unterminated string", position, line, column)
        raise LexError(f"Unexpected character '{char}'", position, line, column)


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize an expression string."""
    return Lexer(source).tokenize()
