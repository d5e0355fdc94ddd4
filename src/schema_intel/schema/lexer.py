"""
Lexical analyzer (tokenizer) for TypeScript/JavaScript schema and query sources.

The scanner is deliberately lenient: it never raises. Unterminated strings and
comments run to end of input and unknown characters become OTHER tokens, so
every analysis built on top of it can return partial results for any input.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types for TypeScript/JavaScript source."""

    # Literals
    STRING = auto()
    NUMBER = auto()

    # Identifiers (keywords are not distinguished)
    IDENTIFIER = auto()

    # Punctuation
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    COLON = auto()
    SEMICOLON = auto()
    DOT = auto()
    EQUALS = auto()

    # Anything else (operators, regex delimiters, stray characters)
    OTHER = auto()

    # Special
    EOF = auto()


PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    "=": TokenType.EQUALS,
}

CLOSERS = {
    TokenType.LBRACE: TokenType.RBRACE,
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACKET: TokenType.RBRACKET,
}

QUOTES = ('"', "'", "`")


@dataclass(frozen=True)
class Token:
    """A token in the source text.

    `value` holds the unquoted contents for STRING tokens and the raw text
    otherwise. `start`/`end` are offsets into the scanned text.
    """

    type: TokenType
    value: str
    line: int
    column: int
    start: int
    end: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class SourceLexer:
    """Tokenizer for TypeScript/JavaScript source."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire input."""
        while self.pos < len(self.text):
            self._skip_whitespace()
            if self.pos >= len(self.text):
                break
            self._tokenize_one()

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column, self.pos, self.pos))
        return self.tokens

    def _tokenize_one(self) -> None:
        if self._match_comment():
            return
        if self._match_string():
            return
        if self._match_number():
            return
        if self._match_identifier():
            return
        self._match_punctuation()

    def _advance(self, count: int = 1) -> None:
        """Move forward, keeping line/column in step with newlines."""
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _skip_whitespace(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self._advance()

    def _match_comment(self) -> bool:
        """Match comments (// or /* */)."""
        two_char = self.text[self.pos : self.pos + 2]
        if two_char == "//":
            while self.pos < len(self.text) and self.text[self.pos] != "\n":
                self._advance()
            return True
        if two_char == "/*":
            close = self.text.find("*/", self.pos + 2)
            end = len(self.text) if close == -1 else close + 2
            self._advance(end - self.pos)
            return True
        return False

    def _match_string(self) -> bool:
        """Match string and template literals."""
        quote = self.text[self.pos]
        if quote not in QUOTES:
            return False

        start, line, column = self.pos, self.line, self.column
        self._advance()

        chars: list[str] = []
        while self.pos < len(self.text) and self.text[self.pos] != quote:
            if self.text[self.pos] == "\\":
                self._advance()
                if self.pos < len(self.text):
                    chars.append(self.text[self.pos])
                    self._advance()
            elif self.text[self.pos] == "\n" and quote != "`":
                # Plain strings cannot span lines; stop at the break
                break
            else:
                chars.append(self.text[self.pos])
                self._advance()

        if self.pos < len(self.text) and self.text[self.pos] == quote:
            self._advance()

        self.tokens.append(Token(TokenType.STRING, "".join(chars), line, column, start, self.pos))
        return True

    def _match_number(self) -> bool:
        if not self.text[self.pos].isdigit():
            return False

        start, column = self.pos, self.column
        while self.pos < len(self.text) and (
            self.text[self.pos].isalnum() or self.text[self.pos] in "._"
        ):
            self._advance()

        value = self.text[start : self.pos]
        self.tokens.append(Token(TokenType.NUMBER, value, self.line, column, start, self.pos))
        return True

    def _match_identifier(self) -> bool:
        char = self.text[self.pos]
        if not (char.isalpha() or char in "_$"):
            return False

        start, column = self.pos, self.column
        while self.pos < len(self.text) and (
            self.text[self.pos].isalnum() or self.text[self.pos] in "_$"
        ):
            self._advance()

        value = self.text[start : self.pos]
        self.tokens.append(Token(TokenType.IDENTIFIER, value, self.line, column, start, self.pos))
        return True

    def _match_punctuation(self) -> None:
        char = self.text[self.pos]
        start, line, column = self.pos, self.line, self.column
        token_type = PUNCTUATION.get(char, TokenType.OTHER)
        self._advance()
        self.tokens.append(Token(token_type, char, line, column, start, self.pos))


def tokenize(text: str) -> list[Token]:
    """Tokenize source text. The last token is always EOF."""
    return SourceLexer(text).tokenize()


def find_matching(tokens: list[Token], open_index: int) -> int | None:
    """Return the index of the token that closes the bracket at open_index.

    Returns None when the token is not an opening bracket or the input ends
    before the bracket is balanced.
    """
    open_type = tokens[open_index].type
    close_type = CLOSERS.get(open_type)
    if close_type is None:
        return None

    depth = 0
    for index in range(open_index, len(tokens)):
        token_type = tokens[index].type
        if token_type == open_type:
            depth += 1
        elif token_type == close_type:
            depth -= 1
            if depth == 0:
                return index
    return None


def is_token(tokens: list[Token], index: int, token_type: TokenType, value: str | None = None) -> bool:
    """Check the token at index without running off either end of the list."""
    if index < 0 or index >= len(tokens):
        return False
    token = tokens[index]
    return token.type == token_type and (value is None or token.value == value)


def split_arguments(tokens: list[Token], open_index: int, close_index: int) -> list[tuple[int, int]]:
    """Split the tokens between a bracket pair on top-level commas.

    Returns (first, last) token index pairs, inclusive, one per non-empty
    argument.
    """
    arguments: list[tuple[int, int]] = []
    depth = 0
    first = open_index + 1
    for index in range(open_index + 1, close_index):
        token_type = tokens[index].type
        if token_type in CLOSERS:
            depth += 1
        elif token_type in CLOSERS.values():
            depth -= 1
        elif token_type == TokenType.COMMA and depth == 0:
            if index > first:
                arguments.append((first, index - 1))
            first = index + 1
    if close_index > first:
        arguments.append((first, close_index - 1))
    return arguments
