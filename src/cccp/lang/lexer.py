"""
CCCP Lexer (Tokenizer)
======================

This module implements the tokenizer for the CCCP language. It converts
source text into a lazy stream of tokens for the parser.

Token Categories
----------------
- Keywords: print, var, if, extern, func, return
- Identifiers: letters and underscore (case-sensitive)
- Integers: decimal digit runs
- Strings: "double quoted", no escape processing
- Operators: = + - * / == !=
- Delimiters: , ; : . ... ( ) { }

Comments
--------
- Single-line: // comment
- Multi-line: /* comment */

Error Policy
------------
The lexer never raises. Any byte it cannot classify becomes an ILLEGAL
token and the parser reports it. Past the end of input, every call to
next_token() returns another EOF token.

Example Usage
-------------
>>> from cccp.lang.lexer import Lexer
>>> for token in Lexer('var x = 5;').tokenize():
...     print(token)
Token(VAR, 'var', 1:1)
Token(IDENT, 'x', 1:5)
Token(ASSIGN, '=', 1:7)
Token(INT, '5', 1:9)
Token(SEMICOLON, ';', 1:10)
Token(EOF, '', 1:11)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator
import string

from cccp.errors import SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token kinds for the CCCP language.

    The value of each member is its display form, used when the parser
    reports "expected X, got Y".
    """
    # Special tokens
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    DOT = "."
    ELLIPSIS = "..."
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"

    # Keywords
    PRINT = "PRINT"
    VAR = "VAR"
    IF = "IF"
    EXTERN = "EXTERN"
    FUNC = "FUNC"
    RETURN = "RETURN"


# Keyword lookup table
KEYWORDS: dict[str, TokenType] = {
    "print": TokenType.PRINT,
    "var": TokenType.VAR,
    "if": TokenType.IF,
    "extern": TokenType.EXTERN,
    "func": TokenType.FUNC,
    "return": TokenType.RETURN,
}

# Keywords that begin a statement; the parser resynchronizes on these
STATEMENT_KEYWORDS = frozenset(KEYWORDS.values())


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from CCCP source code.

    Attributes:
        kind: The TokenType classification
        literal: The source text of the token (string contents for STRING)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    kind: TokenType
    literal: str
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        return f"Token({self.kind.name}, {self.literal!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Describe the token for a diagnostic, e.g. IDENT 'x', '=' or 'var'."""
        if self.kind in (TokenType.IDENT, TokenType.INT, TokenType.STRING,
                         TokenType.ILLEGAL):
            return f"{self.kind.value} {self.literal!r}"
        if self.kind is TokenType.EOF:
            return self.kind.value
        return f"'{self.literal}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes CCCP source code.

    The lexer keeps a single cursor into the source and produces one
    token per call to next_token(), using at most two characters of
    lookahead (for '...').

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start or continue an identifier
    IDENT_CHARS = string.ascii_letters + "_"

    SINGLE_TOKENS = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.ASTERISK,
        "/": TokenType.SLASH,
        ",": TokenType.COMMA,
        ";": TokenType.SEMICOLON,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens until, and including, the first EOF token.

        Yields:
            Token objects representing each lexical element
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Return the next token and advance past it."""
        self._skip_whitespace_and_comments()

        start_line = self._line
        start_column = self._column

        if self._at_end():
            return self._make_token(TokenType.EOF, "", start_line, start_column)

        char = self._peek()

        if char in self.IDENT_CHARS:
            return self._scan_identifier(start_line, start_column)

        if char.isdigit() and char.isascii():
            return self._scan_number(start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _make_token(
        self,
        kind: TokenType,
        literal: str,
        start_line: int,
        start_column: int,
    ) -> Token:
        return Token(
            kind=kind,
            literal=literal,
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comments."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\n\r":
                self._advance()
                continue

            # Single-line comment: //
            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            # Multi-line comment: /* */, runs to end of input if unclosed
            if char == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                while not self._at_end():
                    if self._peek() == "*" and self._peek(1) == "/":
                        self._advance()
                        self._advance()
                        break
                    self._advance()
                continue

            break

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """
        Scan an identifier or keyword.

        Digits are not identifier characters: 'x1' scans as IDENT 'x'
        followed by INT '1'.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        kind = KEYWORDS.get(name, TokenType.IDENT)
        return self._make_token(kind, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """Scan a maximal run of decimal digits."""
        chars = []
        while self._peek().isdigit() and self._peek().isascii():
            chars.append(self._advance())
        return self._make_token(TokenType.INT, "".join(chars), start_line, start_column)

    def _scan_string(self, start_line: int, start_column: int) -> Token:
        """
        Scan a string literal.

        There are no escape sequences; the literal ends at the next '"'
        or at end of input.
        """
        self._advance()  # opening quote

        chars = []
        while not self._at_end() and self._peek() != '"':
            chars.append(self._advance())

        self._match('"')
        return self._make_token(TokenType.STRING, "".join(chars), start_line, start_column)

    def _scan_operator(self, start_line: int, start_column: int) -> Token:
        """Scan an operator or delimiter."""
        char = self._advance()

        if char == "=":
            if self._match("="):
                return self._make_token(TokenType.EQ, "==", start_line, start_column)
            return self._make_token(TokenType.ASSIGN, "=", start_line, start_column)

        if char == "!":
            if self._match("="):
                return self._make_token(TokenType.NOT_EQ, "!=", start_line, start_column)
            return self._make_token(TokenType.ILLEGAL, "!", start_line, start_column)

        if char == ".":
            if self._match("."):
                if self._match("."):
                    return self._make_token(TokenType.ELLIPSIS, "...", start_line, start_column)
                return self._make_token(TokenType.ILLEGAL, ".", start_line, start_column)
            return self._make_token(TokenType.DOT, ".", start_line, start_column)

        if char in self.SINGLE_TOKENS:
            return self._make_token(self.SINGLE_TOKENS[char], char, start_line, start_column)

        return self._make_token(TokenType.ILLEGAL, char, start_line, start_column)

