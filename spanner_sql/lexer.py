"""
SQL Lexer - pull-based tokenizer for the Spanner SQL dialect

The parser asks for one token at a time with Tokenizer.next_token();
whitespace and comments are consumed on the way. Reserved words come back
as KEYWORD tokens, every other word as an IDENTIFIER.
"""

from typing import Any, Tuple
from dataclasses import dataclass
from enum import Enum, auto
import math
import re
import string

from .errors import LexicalError


class TokenType(Enum):
    """Token kinds produced by the lexer"""
    IDENTIFIER = auto()
    KEYWORD = auto()

    # Literals
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    PARAM = auto()       # @name

    PUNCT = auto()       # ( ) , ;
    OPERATOR = auto()    # < <= > >= = != * + -

    EOF = auto()


@dataclass(frozen=True)
class Token:
    """Represents a single token in SQL input"""
    type: TokenType
    value: Any
    text: str      # Source text of the token
    position: int  # Character offset in input
    line: int      # Line number (for error messages)
    column: int    # Column number (for error messages)

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


# Reserved words of GoogleSQL; these can never be used as names.
RESERVED_KEYWORDS = frozenset([
    'ALL', 'AND', 'ANY', 'ARRAY', 'AS', 'ASC', 'ASSERT_ROWS_MODIFIED', 'AT',
    'BETWEEN', 'BY', 'CASE', 'CAST', 'COLLATE', 'CONTAINS', 'CREATE', 'CROSS',
    'CUBE', 'CURRENT', 'DEFAULT', 'DEFINE', 'DESC', 'DISTINCT', 'ELSE', 'END',
    'ENUM', 'ESCAPE', 'EXCEPT', 'EXCLUDE', 'EXISTS', 'EXTRACT', 'FALSE',
    'FETCH', 'FOLLOWING', 'FOR', 'FROM', 'FULL', 'GROUP', 'GROUPING', 'GROUPS',
    'HASH', 'HAVING', 'IF', 'IGNORE', 'IN', 'INNER', 'INTERSECT', 'INTERVAL',
    'INTO', 'IS', 'JOIN', 'LATERAL', 'LEFT', 'LIKE', 'LIMIT', 'LOOKUP',
    'MERGE', 'NATURAL', 'NEW', 'NO', 'NOT', 'NULL', 'NULLS', 'OF', 'ON', 'OR',
    'ORDER', 'OUTER', 'OVER', 'PARTITION', 'PRECEDING', 'PROTO', 'RANGE',
    'RECURSIVE', 'RESPECT', 'RIGHT', 'ROLLUP', 'ROWS', 'SELECT', 'SET', 'SOME',
    'STRUCT', 'TABLESAMPLE', 'THEN', 'TO', 'TREAT', 'TRUE', 'UNBOUNDED',
    'UNION', 'UNNEST', 'USING', 'WHEN', 'WHERE', 'WINDOW', 'WITH', 'WITHIN',
])

_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)
_OCTAL_DIGITS = frozenset(string.octdigits)
_IDENT_START = frozenset(string.ascii_letters + '_')
_IDENT_CHARS = frozenset(string.ascii_letters + string.digits + '_')

_HEX_RE = re.compile(r'0[xX][0-9a-fA-F]+')
_FLOAT_RE = re.compile(r'(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+')
_INT_RE = re.compile(r'[0-9]+')

_SIMPLE_ESCAPES = {
    'a': '\a', 'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t',
    'v': '\v', '\\': '\\', '?': '?', '"': '"', "'": "'", '`': '`',
}

_TWO_CHAR_OPERATORS = {
    '<=': '<=',
    '>=': '>=',
    '!=': '!=',
    '<>': '!=',
}

_SINGLE_CHARS = {
    '<': TokenType.OPERATOR,
    '>': TokenType.OPERATOR,
    '=': TokenType.OPERATOR,
    '*': TokenType.OPERATOR,
    '+': TokenType.OPERATOR,
    '-': TokenType.OPERATOR,
    '(': TokenType.PUNCT,
    ')': TokenType.PUNCT,
    ',': TokenType.PUNCT,
    ';': TokenType.PUNCT,
}


class Tokenizer:
    """Lexical analyzer - hands out SQL tokens on demand"""

    def __init__(self, sql: str):
        self.sql = sql
        self.position = 0
        self.line = 1
        self.column = 1

    def next_token(self) -> Token:
        """Skip whitespace and comments, then read one token"""
        self._skip_insignificant()

        if self._at_end():
            return Token(TokenType.EOF, None, '', self.position, self.line, self.column)

        char = self._current_char()

        if char in ('"', "'"):
            return self._read_string()

        if char in _DIGITS or (char == '.' and self._peek() in _DIGITS):
            return self._read_number()

        if char in _IDENT_START:
            return self._read_identifier_or_keyword()

        if char == '@':
            return self._read_param()

        token = self._try_operator()
        if token is not None:
            return token

        raise self._error(f"Unexpected character '{char}'", self._mark())

    def remaining(self) -> str:
        """Input not yet consumed by the tokenizer"""
        return self.sql[self.position:]

    # ========================================================================
    # Character navigation
    # ========================================================================

    def _at_end(self) -> bool:
        return self.position >= len(self.sql)

    def _current_char(self) -> str:
        """Get current character"""
        if self.position >= len(self.sql):
            return '\0'
        return self.sql[self.position]

    def _peek(self, offset: int = 1) -> str:
        """Look ahead at next character"""
        pos = self.position + offset
        if pos >= len(self.sql):
            return '\0'
        return self.sql[pos]

    def _advance(self) -> str:
        """Move to next character"""
        char = self._current_char()
        self.position += 1
        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _advance_by(self, count: int):
        for _ in range(count):
            self._advance()

    def _mark(self) -> Tuple[int, int, int]:
        return self.position, self.line, self.column

    def _make(self, token_type: TokenType, value: Any, start: Tuple[int, int, int]) -> Token:
        pos, line, column = start
        return Token(token_type, value, self.sql[pos:self.position], pos, line, column)

    def _error(self, message: str, start: Tuple[int, int, int]) -> LexicalError:
        pos, line, column = start
        return LexicalError(message, line, column, pos, self.sql[pos:])

    # ========================================================================
    # Whitespace and comments
    # ========================================================================

    def _skip_insignificant(self):
        """Skip whitespace and all three comment styles"""
        while not self._at_end():
            char = self._current_char()
            if char.isspace():
                self._advance()
            elif char == '#' or (char == '-' and self._peek() == '-'):
                self._skip_line_comment()
            elif char == '/' and self._peek() == '*':
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self):
        """Skip # ... or -- ... up to the end of the line"""
        while not self._at_end() and self._current_char() != '\n':
            self._advance()

    def _skip_block_comment(self):
        """Skip /* ... */, which may span lines"""
        start = self._mark()
        self._advance_by(2)
        while not self._at_end():
            if self._current_char() == '*' and self._peek() == '/':
                self._advance_by(2)
                return
            self._advance()
        raise self._error("Unterminated block comment", start)

    # ========================================================================
    # Literals
    # ========================================================================

    def _read_number(self) -> Token:
        """Read integer (decimal or hex) or float literal"""
        start = self._mark()

        if self.sql.startswith(('0b', '0B'), self.position):
            raise self._error("Binary literals are not supported", start)

        match = _HEX_RE.match(self.sql, self.position)
        if match:
            token_type, value = TokenType.INTEGER, int(match.group(), 16)
        else:
            match = _FLOAT_RE.match(self.sql, self.position)
            if match:
                token_type, value = TokenType.FLOAT, float(match.group())
                if math.isinf(value):
                    raise self._error(f"Float literal {match.group()} out of range", start)
            else:
                match = _INT_RE.match(self.sql, self.position)
                token_type, value = TokenType.INTEGER, int(match.group(), 10)

        self._advance_by(len(match.group()))

        if self._current_char() in _IDENT_CHARS or self._current_char() == '.':
            raise self._error("Invalid numeric literal", start)

        return self._make(token_type, value, start)

    def _read_string(self) -> Token:
        """Read string literal enclosed in single or double quotes"""
        start = self._mark()
        quote = self._advance()

        chars = []
        while True:
            if self._at_end() or self._current_char() == '\n':
                raise self._error("Unterminated string literal", start)
            char = self._current_char()
            if char == quote:
                self._advance()
                break
            if char == '\\':
                chars.append(self._read_escape(start))
            else:
                chars.append(self._advance())

        return self._make(TokenType.STRING, ''.join(chars), start)

    def _read_escape(self, start: Tuple[int, int, int]) -> str:
        """Decode one backslash escape sequence inside a string literal"""
        escape_start = self._mark()
        self._advance()  # Skip backslash

        if self._at_end():
            raise self._error("Unterminated string literal", start)

        char = self._advance()
        if char in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[char]

        if char in ('x', 'X'):
            digits = self._read_escape_digits(2, _HEX_DIGITS, start, escape_start)
            code = int(digits, 16)
        elif char == 'u':
            code = int(self._read_escape_digits(4, _HEX_DIGITS, start, escape_start), 16)
        elif char == 'U':
            code = int(self._read_escape_digits(8, _HEX_DIGITS, start, escape_start), 16)
        elif char in _OCTAL_DIGITS:
            digits = char + self._read_escape_digits(2, _OCTAL_DIGITS, start, escape_start)
            code = int(digits, 8)
            if code > 0o377:
                raise self._error(f"Invalid escape sequence '\\{digits}'", escape_start)
        else:
            raise self._error(f"Invalid escape sequence '\\{char}'", escape_start)

        if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
            raise self._error("Invalid code point in escape sequence", escape_start)
        return chr(code)

    def _read_escape_digits(self, count: int, allowed: frozenset,
                            start: Tuple[int, int, int],
                            escape_start: Tuple[int, int, int]) -> str:
        digits = ''
        for _ in range(count):
            if self._at_end():
                raise self._error("Unterminated string literal", start)
            if self._current_char() not in allowed:
                raise self._error("Invalid escape sequence", escape_start)
            digits += self._advance()
        return digits

    # ========================================================================
    # Words, parameters and operators
    # ========================================================================

    def _read_identifier_or_keyword(self) -> Token:
        """Read identifier or reserved keyword"""
        start = self._mark()

        while self._current_char() in _IDENT_CHARS:
            self._advance()

        text = self.sql[start[0]:self.position]
        upper_value = text.upper()
        if upper_value in RESERVED_KEYWORDS:
            return self._make(TokenType.KEYWORD, upper_value, start)
        return self._make(TokenType.IDENTIFIER, text, start)

    def _read_param(self) -> Token:
        """Read @name query parameter"""
        start = self._mark()
        self._advance()  # Skip @

        if self._current_char() not in _IDENT_START:
            raise self._error("Expected parameter name after '@'", start)

        while self._current_char() in _IDENT_CHARS:
            self._advance()

        return self._make(TokenType.PARAM, self.sql[start[0] + 1:self.position], start)

    def _try_operator(self):
        """Try to read operator or punctuation"""
        start = self._mark()
        pair = self._current_char() + self._peek()

        # Two-character operators
        if pair in _TWO_CHAR_OPERATORS:
            self._advance_by(2)
            return self._make(TokenType.OPERATOR, _TWO_CHAR_OPERATORS[pair], start)

        # Single-character operators/punctuation
        char = self._current_char()
        if char in _SINGLE_CHARS:
            self._advance()
            return self._make(_SINGLE_CHARS[char], char, start)

        return None
