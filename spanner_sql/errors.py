"""
Parse errors raised by the lexer and parser.

All of them derive from the built-in SyntaxError, so callers that only care
about "the SQL did not parse" can catch that.
"""

from typing import Optional

from . import config


class ParseError(SyntaxError):
    """Base class for lexing and parsing failures"""

    def __init__(self, message: str, line: int = 0, column: int = 0,
                 position: int = 0, near: str = ''):
        self.message = message
        self.line = line
        self.column = column
        self.position = position
        self.near = near[:config.ERROR_CONTEXT_LENGTH]
        self.statement: Optional[int] = None
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if config.PARSER_DETAILED_ERRORS and self.line:
            text += f" at line {self.line}, column {self.column}"
        if self.near:
            text += f" near '{self.near}'"
        if self.statement is not None:
            text = f"statement {self.statement + 1}: {text}"
        return text

    def with_statement(self, index: int) -> 'ParseError':
        """Record which statement of a DDL list failed"""
        self.statement = index
        self.msg = self._format()
        self.args = (self.msg,)
        return self

    def __str__(self):
        return self._format()


class LexicalError(ParseError):
    """Unsupported literal form, unterminated string or comment, bad character"""


class GrammarError(ParseError):
    """Input does not match any grammar production"""


class TypeMismatchError(ParseError):
    """Operator or type modifier applied to an operand of the wrong kind"""
