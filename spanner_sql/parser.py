"""
SQL Parser - recursive descent parser for Spanner queries and DDL

This module provides:
- Parser: pulls tokens from the Tokenizer and builds AST nodes
- parse_query / parse_expr / parse_ddl / parse_ddl_stmt: entry points
  that require the whole input to be consumed

Each Parser instance owns its tokenizer and lookahead buffer; nothing is
shared between parses.
"""

from typing import Callable, List, Tuple, TypeVar
from contextlib import contextmanager
import logging

from . import config
from .ast import (
    Expr, IntegerLiteral, FloatLiteral, StringLiteral, BoolLiteral, NullLiteral,
    TRUE, FALSE, NULL, ID, Param, Star, ComparisonOp, ComparisonOperator,
    LogicalOp, LogicalOperator, IsOp, ArithOp, ArithOperator, NON_BOOLEAN_LITERALS,
    Query, Select, SelectFrom, Order,
    Type, TypeBase, MAX_LEN, SIZED_TYPES, ColumnDef, KeyPart,
    DDL, DDLStmt, CreateTable, CreateIndex, Interleave, OnDelete,
    AlterTable, AddColumn, DropColumn, SetOnDelete, DropTable, DropIndex,
)
from .errors import ParseError, LexicalError, GrammarError, TypeMismatchError
from .lexer import Tokenizer, Token, TokenType

logger = logging.getLogger(__name__)

T = TypeVar('T')

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_COMPARISON_OPERATORS = {
    '<': ComparisonOperator.LT,
    '<=': ComparisonOperator.LE,
    '>': ComparisonOperator.GT,
    '>=': ComparisonOperator.GE,
    '=': ComparisonOperator.EQ,
    '!=': ComparisonOperator.NE,
}

_TYPE_NAMES = {base.value: base for base in TypeBase}

_WORD_TOKENS = (TokenType.KEYWORD, TokenType.IDENTIFIER)
_SYMBOL_TOKENS = (TokenType.PUNCT, TokenType.OPERATOR)


class Parser:
    """Syntax analyzer - converts SQL text to AST nodes"""

    def __init__(self, sql: str):
        if len(sql) > config.MAX_SQL_LENGTH:
            raise GrammarError(
                f"SQL text is {len(sql)} characters long, limit is {config.MAX_SQL_LENGTH}"
            )
        self.sql = sql
        self._tokenizer = Tokenizer(sql)
        self._lookahead: List[Token] = []
        self._depth = 0

    def remaining(self) -> str:
        """Input from the first token not yet consumed"""
        return self.sql[self._current().position:]

    def expect_end(self):
        """Fail unless all input has been consumed"""
        if not self._at_end():
            raise self._unexpected("Unexpected input after end of statement", self._current())

    def consume_terminator(self) -> bool:
        """Consume an optional ';' statement terminator"""
        return self._consume_symbol(';')

    # ========================================================================
    # Helper methods for token navigation
    # ========================================================================

    def _current(self) -> Token:
        """Get current token"""
        return self._peek(0)

    def _peek(self, offset: int = 1) -> Token:
        """Look ahead at token, lexing more input only when needed"""
        while len(self._lookahead) <= offset:
            if self._lookahead and self._lookahead[-1].type == TokenType.EOF:
                return self._lookahead[-1]
            self._lookahead.append(self._tokenizer.next_token())
        return self._lookahead[offset]

    def _advance(self) -> Token:
        """Move to next token and return current"""
        token = self._current()
        if token.type != TokenType.EOF:
            self._lookahead.pop(0)
        return token

    def _at_end(self) -> bool:
        """Check if at end of tokens"""
        return self._current().type == TokenType.EOF

    @staticmethod
    def _word(token: Token) -> str:
        """Upper-cased word for keyword/identifier tokens, '' otherwise"""
        if token.type in _WORD_TOKENS:
            return token.text.upper()
        return ''

    def _match_keyword(self, *words: str) -> bool:
        """Check if current token is one of the given (case-insensitive) words"""
        return self._word(self._current()) in words

    def _consume_keyword(self, word: str) -> bool:
        """Consume keyword if it matches, return True if consumed"""
        if self._match_keyword(word):
            self._advance()
            return True
        return False

    def _expect_keyword(self, word: str, message: str = None) -> Token:
        """Consume keyword or raise error"""
        if not self._match_keyword(word):
            raise self._unexpected(message or f"Expected {word}", self._current())
        return self._advance()

    def _match_symbol(self, *symbols: str) -> bool:
        token = self._current()
        return token.type in _SYMBOL_TOKENS and token.value in symbols

    def _consume_symbol(self, symbol: str) -> bool:
        if self._match_symbol(symbol):
            self._advance()
            return True
        return False

    def _expect_symbol(self, symbol: str, message: str = None) -> Token:
        if not self._match_symbol(symbol):
            raise self._unexpected(message or f"Expected '{symbol}'", self._current())
        return self._advance()

    def _expect_identifier(self, message: str) -> str:
        token = self._current()
        if token.type != TokenType.IDENTIFIER:
            raise self._unexpected(message, token)
        return self._advance().value

    # ========================================================================
    # Errors
    # ========================================================================

    def _error(self, error_class, message: str, token: Token) -> ParseError:
        return error_class(message, token.line, token.column, token.position,
                           self.sql[token.position:])

    def _unexpected(self, message: str, token: Token) -> GrammarError:
        if token.type == TokenType.EOF:
            got = "end of input"
        else:
            got = f"'{token.text}'"
        return self._error(GrammarError, f"{message}, got {got}", token)

    @contextmanager
    def _nested(self):
        """Track expression nesting so deep input fails cleanly"""
        if self._depth >= config.MAX_EXPR_DEPTH:
            raise self._error(
                GrammarError,
                f"Expression nested deeper than {config.MAX_EXPR_DEPTH} levels",
                self._current(),
            )
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    # ========================================================================
    # Expression parsing (with operator precedence)
    # ========================================================================

    def parse_expr(self) -> Expr:
        """Parse expression (lowest precedence: OR)"""
        return self._parse_or()

    def _parse_or(self) -> Expr:
        left = self._parse_and()

        while self._match_keyword('OR'):
            op_token = self._advance()
            right = self._parse_and()
            left = self._logical(left, LogicalOperator.OR, right, op_token)

        return left

    def _parse_and(self) -> Expr:
        left = self._parse_not()

        while self._match_keyword('AND'):
            op_token = self._advance()
            right = self._parse_not()
            left = self._logical(left, LogicalOperator.AND, right, op_token)

        return left

    def _parse_not(self) -> Expr:
        if self._match_keyword('NOT'):
            op_token = self._advance()
            with self._nested():
                operand = self._parse_not()  # Right-associative
            return self._logical(None, LogicalOperator.NOT, operand, op_token)

        return self._parse_comparison()

    def _logical(self, lhs, op: LogicalOperator, rhs: Expr, op_token: Token) -> LogicalOp:
        """Build a LogicalOp, rejecting string and number literal operands"""
        for operand in (lhs, rhs):
            if isinstance(operand, NON_BOOLEAN_LITERALS):
                raise self._error(
                    TypeMismatchError,
                    f"{op.value} cannot be applied to {type(operand).__name__} {operand.value!r}",
                    op_token,
                )
        return LogicalOp(lhs, op, rhs)

    def _parse_comparison(self) -> Expr:
        """Parse comparison, LIKE, NOT LIKE and IS [NOT]"""
        left = self._parse_sign()
        token = self._current()

        if token.type == TokenType.OPERATOR and token.value in _COMPARISON_OPERATORS:
            self._advance()
            return ComparisonOp(left, _COMPARISON_OPERATORS[token.value], self._parse_sign())

        if self._consume_keyword('LIKE'):
            return ComparisonOp(left, ComparisonOperator.LIKE, self._parse_sign())

        if self._match_keyword('NOT') and self._word(self._peek()) == 'LIKE':
            self._advance()
            self._advance()
            return ComparisonOp(left, ComparisonOperator.NOT_LIKE, self._parse_sign())

        if self._consume_keyword('IS'):
            neg = self._consume_keyword('NOT')
            return IsOp(left, neg, self._parse_primary())

        return left

    def _parse_sign(self) -> Expr:
        """Parse unary + or -; a sign before a number folds into the literal"""
        if not self._match_symbol('-', '+'):
            return self._parse_primary()

        sign_token = self._advance()
        op = ArithOperator.NEG if sign_token.value == '-' else ArithOperator.PLUS

        token = self._current()
        if token.type in (TokenType.INTEGER, TokenType.FLOAT):
            self._advance()
            value = -token.value if op is ArithOperator.NEG else token.value
            return self._number_literal(token, value)

        with self._nested():
            operand = self._parse_sign()
        if isinstance(operand, (StringLiteral, BoolLiteral, NullLiteral)):
            raise self._error(
                TypeMismatchError,
                f"Unary '{op.value}' cannot be applied to {type(operand).__name__}",
                sign_token,
            )
        return ArithOp(op, operand)

    def _number_literal(self, token: Token, value) -> Expr:
        if token.type == TokenType.FLOAT:
            return FloatLiteral(value)
        if not INT64_MIN <= value <= INT64_MAX:
            raise self._error(LexicalError, f"Integer literal {token.text} out of range", token)
        return IntegerLiteral(value)

    def _parse_primary(self) -> Expr:
        """Parse primary expression (literals, identifiers, parameters, parentheses)"""
        token = self._current()

        # Parenthesized expression
        if self._consume_symbol('('):
            with self._nested():
                expr = self.parse_expr()
            self._expect_symbol(')', "Expected ')' after expression")
            return expr

        if token.type in (TokenType.INTEGER, TokenType.FLOAT):
            self._advance()
            return self._number_literal(token, token.value)

        if token.type == TokenType.STRING:
            self._advance()
            return StringLiteral(token.value)

        if token.type == TokenType.PARAM:
            self._advance()
            return Param(token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return ID(token.value)

        # Reserved words standing for literals
        if self._consume_keyword('TRUE'):
            return TRUE
        if self._consume_keyword('FALSE'):
            return FALSE
        if self._consume_keyword('NULL'):
            return NULL

        raise self._unexpected(
            "Expected expression (literal, identifier, parameter, or parenthesized expression)",
            token,
        )

    # ========================================================================
    # SELECT parsing
    # ========================================================================

    def parse_query(self) -> Query:
        """Parse SELECT statement"""
        self._expect_keyword('SELECT')
        distinct = self._consume_keyword('DISTINCT')

        items = [self._parse_select_item()]
        while self._consume_symbol(','):
            items.append(self._parse_select_item())

        # Optional FROM clause
        tables = []
        if self._consume_keyword('FROM'):
            tables.append(SelectFrom(self._expect_identifier("Expected table name")))
            while self._consume_symbol(','):
                tables.append(SelectFrom(self._expect_identifier("Expected table name")))

        # Optional WHERE clause
        where = None
        if self._consume_keyword('WHERE'):
            where = self.parse_expr()

        # Optional ORDER BY clause
        order = []
        if self._consume_keyword('ORDER'):
            self._expect_keyword('BY', "Expected BY after ORDER")
            order.append(self._parse_order())
            while self._consume_symbol(','):
                order.append(self._parse_order())

        # Optional LIMIT and OFFSET clauses
        limit = offset = None
        if self._consume_keyword('LIMIT'):
            limit = self._parse_limit_value('LIMIT')
            if self._consume_keyword('OFFSET'):
                offset = self._parse_limit_value('OFFSET')

        # Optional semicolon
        self.consume_terminator()

        select = Select(tuple(items), tuple(tables), where, distinct)
        return Query(select, tuple(order), limit, offset)

    def _parse_select_item(self) -> Expr:
        if self._consume_symbol('*'):
            return Star()
        return self.parse_expr()

    def _parse_order(self) -> Order:
        expr = self.parse_expr()
        if self._consume_keyword('DESC'):
            return Order(expr, desc=True)
        self._consume_keyword('ASC')
        return Order(expr)

    def _parse_limit_value(self, clause: str) -> Expr:
        """LIMIT and OFFSET take an integer literal or a parameter"""
        token = self._current()
        if token.type == TokenType.INTEGER:
            self._advance()
            return self._number_literal(token, token.value)
        if token.type == TokenType.PARAM:
            self._advance()
            return Param(token.value)
        raise self._unexpected(f"Expected integer or parameter after {clause}", token)

    # ========================================================================
    # DDL parsing
    # ========================================================================

    def parse_ddl(self) -> DDL:
        """Parse ';'-separated DDL statements up to the end of input"""
        statements = []
        while not self._at_end():
            try:
                statements.append(self.parse_ddl_stmt())
            except ParseError as err:
                err.with_statement(len(statements))
                raise
            if not self.consume_terminator() and not self._at_end():
                err = self._unexpected("Expected ';' after statement", self._current())
                raise err.with_statement(len(statements) - 1)
        return DDL(tuple(statements))

    def parse_ddl_stmt(self) -> DDLStmt:
        """Parse a single DDL statement"""
        token = self._current()

        # Dispatch based on first keyword
        if self._consume_keyword('CREATE'):
            if self._match_keyword('TABLE'):
                return self._parse_create_table()
            return self._parse_create_index()
        elif self._consume_keyword('ALTER'):
            return self._parse_alter_table()
        elif self._consume_keyword('DROP'):
            return self._parse_drop()
        else:
            raise self._unexpected("Expected CREATE, ALTER, or DROP", token)

    def _parse_paren_list(self, parse_item: Callable[[], T], what: str) -> Tuple[T, ...]:
        """Parse '(' item [, item]* [,] ')'"""
        self._expect_symbol('(', f"Expected '(' before {what}")
        items = [parse_item()]
        while self._consume_symbol(','):
            # Optional trailing comma
            if self._match_symbol(')'):
                break
            items.append(parse_item())
        self._expect_symbol(')', f"Expected ')' after {what}")
        return tuple(items)

    def _parse_create_table(self) -> CreateTable:
        """Parse CREATE TABLE statement"""
        self._expect_keyword('TABLE')
        name = self._expect_identifier("Expected table name")

        columns = self._parse_paren_list(self._parse_column_def, "column definitions")

        self._expect_keyword('PRIMARY', "Expected PRIMARY KEY after column definitions")
        self._expect_keyword('KEY', "Expected KEY after PRIMARY")
        primary_key = self._parse_paren_list(self._parse_key_part, "primary key columns")

        interleave = None
        if self._consume_symbol(','):
            self._expect_keyword('INTERLEAVE', "Expected INTERLEAVE after ','")
            self._expect_keyword('IN', "Expected IN after INTERLEAVE")
            self._expect_keyword('PARENT', "Expected PARENT after INTERLEAVE IN")
            parent = self._expect_identifier("Expected parent table name")
            on_delete = OnDelete.NO_ACTION
            if self._consume_keyword('ON'):
                self._expect_keyword('DELETE', "Expected DELETE after ON")
                on_delete = self._parse_on_delete_action()
            interleave = Interleave(parent, on_delete)

        return CreateTable(name, columns, primary_key, interleave)

    def _parse_create_index(self) -> CreateIndex:
        """Parse CREATE [UNIQUE] [NULL_FILTERED] INDEX statement"""
        unique = self._consume_keyword('UNIQUE')
        null_filtered = self._consume_keyword('NULL_FILTERED')
        if unique or null_filtered:
            self._expect_keyword('INDEX')
        else:
            self._expect_keyword('INDEX', "Expected TABLE or INDEX after CREATE")

        name = self._expect_identifier("Expected index name")
        self._expect_keyword('ON', "Expected ON after index name")
        table = self._expect_identifier("Expected table name")
        columns = self._parse_paren_list(self._parse_key_part, "index columns")

        storing = ()
        if self._consume_keyword('STORING'):
            storing = self._parse_paren_list(self._parse_column_name, "stored columns")

        interleave = None
        if self._consume_symbol(','):
            self._expect_keyword('INTERLEAVE', "Expected INTERLEAVE after ','")
            self._expect_keyword('IN', "Expected IN after INTERLEAVE")
            interleave = self._expect_identifier("Expected parent table name")

        return CreateIndex(name, table, columns, unique, null_filtered, storing, interleave)

    def _parse_alter_table(self) -> AlterTable:
        """Parse ALTER TABLE ... ADD COLUMN / DROP COLUMN / SET ON DELETE"""
        self._expect_keyword('TABLE', "Expected TABLE after ALTER")
        name = self._expect_identifier("Expected table name")

        token = self._current()
        if self._consume_keyword('ADD'):
            self._expect_keyword('COLUMN', "Expected COLUMN after ADD")
            return AlterTable(name, AddColumn(self._parse_column_def()))
        elif self._consume_keyword('DROP'):
            self._expect_keyword('COLUMN', "Expected COLUMN after DROP")
            return AlterTable(name, DropColumn(self._parse_column_name()))
        elif self._consume_keyword('SET'):
            self._expect_keyword('ON', "Expected ON after SET")
            self._expect_keyword('DELETE', "Expected DELETE after SET ON")
            return AlterTable(name, SetOnDelete(self._parse_on_delete_action()))
        else:
            raise self._unexpected("Expected ADD, DROP, or SET after ALTER TABLE", token)

    def _parse_on_delete_action(self) -> OnDelete:
        token = self._current()
        if self._consume_keyword('CASCADE'):
            return OnDelete.CASCADE
        if self._consume_keyword('NO'):
            self._expect_keyword('ACTION', "Expected ACTION after NO")
            return OnDelete.NO_ACTION
        raise self._unexpected("Expected CASCADE or NO ACTION", token)

    def _parse_drop(self) -> DDLStmt:
        """Parse DROP TABLE or DROP INDEX"""
        if self._consume_keyword('TABLE'):
            return DropTable(self._expect_identifier("Expected table name"))
        elif self._consume_keyword('INDEX'):
            return DropIndex(self._expect_identifier("Expected index name"))
        else:
            raise self._unexpected("Expected TABLE or INDEX after DROP", self._current())

    # ========================================================================
    # Columns, types and key parts
    # ========================================================================

    def _parse_column_name(self) -> str:
        return self._expect_identifier("Expected column name")

    def _parse_column_def(self) -> ColumnDef:
        """name type [NOT NULL]"""
        name = self._parse_column_name()
        column_type = self._parse_type()

        not_null = False
        if self._consume_keyword('NOT'):
            self._expect_keyword('NULL', "Expected NULL after NOT")
            not_null = True

        return ColumnDef(name, column_type, not_null)

    def _parse_type(self) -> Type:
        """base type, optionally wrapped in ARRAY<...>"""
        if self._consume_keyword('ARRAY'):
            self._expect_symbol('<', "Expected '<' after ARRAY")
            base, length = self._parse_base_type()
            self._expect_symbol('>', "Expected '>' after array element type")
            return Type(base, length, array=True)

        base, length = self._parse_base_type()
        return Type(base, length)

    def _parse_base_type(self) -> Tuple[TypeBase, int]:
        token = self._current()
        if token.type != TokenType.IDENTIFIER or self._word(token) not in _TYPE_NAMES:
            raise self._unexpected("Expected column type", token)
        self._advance()
        base = _TYPE_NAMES[self._word(token)]

        if base not in SIZED_TYPES:
            if self._match_symbol('('):
                raise self._error(
                    TypeMismatchError, f"Type {base.value} does not take a length", self._current()
                )
            return base, 0

        self._expect_symbol('(', f"Expected '(' and length after {base.value}")
        length = self._parse_type_length(base)
        self._expect_symbol(')', "Expected ')' after type length")
        return base, length

    def _parse_type_length(self, base: TypeBase) -> int:
        """Positive integer length or MAX"""
        token = self._current()
        if self._consume_keyword('MAX'):
            return MAX_LEN
        if token.type != TokenType.INTEGER:
            raise self._unexpected(f"Expected length or MAX for {base.value}", token)
        self._advance()

        if base is TypeBase.STRING:
            limit = config.MAX_STRING_LENGTH
        else:
            limit = config.MAX_BYTES_LENGTH
        if not 1 <= token.value <= limit:
            raise self._error(
                GrammarError, f"{base.value} length must be between 1 and {limit}", token
            )
        return token.value

    def _parse_key_part(self) -> KeyPart:
        """column [ASC|DESC]"""
        column = self._parse_column_name()
        if self._consume_keyword('DESC'):
            return KeyPart(column, desc=True)
        self._consume_keyword('ASC')
        return KeyPart(column)


# ============================================================================
# Convenience functions
# ============================================================================

def _parse_all(sql: str, production: Callable[[Parser], T], what: str) -> T:
    """Run one production and require that it consumes the whole input"""
    try:
        parser = Parser(sql)
        result = production(parser)
        parser.expect_end()
    except ParseError as err:
        logger.debug("Failed to parse %s: %s", what, err)
        raise
    return result


def parse_query(sql: str) -> Query:
    """Parse SQL string to a Query"""
    query = _parse_all(sql, Parser.parse_query, "query")
    logger.debug("Parsed query over %d table(s)", len(query.select.from_))
    return query


def parse_expr(sql: str) -> Expr:
    """Parse a standalone scalar expression"""
    return _parse_all(sql, Parser.parse_expr, "expression")


def parse_ddl(sql: str) -> DDL:
    """Parse ';'-separated DDL statements"""
    ddl = _parse_all(sql, Parser.parse_ddl, "DDL")
    logger.debug("Parsed %d DDL statement(s)", len(ddl.list))
    return ddl


def parse_ddl_stmt(sql: str) -> DDLStmt:
    """Parse exactly one DDL statement, with an optional trailing ';'"""
    def production(parser: Parser) -> DDLStmt:
        stmt = parser.parse_ddl_stmt()
        parser.consume_terminator()
        return stmt
    return _parse_all(sql, production, "DDL statement")
