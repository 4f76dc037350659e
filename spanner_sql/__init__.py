"""
spanner_sql - Parser for the Cloud Spanner SQL dialect

Turns query text and schema DDL into immutable AST nodes. No I/O, no
execution: callers act on the returned trees.
"""

import logging

__version__ = '0.1.0'

from spanner_sql.errors import ParseError, LexicalError, GrammarError, TypeMismatchError
from spanner_sql.lexer import Tokenizer, Token, TokenType
from spanner_sql.parser import Parser, parse_query, parse_expr, parse_ddl, parse_ddl_stmt
from spanner_sql.ast import (
    Expr, IntegerLiteral, FloatLiteral, StringLiteral, BoolLiteral, NullLiteral,
    TRUE, FALSE, NULL, ID, Param, Star,
    ComparisonOp, ComparisonOperator, LogicalOp, LogicalOperator,
    IsOp, ArithOp, ArithOperator,
    Query, Select, SelectFrom, Order,
    Type, TypeBase, MAX_LEN, ColumnDef, KeyPart,
    DDL, DDLStmt, Alteration, CreateTable, CreateIndex, Interleave, OnDelete,
    AlterTable, AddColumn, DropColumn, SetOnDelete, DropTable, DropIndex,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'ParseError', 'LexicalError', 'GrammarError', 'TypeMismatchError',
    'Tokenizer', 'Token', 'TokenType',
    'Parser', 'parse_query', 'parse_expr', 'parse_ddl', 'parse_ddl_stmt',
    'Expr', 'IntegerLiteral', 'FloatLiteral', 'StringLiteral', 'BoolLiteral', 'NullLiteral',
    'TRUE', 'FALSE', 'NULL', 'ID', 'Param', 'Star',
    'ComparisonOp', 'ComparisonOperator', 'LogicalOp', 'LogicalOperator',
    'IsOp', 'ArithOp', 'ArithOperator',
    'Query', 'Select', 'SelectFrom', 'Order',
    'Type', 'TypeBase', 'MAX_LEN', 'ColumnDef', 'KeyPart',
    'DDL', 'DDLStmt', 'Alteration', 'CreateTable', 'CreateIndex', 'Interleave', 'OnDelete',
    'AlterTable', 'AddColumn', 'DropColumn', 'SetOnDelete', 'DropTable', 'DropIndex',
]
