"""
AST node types produced by the parser.

Every node is a frozen dataclass and every sequence a tuple, so a parsed
tree is an immutable value that compares field by field.
"""

from typing import Optional, Tuple
from dataclasses import dataclass
from enum import Enum


# ============================================================================
# Expressions
# ============================================================================

class Expr:
    """Base class for expression nodes"""


class ComparisonOperator(Enum):
    LT = '<'
    LE = '<='
    GT = '>'
    GE = '>='
    EQ = '='
    NE = '!='
    LIKE = 'LIKE'
    NOT_LIKE = 'NOT LIKE'


class LogicalOperator(Enum):
    AND = 'AND'
    OR = 'OR'
    NOT = 'NOT'


class ArithOperator(Enum):
    NEG = '-'
    PLUS = '+'


@dataclass(frozen=True)
class IntegerLiteral(Expr):
    value: int


@dataclass(frozen=True)
class FloatLiteral(Expr):
    value: float


@dataclass(frozen=True)
class StringLiteral(Expr):
    value: str


@dataclass(frozen=True)
class BoolLiteral(Expr):
    value: bool


@dataclass(frozen=True)
class NullLiteral(Expr):
    pass


TRUE = BoolLiteral(True)
FALSE = BoolLiteral(False)
NULL = NullLiteral()


@dataclass(frozen=True)
class ID(Expr):
    """Reference to a column"""
    name: str


@dataclass(frozen=True)
class Param(Expr):
    """Named query parameter (@name)"""
    name: str


@dataclass(frozen=True)
class Star(Expr):
    """SELECT *"""


@dataclass(frozen=True)
class ComparisonOp(Expr):
    """Comparison: lhs op rhs"""
    lhs: Expr
    op: ComparisonOperator
    rhs: Expr


@dataclass(frozen=True)
class LogicalOp(Expr):
    """AND / OR, or NOT when lhs is None"""
    lhs: Optional[Expr]
    op: LogicalOperator
    rhs: Expr


@dataclass(frozen=True)
class IsOp(Expr):
    """lhs IS [NOT] rhs"""
    lhs: Expr
    neg: bool
    rhs: Expr


@dataclass(frozen=True)
class ArithOp(Expr):
    """Unary sign applied to a non-literal operand"""
    op: ArithOperator
    rhs: Expr


# Literal kinds that can never be the operand of AND, OR or NOT
NON_BOOLEAN_LITERALS = (IntegerLiteral, FloatLiteral, StringLiteral)


# ============================================================================
# Queries
# ============================================================================

@dataclass(frozen=True)
class SelectFrom:
    """Table named in a FROM clause"""
    table: str


@dataclass(frozen=True)
class Select:
    """SELECT [DISTINCT] list [FROM tables] [WHERE expr]"""
    list: Tuple[Expr, ...]
    from_: Tuple[SelectFrom, ...] = ()
    where: Optional[Expr] = None
    distinct: bool = False


@dataclass(frozen=True)
class Order:
    expr: Expr
    desc: bool = False


@dataclass(frozen=True)
class Query:
    """A SELECT with its ORDER BY, LIMIT and OFFSET clauses"""
    select: Select
    order: Tuple[Order, ...] = ()
    limit: Optional[Expr] = None
    offset: Optional[Expr] = None


# ============================================================================
# Column types
# ============================================================================

class TypeBase(Enum):
    BOOL = 'BOOL'
    INT64 = 'INT64'
    FLOAT64 = 'FLOAT64'
    STRING = 'STRING'
    BYTES = 'BYTES'
    DATE = 'DATE'
    TIMESTAMP = 'TIMESTAMP'


# Length of STRING(MAX) / BYTES(MAX); larger than any concrete length
MAX_LEN = (1 << 63) - 1

# Base types that take a length
SIZED_TYPES = (TypeBase.STRING, TypeBase.BYTES)


@dataclass(frozen=True)
class Type:
    """Column type: base, length for STRING/BYTES, ARRAY<> wrapper"""
    base: TypeBase
    len: int = 0
    array: bool = False

    def __str__(self):
        text = self.base.value
        if self.base in SIZED_TYPES:
            text += '(MAX)' if self.len == MAX_LEN else f'({self.len})'
        if self.array:
            text = f'ARRAY<{text}>'
        return text


@dataclass(frozen=True)
class ColumnDef:
    """Column definition with type and constraints"""
    name: str
    type: Type
    not_null: bool = False


@dataclass(frozen=True)
class KeyPart:
    """Column of a primary key or index, with sort direction"""
    column: str
    desc: bool = False


# ============================================================================
# DDL statements
# ============================================================================

class DDLStmt:
    """Base class for DDL statement nodes"""


class Alteration:
    """Base class for ALTER TABLE actions"""


class OnDelete(Enum):
    NO_ACTION = 'NO ACTION'
    CASCADE = 'CASCADE'


@dataclass(frozen=True)
class Interleave:
    """INTERLEAVE IN PARENT parent [ON DELETE ...]"""
    parent: str
    on_delete: OnDelete = OnDelete.NO_ACTION


@dataclass(frozen=True)
class CreateTable(DDLStmt):
    """CREATE TABLE name (columns...) PRIMARY KEY (...)"""
    name: str
    columns: Tuple[ColumnDef, ...]
    primary_key: Tuple[KeyPart, ...]
    interleave: Optional[Interleave] = None


@dataclass(frozen=True)
class CreateIndex(DDLStmt):
    """CREATE [UNIQUE] [NULL_FILTERED] INDEX name ON table (key parts)"""
    name: str
    table: str
    columns: Tuple[KeyPart, ...]
    unique: bool = False
    null_filtered: bool = False
    storing: Tuple[str, ...] = ()
    interleave: Optional[str] = None


@dataclass(frozen=True)
class AddColumn(Alteration):
    def_: ColumnDef


@dataclass(frozen=True)
class DropColumn(Alteration):
    name: str


@dataclass(frozen=True)
class SetOnDelete(Alteration):
    action: OnDelete


@dataclass(frozen=True)
class AlterTable(DDLStmt):
    """ALTER TABLE name alteration"""
    name: str
    alteration: Alteration


@dataclass(frozen=True)
class DropTable(DDLStmt):
    name: str


@dataclass(frozen=True)
class DropIndex(DDLStmt):
    name: str


@dataclass(frozen=True)
class DDL:
    """Ordered list of DDL statements"""
    list: Tuple[DDLStmt, ...]
