"""
Tests for expression parsing: literals, precedence and the logical operand check
"""

import unittest

from spanner_sql import config
from spanner_sql.ast import (
    IntegerLiteral, FloatLiteral, StringLiteral, TRUE, FALSE, NULL,
    ID, Param, ComparisonOp, ComparisonOperator, LogicalOp, LogicalOperator,
    IsOp, ArithOp, ArithOperator,
)
from spanner_sql.errors import GrammarError, LexicalError, TypeMismatchError
from spanner_sql.parser import Parser, parse_expr

AND = LogicalOperator.AND
OR = LogicalOperator.OR
NOT = LogicalOperator.NOT


class TestLiterals(unittest.TestCase):
    """Test literal atoms"""

    def test_integers(self):
        """Test decimal and hex integers with signs"""
        cases = [
            ('17', 17),
            ('-1', -1),
            ('0xf00d', 61453),
            ('-0xbeef', -48879),
            ('+5', 5),
            ('-0x8000000000000000', -(1 << 63)),
        ]
        for sql, want in cases:
            with self.subTest(sql=sql):
                self.assertEqual(parse_expr(sql), IntegerLiteral(want))

    def test_floats(self):
        """Test all float literal forms"""
        cases = [
            ('123.456e-67', 123.456e-67),
            ('.1E4', 1000.0),
            ('58.', 58.0),
            ('4e2', 400.0),
            ('-2.5', -2.5),
        ]
        for sql, want in cases:
            with self.subTest(sql=sql):
                self.assertEqual(parse_expr(sql), FloatLiteral(want))

    def test_integer_out_of_range(self):
        """Test integer beyond int64 fails"""
        with self.assertRaises(LexicalError):
            parse_expr('9223372036854775808')

    def test_float_out_of_range(self):
        """Test float literal too large for FLOAT64 fails"""
        for sql in ['1e999', '-1.5E400']:
            with self.subTest(sql=sql):
                with self.assertRaises(LexicalError):
                    parse_expr(sql)

    def test_reserved_literals(self):
        """Test TRUE, FALSE and NULL"""
        self.assertEqual(parse_expr('NULL'), NULL)
        self.assertEqual(parse_expr('true'), TRUE)
        self.assertEqual(parse_expr('TRUE AND FALSE'), LogicalOp(TRUE, AND, FALSE))

    def test_identifiers_and_params(self):
        """Test identifiers and @params"""
        self.assertEqual(parse_expr('Alias'), ID('Alias'))
        self.assertEqual(parse_expr('@limit'), Param('limit'))


class TestOperators(unittest.TestCase):
    """Test operator parsing and precedence"""

    def test_comparisons(self):
        """Test comparison, LIKE and NOT LIKE"""
        self.assertEqual(
            parse_expr('Count > 0'),
            ComparisonOp(ID('Count'), ComparisonOperator.GT, IntegerLiteral(0)),
        )
        self.assertEqual(
            parse_expr('Name LIKE "Eve %"'),
            ComparisonOp(ID('Name'), ComparisonOperator.LIKE, StringLiteral('Eve %')),
        )
        self.assertEqual(
            parse_expr('Speech NOT LIKE "_oo"'),
            ComparisonOp(ID('Speech'), ComparisonOperator.NOT_LIKE, StringLiteral('_oo')),
        )
        self.assertEqual(
            parse_expr('A <> B'),
            ComparisonOp(ID('A'), ComparisonOperator.NE, ID('B')),
        )

    def test_not_binds_tighter_than_and(self):
        """Test A AND NOT B"""
        self.assertEqual(
            parse_expr('A AND NOT B'),
            LogicalOp(ID('A'), AND, LogicalOp(None, NOT, ID('B'))),
        )

    def test_and_binds_tighter_than_or(self):
        """Test AND binds tighter than OR on either side"""
        self.assertEqual(
            parse_expr('A AND B OR C'),
            LogicalOp(LogicalOp(ID('A'), AND, ID('B')), OR, ID('C')),
        )
        self.assertEqual(
            parse_expr('A OR B AND C'),
            LogicalOp(ID('A'), OR, LogicalOp(ID('B'), AND, ID('C'))),
        )

    def test_left_associative(self):
        """Test OR chains group to the left"""
        self.assertEqual(
            parse_expr('A OR B OR C'),
            LogicalOp(LogicalOp(ID('A'), OR, ID('B')), OR, ID('C')),
        )

    def test_parentheses_override_precedence(self):
        """Test parentheses override precedence"""
        self.assertEqual(
            parse_expr('A AND (B OR C)'),
            LogicalOp(ID('A'), AND, LogicalOp(ID('B'), OR, ID('C'))),
        )

    def test_is_not_null(self):
        """Test IS NOT NULL and IS TRUE"""
        self.assertEqual(
            parse_expr('Age < @ageLimit AND Alias IS NOT NULL'),
            LogicalOp(
                ComparisonOp(ID('Age'), ComparisonOperator.LT, Param('ageLimit')),
                AND,
                IsOp(ID('Alias'), True, NULL),
            ),
        )
        self.assertEqual(parse_expr('Flag IS TRUE'), IsOp(ID('Flag'), False, TRUE))

    def test_string_then_is(self):
        """Test string comparison followed by IS NOT NULL"""
        self.assertEqual(
            parse_expr('C < "whelp" AND D IS NOT NULL'),
            LogicalOp(
                ComparisonOp(ID('C'), ComparisonOperator.LT, StringLiteral('whelp')),
                AND,
                IsOp(ID('D'), True, NULL),
            ),
        )

    def test_unary_sign_on_identifier(self):
        """Test unary minus on a column"""
        self.assertEqual(
            parse_expr('-Balance < 0'),
            ComparisonOp(ArithOp(ArithOperator.NEG, ID('Balance')), ComparisonOperator.LT,
                         IntegerLiteral(0)),
        )


class TestRejected(unittest.TestCase):
    """Inputs that must not parse"""

    def test_logical_op_on_string_literals(self):
        """Test AND over string literals fails"""
        with self.assertRaises(TypeMismatchError):
            parse_expr('"foo" AND "bar"')

    def test_logical_op_on_numbers(self):
        """Test logical operators over numbers fail"""
        for sql in ['1 OR A', 'A AND 2.5', 'NOT 7']:
            with self.subTest(sql=sql):
                with self.assertRaises(TypeMismatchError):
                    parse_expr(sql)

    def test_sign_on_string(self):
        """Test unary minus on a string fails"""
        with self.assertRaises(TypeMismatchError):
            parse_expr('-"foo"')

    def test_premature_end(self):
        """Test input ending before an operand fails"""
        for sql in ['A AND', 'A <', '(A', 'NOT', '']:
            with self.subTest(sql=sql):
                with self.assertRaises(GrammarError):
                    parse_expr(sql)

    def test_leftover_input(self):
        """Test unparsed input after an expression fails"""
        with self.assertRaises(GrammarError):
            parse_expr('A B')
        with self.assertRaises(GrammarError):
            parse_expr('A < B < C')

    def test_deep_nesting_is_limited(self):
        """Test nesting past MAX_EXPR_DEPTH fails"""
        depth = config.MAX_EXPR_DEPTH + 1
        with self.assertRaises(GrammarError):
            parse_expr('(' * depth + 'A' + ')' * depth)
        with self.assertRaises(GrammarError):
            parse_expr('NOT ' * depth + 'A')

    def test_nesting_within_limit(self):
        """Test nesting up to MAX_EXPR_DEPTH parses"""
        depth = config.MAX_EXPR_DEPTH
        self.assertEqual(parse_expr('(' * depth + 'A' + ')' * depth), ID('A'))


class TestParserCursor(unittest.TestCase):
    """Test partial parses through the Parser object"""

    def test_remaining_after_full_parse(self):
        """Test nothing remains after a full parse"""
        parser = Parser('A AND B  -- done\n')
        parser.parse_expr()
        self.assertEqual(parser.remaining(), '')

    def test_remaining_after_partial_parse(self):
        """Test remaining text after a partial parse"""
        parser = Parser('A AND B ORDER BY C')
        self.assertEqual(parser.parse_expr(), LogicalOp(ID('A'), AND, ID('B')))
        self.assertEqual(parser.remaining(), 'ORDER BY C')

    def test_idempotent(self):
        """Test that parsing the same text twice gives equal trees"""
        sql = 'A OR B AND NOT C IS NULL'
        self.assertEqual(parse_expr(sql), parse_expr(sql))


if __name__ == '__main__':
    unittest.main()
