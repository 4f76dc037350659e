"""
Tests for the tokenizer: comments, literals, parameters and operators
"""

import unittest

from spanner_sql.errors import LexicalError
from spanner_sql.lexer import Tokenizer, TokenType


def tokenize(sql):
    """Pull every token up to and including EOF"""
    tokenizer = Tokenizer(sql)
    tokens = []
    while True:
        token = tokenizer.next_token()
        tokens.append(token)
        if token.type == TokenType.EOF:
            return tokens


class TestTokenizer(unittest.TestCase):
    """Test lexical analysis"""

    def test_keywords_and_identifiers(self):
        """Test keyword and identifier tokens"""
        tokens = tokenize("select Alias from Characters")
        self.assertEqual([t.type for t in tokens], [
            TokenType.KEYWORD, TokenType.IDENTIFIER, TokenType.KEYWORD,
            TokenType.IDENTIFIER, TokenType.EOF,
        ])
        self.assertEqual(tokens[0].value, 'SELECT')
        self.assertEqual(tokens[1].value, 'Alias')

    def test_contextual_words_are_identifiers(self):
        """Test non-reserved words lex as identifiers"""
        tokens = tokenize("TABLE INT64 MAX")
        self.assertTrue(all(t.type == TokenType.IDENTIFIER for t in tokens[:-1]))

    def test_comments_are_skipped(self):
        """Test all three comment styles are skipped"""
        sql = """
            # hash comment
            A -- dash comment
            /* block
               comment */ B
        """
        tokens = tokenize(sql)
        self.assertEqual([t.value for t in tokens[:-1]], ['A', 'B'])

    def test_unterminated_block_comment(self):
        """Test unterminated block comment fails"""
        with self.assertRaises(LexicalError):
            tokenize("A /* never closed")

    def test_integer_forms(self):
        """Test decimal and hex integer tokens"""
        tokens = tokenize("17 0xf00d 0XBEEF")
        self.assertEqual([t.value for t in tokens[:-1]], [17, 0xf00d, 0xbeef])
        self.assertTrue(all(t.type == TokenType.INTEGER for t in tokens[:-1]))

    def test_float_forms(self):
        """Test float token forms"""
        tokens = tokenize("123.456e-67 .1E4 58. 4e2")
        self.assertTrue(all(t.type == TokenType.FLOAT for t in tokens[:-1]))
        self.assertEqual([t.value for t in tokens[:-1]], [123.456e-67, 1000.0, 58.0, 400.0])

    def test_minus_is_an_operator(self):
        """Test '-' lexes separately from the number"""
        tokens = tokenize("-1")
        self.assertEqual(tokens[0].type, TokenType.OPERATOR)
        self.assertEqual(tokens[1].value, 1)

    def test_binary_literal_rejected(self):
        """Test binary literals fail"""
        with self.assertRaises(LexicalError) as ctx:
            tokenize("0b337")
        self.assertIn("Binary", str(ctx.exception))

    def test_number_followed_by_letters_rejected(self):
        """Test numbers run into letters fail"""
        with self.assertRaises(LexicalError):
            tokenize("123abc")
        with self.assertRaises(LexicalError):
            tokenize("0x")

    def test_strings_and_escapes(self):
        """Test quoted strings and escape sequences"""
        tokens = tokenize(r'''"Eve %" 'it\'s' "a\tb\n" "\x41é\101"''')
        self.assertEqual([t.value for t in tokens[:-1]], ['Eve %', "it's", 'a\tb\n', 'AéA'])

    def test_unterminated_strings(self):
        """Test unterminated strings fail"""
        for sql in ['"foo', '"foo\\', "'foo\nbar'"]:
            with self.subTest(sql=sql):
                with self.assertRaises(LexicalError):
                    tokenize(sql)

    def test_invalid_escape(self):
        """Test unknown escape fails"""
        with self.assertRaises(LexicalError):
            tokenize(r'"\q"')

    def test_params(self):
        """Test @param tokens"""
        tokens = tokenize("@ageLimit @limit")
        self.assertEqual([(t.type, t.value) for t in tokens[:-1]], [
            (TokenType.PARAM, 'ageLimit'), (TokenType.PARAM, 'limit'),
        ])
        with self.assertRaises(LexicalError):
            tokenize("@ 1")

    def test_operators(self):
        """Test operator and punctuation tokens"""
        tokens = tokenize("< <= > >= = != <> ( ) , ; * +")
        self.assertEqual(
            [t.value for t in tokens[:-1]],
            ['<', '<=', '>', '>=', '=', '!=', '!=', '(', ')', ',', ';', '*', '+'],
        )

    def test_unexpected_character(self):
        """Test unknown character fails with its column"""
        with self.assertRaises(LexicalError) as ctx:
            tokenize("A ~ B")
        self.assertEqual(ctx.exception.column, 3)

    def test_positions_and_remaining(self):
        """Test token positions and remaining input"""
        tokenizer = Tokenizer("A\n  B C")
        tokenizer.next_token()
        token = tokenizer.next_token()
        self.assertEqual((token.line, token.column, token.position), (2, 3, 4))
        self.assertEqual(tokenizer.remaining(), " C")

    def test_pull_based(self):
        """Test tokens are lexed only on request"""
        # Lexing stops at the requested token; later bad input is not touched
        tokenizer = Tokenizer("A 0b1")
        self.assertEqual(tokenizer.next_token().value, 'A')
        with self.assertRaises(LexicalError):
            tokenizer.next_token()


if __name__ == '__main__':
    unittest.main()
