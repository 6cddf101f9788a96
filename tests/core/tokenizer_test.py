import unittest

from minilisp.core.tokenizer import INT_MAX, INT_MIN, Token, TokenKind, tokenize
from minilisp.lang.error import MalformedSyntax


LPAREN = Token(TokenKind.LPAREN)
RPAREN = Token(TokenKind.RPAREN)


def num(value):
    return Token(TokenKind.INT, value)


def sym(name):
    return Token(TokenKind.SYMBOL, name)


class TokenizeTestCase(unittest.TestCase):

    def test_tokenize(self):
        cases = {
            "": [],
            "(1 2)": [LPAREN, num(1), num(2), RPAREN],
            "(#t #f nil)": [LPAREN, Token(TokenKind.TRUE), Token(TokenKind.FALSE), Token(TokenKind.NIL), RPAREN],
            "(+ -3 +4)": [LPAREN, sym("+"), num(-3), num(4), RPAREN],
            "((val x 10)(+ x x))": [
                LPAREN, LPAREN, sym("val"), sym("x"), num(10), RPAREN,
                LPAREN, sym("+"), sym("x"), sym("x"), RPAREN, RPAREN
            ],
            "  (empty?\n\t())  ": [LPAREN, sym("empty?"), LPAREN, RPAREN, RPAREN],
            "(' x)": [LPAREN, Token(TokenKind.QUOTE), sym("x"), RPAREN],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, tokenize(case), case)

    def test_unknown_words_are_symbols(self):
        should_pass = ["-", "+", "!=", "1a", "a1", "#x", "nil?", "x'", "1.5", "--1", "1_000"]
        for case in should_pass:
            self.assertEqual([sym(case)], tokenize(case), case)

    def test_int_range(self):
        cases = {str(INT_MAX): INT_MAX, str(INT_MIN): INT_MIN, "007": 7, "-0": 0}
        for case, expected in cases.items():
            self.assertEqual([num(expected)], tokenize(case), case)

        should_raise = [str(INT_MAX + 1), str(INT_MIN - 1), "(+ 1 99999999999)"]
        for case in should_raise:
            self.assertRaises(MalformedSyntax, tokenize, case)


if __name__ == '__main__':
    unittest.main()
