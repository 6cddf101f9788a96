r"""Tokenizer for minilisp source text. Turns a raw string into a flat list of Tokens that the parser consumes once.

Every word of the source is classified as follows:

```
"("      ; LPAREN
")"      ; RPAREN
"#t"     ; TRUE
"#f"     ; FALSE
"nil"    ; NIL
"'"      ; QUOTE      - recognized, but skipped by the parser
[+-]?\d+ ; INT        - must fit a signed 32-bit integer
<other>  ; SYMBOL     - any other word, operators included
```
"""

import enum
import re
from dataclasses import dataclass

from minilisp.lang.error import MalformedSyntax


INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


class TokenKind(enum.Enum):
    INT = "int"
    SYMBOL = "symbol"
    LPAREN = "("
    RPAREN = ")"
    TRUE = "#t"
    FALSE = "#f"
    NIL = "nil"
    QUOTE = "'"


@dataclass(frozen=True)
class Token:
    """A single lexical token. value is the int for INT tokens, the name for SYMBOL tokens and None otherwise."""
    kind: TokenKind
    value: object = None

    def __repr__(self):
        if self.value is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.value!r})"


KEYWORDS = {kind.value: kind for kind in TokenKind if kind not in (TokenKind.INT, TokenKind.SYMBOL)}
INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_int(word):
    """Parses word as a signed 32-bit decimal integer. Returns None if word is not an integer literal, raises a
    MalformedSyntax error if it is one but does not fit in 32 bits.
    """
    if not INTEGER.fullmatch(word):
        return None

    num = int(word)
    if not INT_MIN <= num <= INT_MAX:
        raise MalformedSyntax("integer literal out of range", word)
    return num


def classify(word):
    """Returns the Token for a single whitespace-delimited word."""
    if word in KEYWORDS:
        return Token(KEYWORDS[word])

    num = parse_int(word)
    if num is not None:
        return Token(TokenKind.INT, num)
    return Token(TokenKind.SYMBOL, word)


def tokenize(source):
    """Splits source into Tokens. Parentheses are always their own words, even without surrounding whitespace."""
    words = source.replace("(", " ( ").replace(")", " ) ").split()
    return [classify(word) for word in words]
