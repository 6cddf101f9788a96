"""Recursive-descent parser for minilisp. A program is a single parenthesized form:

```
<program> ::= <list>
<list>    ::= "(" <item>* ")"
<item>    ::= <int> | <symbol> | "#t" | "#f" | "nil" | <list>
            | "'"                ; quote marks are read and discarded, no quoting semantics exist
```

Tokens are kept in reverse order so that the next token can always be taken off the end with pop().
"""

from minilisp.core.expr import FALSE, NIL, TRUE, Int, List, Symbol
from minilisp.core.tokenizer import TokenKind, tokenize
from minilisp.lang.error import MalformedSyntax


LEAVES = {
    TokenKind.TRUE: lambda token: TRUE,
    TokenKind.FALSE: lambda token: FALSE,
    TokenKind.NIL: lambda token: NIL,
    TokenKind.INT: lambda token: Int(token.value),
    TokenKind.SYMBOL: lambda token: Symbol(token.value),
}


def parse_list(tokens, source=""):
    """Consumes one list (opening parenthesis through its matching closing parenthesis) off the end of tokens and
    returns it as a List. source is only used for error messages.
    """
    if not tokens or tokens.pop().kind is not TokenKind.LPAREN:
        raise MalformedSyntax("expected opening parenthesis", source)

    elements = []
    while tokens:
        token = tokens[-1]

        if token.kind is TokenKind.LPAREN:
            elements.append(parse_list(tokens, source))
            continue

        tokens.pop()
        if token.kind is TokenKind.RPAREN:
            return List(elements)
        elif token.kind in LEAVES:
            elements.append(LEAVES[token.kind](token))
        # TokenKind.QUOTE falls through and is dropped

    raise MalformedSyntax("unbalanced parentheses", source)


def parse(source):
    """Tokenizes and parses source, which must consist of exactly one list."""
    tokens = tokenize(source)[::-1]
    try:
        program = parse_list(tokens, source.strip())
    except RecursionError:
        raise MalformedSyntax("nesting too deep", source.strip()) from None

    if tokens:
        raise MalformedSyntax("unexpected input after closing parenthesis", source.strip())
    return program
