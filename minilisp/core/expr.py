"""The Expr data model, shared by the parser (as the syntax tree) and the evaluator (as runtime values).

All Exprs are immutable and compared structurally, so a value bound in several frames can be handed around freely:
nothing a holder does can change what another holder sees. str() gives the display format used by the front end.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple


class Expr:
    """Superclass of every node/value. type_name is the name used in type errors."""
    type_name: ClassVar[str] = "expr"


@dataclass(frozen=True)
class Nil(Expr):
    """The unit value. Produced by val and dropped from implicit sequences."""
    type_name: ClassVar[str] = "nil"

    def __str__(self):
        return "nil"


@dataclass(frozen=True)
class Int(Expr):
    type_name: ClassVar[str] = "int"
    value: int

    @classmethod
    def wrap(cls, value):
        """Returns an Int holding value reduced to the signed 32-bit range, as 32-bit machine arithmetic would."""
        return cls((value + 2 ** 31) % 2 ** 32 - 2 ** 31)

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Bool(Expr):
    type_name: ClassVar[str] = "bool"
    value: bool

    def __str__(self):
        return "#t" if self.value else "#f"


@dataclass(frozen=True)
class Symbol(Expr):
    """An identifier. Evaluating a Symbol always resolves it to the value it is bound to."""
    type_name: ClassVar[str] = "symbol"
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Pair(Expr):
    """Cons cell built by the pair form."""
    type_name: ClassVar[str] = "pair"
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.left} . {self.right})"


@dataclass(frozen=True)
class Lambda(Expr):
    """A function value. scope is the index of the frame it was defined in (lexical scoping), or None when calls
    should be chained off the caller's frame instead (dynamic scoping).
    """
    type_name: ClassVar[str] = "lambda"
    params: Tuple[str, ...]
    body: Tuple[Expr, ...]
    scope: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))
        object.__setattr__(self, "body", tuple(self.body))

    def __str__(self):
        return f"#<lambda ({' '.join(self.params)})>"


@dataclass(frozen=True)
class List(Expr):
    """A parenthesized form in the syntax tree, or the sequence of results of an implicit sequence."""
    type_name: ClassVar[str] = "list"
    elements: Tuple[Expr, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self):
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)

    def __getitem__(self, idx):
        return self.elements[idx]

    def __str__(self):
        return "(" + " ".join(str(element) for element in self.elements) + ")"


NIL = Nil()
TRUE = Bool(True)
FALSE = Bool(False)
