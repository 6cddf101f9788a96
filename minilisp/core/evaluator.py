"""Tree-walking evaluator for minilisp.

A List whose head is a Symbol is dispatched on that symbol: either one of the special forms in Form, or a call of the
lambda the symbol is bound to. Any other List is an implicit sequence: its elements are evaluated left to right in
the same frame and the non-nil results are collected into a new List. That is how a whole program such as
`((val x 10) (+ x x))` evaluates to `(20)`.

Special forms:

```
(+ a b) (- a b) (* a b) (/ a b)   ; Int arithmetic, / truncates toward zero
(< a b) (> a b) (= a b) (!= a b)  ; Int comparison, returns Bool
(or a b)                          ; Bool, both sides are always evaluated
(val name expr)                   ; binds in the current frame, returns nil
(if cond then else)               ; cond must be a Bool
(empty? form)                     ; #t iff form is literally ()
(pair a b)                        ; cons cell
(fn (params...) (body...))        ; lambda
```
"""

import enum

from minilisp.core.environment import Environment
from minilisp.core.expr import NIL, Bool, Int, Lambda, List, Nil, Pair, Symbol
from minilisp.core.parser import parse
from minilisp.lang.error import (ArityError, DivisionByZero, MalformedSyntax, NotCallable, StackDepthExceeded,
                                 TypeMismatch, UnboundSymbol)


class Form(enum.Enum):
    """Every special form, keyed by the head symbol that introduces it."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LT = "<"
    GT = ">"
    EQ = "="
    NE = "!="
    OR = "or"
    VAL = "val"
    IF = "if"
    EMPTY = "empty?"
    PAIR = "pair"
    FN = "fn"

    @property
    def arity(self):
        """Number of operands the form takes."""
        return ARITIES.get(self, 2)


ARITIES = {Form.IF: 3, Form.EMPTY: 1}
FORMS = {form.value: form for form in Form}


def divide(a, b):
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return Int.wrap(quotient if (a < 0) == (b < 0) else -quotient)


BINARY = {  # form: (operand type, operation on the operands' python values)
    Form.ADD: (Int, lambda a, b: Int.wrap(a + b)),
    Form.SUB: (Int, lambda a, b: Int.wrap(a - b)),
    Form.MUL: (Int, lambda a, b: Int.wrap(a * b)),
    Form.DIV: (Int, divide),
    Form.LT: (Int, lambda a, b: Bool(a < b)),
    Form.GT: (Int, lambda a, b: Bool(a > b)),
    Form.EQ: (Int, lambda a, b: Bool(a == b)),
    Form.NE: (Int, lambda a, b: Bool(a != b)),
    Form.OR: (Bool, lambda a, b: Bool(a or b)),
}


class Evaluator:
    """Evaluates Exprs against an Environment.

    max_depth bounds how deeply eval_obj may nest before a StackDepthExceeded error is raised. With lexical=True (the
    default) a lambda remembers the frame it was defined in and each call's frame is chained to it; with
    lexical=False calls are chained to the caller's frame, so free variables in a body resolve dynamically. tracer,
    if given, is called as tracer(kind, text) for every lambda call and return.
    """
    MAX_DEPTH = 200

    def __init__(self, environment=None, max_depth=MAX_DEPTH, lexical=True, tracer=None):
        self.environment = environment if environment is not None else Environment.create_root()
        self.max_depth = max_depth
        self.lexical = lexical
        self.tracer = tracer
        self.depth = 0

        self.handlers = {form: self._eval_binary for form in BINARY}
        self.handlers.update({
            Form.VAL: self._eval_val,
            Form.IF: self._eval_if,
            Form.EMPTY: self._eval_empty,
            Form.PAIR: self._eval_pair,
            Form.FN: self._eval_fn,
        })

    def eval(self, source, scope=Environment.ROOT):
        """Parses and evaluates source in the frame at scope. Raises a LispError if anything goes wrong.

        Once a top-level evaluation finishes, frames captured by closures that are no longer bound anywhere (nor part
        of the result) are collected.
        """
        program = parse(source)
        result = NIL
        try:
            result = self.eval_obj(program, scope)
            return result
        except RecursionError:
            raise StackDepthExceeded(self.max_depth) from None
        finally:
            if self.depth == 0:
                self.environment.collect([scope], [result])

    def eval_obj(self, node, scope):
        """Evaluates a single Expr in the frame at scope."""
        if self.depth >= self.max_depth:
            raise StackDepthExceeded(self.max_depth)

        self.depth += 1
        try:
            if isinstance(node, (Nil, Int, Bool, Pair)):
                return node
            elif isinstance(node, Lambda):
                return NIL  # lambdas are only meaningful once bound or called
            elif isinstance(node, Symbol):
                return self.eval_symbol(node.name, scope)
            elif isinstance(node, List):
                return self.eval_list(node, scope)
            raise TypeError(f"cannot evaluate {node!r}")
        finally:
            self.depth -= 1

    def eval_symbol(self, name, scope):
        """Returns the value name is bound to, as seen from the frame at scope."""
        value = self.environment.lookup(scope, name)
        if value is None:
            raise UnboundSymbol(name)
        return value

    def eval_list(self, node, scope):
        """Dispatches a List on its head: special form, function call, or implicit sequence."""
        if not node or not isinstance(node[0], Symbol):
            return self._eval_sequence(node, scope)

        form = FORMS.get(node[0].name)
        if form is None:
            return self._eval_call(node, scope)

        if len(node) - 1 != form.arity:
            raise ArityError(form.value, form.arity, len(node) - 1)
        return self.handlers[form](form, node, scope)

    def _eval_sequence(self, node, scope):
        results = []
        for element in node:
            result = self.eval_obj(element, scope)
            if not isinstance(result, Nil):
                results.append(result)
        return List(results)

    def _eval_binary(self, form, node, scope):
        operand_type, operation = BINARY[form]

        lhs = self.eval_obj(node[1], scope)
        rhs = self.eval_obj(node[2], scope)
        for operand in (lhs, rhs):
            if not isinstance(operand, operand_type):
                raise TypeMismatch(node, operand_type.type_name, operand.type_name)

        if form is Form.DIV and rhs.value == 0:
            raise DivisionByZero(node)
        return operation(lhs.value, rhs.value)

    def _eval_val(self, form, node, scope):
        name = node[1]
        if not isinstance(name, Symbol):
            raise MalformedSyntax("val expects a symbol to bind", str(node))

        self.environment.define(scope, name.name, self.eval_obj(node[2], scope))
        return NIL

    def _eval_if(self, form, node, scope):
        condition = self.eval_obj(node[1], scope)
        if not isinstance(condition, Bool):
            raise TypeMismatch(node, Bool.type_name, condition.type_name)
        return self.eval_obj(node[2] if condition.value else node[3], scope)

    def _eval_empty(self, form, node, scope):
        operand = node[1]
        return Bool(isinstance(operand, List) and len(operand) == 0)

    def _eval_pair(self, form, node, scope):
        left = self.eval_obj(node[1], scope)
        right = self.eval_obj(node[2], scope)
        return Pair(left, right)

    def _eval_fn(self, form, node, scope):
        params, body = node[1], node[2]
        if not isinstance(params, List) or not all(isinstance(param, Symbol) for param in params):
            raise MalformedSyntax("fn expects a list of parameter names", str(node))
        if not isinstance(body, List):
            raise MalformedSyntax("fn expects a list as its body", str(node))

        if not self.lexical:
            return Lambda([param.name for param in params], body.elements)

        self.environment.pin(scope)
        return Lambda([param.name for param in params], body.elements, scope)

    def _eval_call(self, node, scope):
        name = node[0].name
        function = self.eval_symbol(name, scope)
        if not isinstance(function, Lambda):
            raise NotCallable(name, function)

        args = node.elements[1:]
        if len(args) != len(function.params):
            raise ArityError(name, len(function.params), len(args))

        values = []
        for arg in args:
            values.append(self.eval_obj(arg, scope))
        self._trace("call", str(List([node[0]] + values)))

        frame = self.environment.extend(scope if function.scope is None else function.scope)
        try:
            for param, value in zip(function.params, values):
                self.environment.define(frame, param, value)
            result = self.eval_obj(List(function.body), frame)
        finally:
            self.environment.release(frame)

        self._trace("return", str(result))
        return result

    def _trace(self, kind, text):
        if self.tracer is not None:
            self.tracer(kind, text)


def evaluate(source, environment, **options):
    """Evaluates source against environment, which keeps any bindings made for later calls. options are passed on to
    Evaluator.
    """
    return Evaluator(environment, **options).eval(source)
