"""Error handling for minilisp. Only GenericExceptions should be encountered during running: if another type of error
is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

The LispError subclasses form the taxonomy reported to the user:

```
MalformedSyntax     ; missing opening parenthesis, unbalanced or too deeply nested input, integer literal out of range
UnboundSymbol       ; symbol not found anywhere in the frame chain
TypeMismatch        ; operand/condition of the wrong type
ArityError          ; special form or function given the wrong number of operands
DivisionByZero      ; integer division with a zero divisor
NotCallable         ; head symbol bound to something other than a lambda
StackDepthExceeded  ; evaluation nested deeper than the configured limit
```
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a minilisp error/warning. Every '{}' in msg
    is filled with the corresponding snippet from exprs, in bold.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)


class LispError(GenericException):
    """Superclass for every error raised while reading or evaluating a program."""


class MalformedSyntax(LispError):

    def __init__(self, reason, source=""):
        self.reason = reason
        self.source = source
        super().__init__(reason + ": '{}'" if source else reason, source)


class UnboundSymbol(LispError):

    def __init__(self, name):
        self.name = name
        super().__init__("unbound symbol '{}'", name)


class TypeMismatch(LispError):
    """Raised when an operand, an if condition, or a parameter does not have the required type. expected and actual
    are type names (see Expr.type_name).
    """

    def __init__(self, form, expected, actual):
        self.form = form
        self.expected = expected
        self.actual = actual
        super().__init__("'{}' expected {}, got {}", (str(form), expected, actual))


class ArityError(LispError):

    def __init__(self, name, expected, actual):
        self.name = name
        self.expected = expected
        self.actual = actual

        plural = "" if expected == 1 else "s"
        super().__init__(f"'{{}}' expects {{}} argument{plural}, got {{}}", (name, str(expected), str(actual)))


class DivisionByZero(LispError):

    def __init__(self, form):
        self.form = form
        super().__init__("division by zero in '{}'", str(form))


class NotCallable(LispError):

    def __init__(self, name, value):
        self.name = name
        self.value = value
        super().__init__("'{}' is not callable (bound to {})", (name, value.type_name))


class StackDepthExceeded(LispError):

    def __init__(self, limit):
        self.limit = limit
        super().__init__("maximum evaluation depth of {} exceeded", str(limit), diagnosis=False)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom minilisp errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True, verbose=False):
        self.fatal = fatal
        self.verbose = verbose
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_step(self, kind, text):
        """Prints a single evaluation step (function call or return) if verbose."""
        if self.verbose:
            print(colored(f"{kind:>6} ", ErrorHandler.STEP, attrs=["bold"]) + text)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        file, (line, line_num) = next(iter(self.traceback.items()))
        col = line.index(error.expr) + error.start if line and error.expr in line else 0

        error_msg = colored(f"{file}:{line_num}:{col}: ", attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg

        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)

        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.remove_line(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
