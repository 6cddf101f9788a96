"""Session control for minilisp. Runs minilisp source either from a file or line by line from the command-line, always
against the same root environment, so bindings made by one form are visible to every later form.

A source file is a sequence of top-level forms. A form may span several lines (a line with unclosed parentheses is
continued by the next one) and everything after a ';' on a line is a comment.
"""

from minilisp.core.environment import Environment
from minilisp.core.evaluator import Evaluator
from minilisp.core.expr import Nil
from minilisp.core.tokenizer import TokenKind, tokenize
from minilisp.lang.error import GenericException


class Session:
    """Governs a minilisp session: the root environment, the evaluator bound to it, and the forms waiting to run."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";"

    def __init__(self, error_handler, path, cmd_line, max_depth=Evaluator.MAX_DEPTH, lexical=True):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.environment = Environment.create_root()
        self.evaluator = Evaluator(self.environment, max_depth, lexical, tracer=self.error_handler.register_step)

        self.to_exec = {}  # dict of line num: form source to evaluate
        self.results = []  # display strings of evaluated forms, oldest first

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            forms = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, add_to_prev, line_num + 1, forms)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for form in forms:
                self.add(*form)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, add_to_prev, line_num=None, forms=None):
        """Preprocesses a line from a file or command-line: strips comments and surrounding whitespace. If forms is
        given, the line is appended to it as a new (line, line_num) form, or joined onto the last form if add_to_prev.
        Returns the processed line and whether the next line continues it (parentheses are still open).
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]
        line = line.strip()

        if forms is not None:
            if line and not add_to_prev:
                forms.append((line, line_num))
            elif add_to_prev:
                prev, prev_num = forms.pop()
                line = f"{prev} {line}".rstrip()
                forms.append((line, prev_num))

        return line, line.count("(") > line.count(")")

    def add(self, source, line_num=None):
        """Queues a form for evaluation. Nothing is evaluated until run is called."""
        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        if any(token.kind is TokenKind.QUOTE for token in tokenize(source)):
            self.error_handler.warn("quoting is not supported, '{}' is ignored", "'")

        self.to_exec[line_num] = source
        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Evaluates the queued forms in order, appending the display string of every non-nil result to results.
        Will raise any errors that are encountered; forms after the failing one stay queued unless in command-line
        mode.
        """
        for line_num, source in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, source, line_num)

            try:
                result = self.evaluator.eval(source)
                del self.to_exec[line_num]
            finally:
                if self.cmd_line:
                    self.to_exec.clear()

            if not isinstance(result, Nil):
                self.results.append(str(result))

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Returns and removes the oldest result."""
        return self.results.pop(0)
