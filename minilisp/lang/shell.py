"""Handles interactive/command-line mode for minilisp interpreter. Uses cmd as backend."""

import cmd

from minilisp.lang.session import Session


class Shell(cmd.Cmd):
    """minilisp interpreter shell."""
    intro = "minilisp interpreter :: Python backend\nType 'help' for more information, ':q' to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    QUIT = ":q"

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Evaluates arbitrary minilisp form. Returns True (ending the loop) only for the quit command."""
        if line.strip() == Shell.QUIT and not self._tmp_line:
            return True

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = Session.preprocess_line(f"{self._tmp_line} {line}", bool(self._tmp_line))

            if line and add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt

            elif line:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line, self.line_num)
                self.sess.run()

                while self.sess.results:
                    print(self.sess.pop())

        return False

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the minilisp interpreter!\n\n"
              "Every input is a single parenthesized form. Bindings made with 'val' stay \n"
              "visible for the rest of the session.\n\n"
              "Try it out by typing '(val double (fn (x) (+ x x)))'. This will bind a \n"
              "function to the name 'double'. Next, try typing '(double 21)'. This will \n"
              "call 'double' with 21, giving 42 as the result.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
