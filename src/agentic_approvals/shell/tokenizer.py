"""Shell line tokenizer.

Splits a shell line into Word and Operator tokens the way a POSIX shell
would see them, so that quoted operator characters stay inside words.
Constructs whose meaning cannot be resolved statically are emitted as
Glob, Comment or Substitution tokens instead of being guessed at.
"""

import re
from collections.abc import Mapping

from agentic_approvals.shell.models import (
    Comment,
    Glob,
    Operator,
    ShellToken,
    Substitution,
    Word,
)

# Longest operators first so "&&" wins over "&"
OPERATORS: tuple[str, ...] = (
    "&>>",
    "<<<",
    "&&",
    "||",
    ";;",
    "|&",
    "&>",
    ">>",
    ">&",
    ">|",
    "<<",
    "<&",
    "<>",
    "&",
    ";",
    "|",
    "<",
    ">",
    "(",
    ")",
)

_OPERATOR_CHARS = frozenset("|&;<>()")
_BLANKS = frozenset(" \t\r")
_GLOB_CHARS = frozenset("*?[")
_DOUBLE_QUOTE_ESCAPABLE = frozenset('$`"\\\n')
_SPECIAL_PARAMS = frozenset("0123456789?@*#$!-")
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ShellSyntaxError(ValueError):
    """Raised when a shell line has an unterminated quote or expansion."""


class ShellTokenizer:
    """Tokenizes a shell line into a flat sequence of ShellToken values.

    Variables ($NAME, ${NAME}) are expanded from the supplied environment;
    unset variables expand to the empty string. Unquoted expansions are
    split on whitespace, quoted ones are not.
    """

    def tokenize(
        self,
        line: str,
        env: Mapping[str, str | None] | None = None,
    ) -> list[ShellToken]:
        """Tokenize a shell line.

        Args:
            line: The shell line to tokenize.
            env: Variables available for expansion.

        Returns:
            Tokens in source order. An unquoted newline is emitted as
            Operator(";").

        Raises:
            ShellSyntaxError: On an unterminated quote or ${ expansion.
        """
        return _Lexer(line, env or {}).run()


class _Lexer:
    """Single-use lexer state for one line."""

    def __init__(self, line: str, env: Mapping[str, str | None]):
        self.line = line
        self.env = env
        self.tokens: list[ShellToken] = []
        self._chars: list[str] = []
        self._in_word = False
        self._is_glob = False
        self._stopped = False

    def run(self) -> list[ShellToken]:
        line = self.line
        pos = 0
        while pos < len(line) and not self._stopped:
            ch = line[pos]
            if ch in _BLANKS:
                self._end_word()
                pos += 1
            elif ch == "\n":
                self._end_word()
                self.tokens.append(Operator(";"))
                pos += 1
            elif ch in _OPERATOR_CHARS:
                self._end_word()
                op = next(o for o in OPERATORS if line.startswith(o, pos))
                self.tokens.append(Operator(op))
                pos += len(op)
            elif ch == "#" and not self._in_word:
                end = line.find("\n", pos)
                end = len(line) if end == -1 else end
                self.tokens.append(Comment(line[pos:end]))
                pos = end
            elif ch == "\\":
                pos = self._escape(pos)
            elif ch == "'":
                end = line.find("'", pos + 1)
                if end == -1:
                    raise ShellSyntaxError(f"Unterminated single quote at offset {pos}")
                self._append(line[pos + 1 : end])
                pos = end + 1
            elif ch == '"':
                pos = self._double_quoted(pos + 1)
            elif ch == "`":
                self._substitution(pos)
            elif ch == "$":
                pos = self._dollar(pos, quoted=False)
            else:
                if ch in _GLOB_CHARS or (ch == "{" and self._opens_brace_expansion(pos)):
                    self._is_glob = True
                self._append(ch)
                pos += 1

        if not self._stopped:
            self._end_word()
        return self.tokens

    def _opens_brace_expansion(self, pos: int) -> bool:
        """Whether the { at pos starts a list or sequence like {a,b} or {1..3}."""
        line = self.line
        end = pos + 1
        while end < len(line):
            ch = line[end]
            if ch == "}":
                body = line[pos + 1 : end]
                return "," in body or ".." in body
            if ch in _BLANKS or ch in _OPERATOR_CHARS or ch == "\n":
                return False
            if ch in ("'", '"'):
                # Quoted text, blanks included, stays inside the braces
                close = line.find(ch, end + 1)
                if close == -1:
                    return False
                end = close + 1
            elif ch == "\\":
                end += 2
            else:
                end += 1
        return False

    def _append(self, text: str) -> None:
        self._chars.append(text)
        self._in_word = True

    def _end_word(self) -> None:
        if not self._in_word:
            return
        text = "".join(self._chars)
        self.tokens.append(Glob(text) if self._is_glob else Word(text))
        self._chars = []
        self._in_word = False
        self._is_glob = False

    def _substitution(self, pos: int) -> None:
        # The partial word is dropped; nothing after this point is tokenized
        self._chars = []
        self._in_word = False
        self._is_glob = False
        self.tokens.append(Substitution(self.line[pos:]))
        self._stopped = True

    def _escape(self, pos: int) -> int:
        line = self.line
        if pos + 1 >= len(line):
            self._append("\\")
            return pos + 1
        if line[pos + 1] == "\n":
            return pos + 2  # line continuation
        self._append(line[pos + 1])
        return pos + 2

    def _double_quoted(self, pos: int) -> int:
        line = self.line
        self._in_word = True
        while pos < len(line):
            ch = line[pos]
            if ch == '"':
                return pos + 1
            if ch == "\\" and pos + 1 < len(line) and line[pos + 1] in _DOUBLE_QUOTE_ESCAPABLE:
                if line[pos + 1] != "\n":
                    self._chars.append(line[pos + 1])
                pos += 2
            elif ch == "`":
                self._substitution(pos)
                return len(line)
            elif ch == "$":
                pos = self._dollar(pos, quoted=True)
                if self._stopped:
                    return len(line)
            else:
                self._chars.append(ch)
                pos += 1
        raise ShellSyntaxError("Unterminated double quote")

    def _dollar(self, pos: int, *, quoted: bool) -> int:
        """Handle a $ at pos and return the position after the expansion."""
        line = self.line
        nxt = line[pos + 1] if pos + 1 < len(line) else ""

        if nxt == "(":
            self._substitution(pos)
            return len(line)

        if nxt in ("'", '"'):
            if quoted:
                self._chars.append("$")
                return pos + 1
            self._substitution(pos)
            return len(line)

        if nxt == "{":
            end = line.find("}", pos + 2)
            if end == -1:
                raise ShellSyntaxError(f"Unterminated ${{ at offset {pos}")
            name = line[pos + 2 : end]
            if not (_NAME.fullmatch(name) or (len(name) == 1 and name in _SPECIAL_PARAMS)):
                self._substitution(pos)
                return len(line)
            self._expand(name, quoted=quoted)
            return end + 1

        match = _NAME.match(line, pos + 1)
        if match:
            self._expand(match.group(), quoted=quoted)
            return match.end()

        if nxt and nxt in _SPECIAL_PARAMS:
            self._expand(nxt, quoted=quoted)
            return pos + 2

        # A lone $ is literal
        if quoted:
            self._chars.append("$")
        else:
            self._append("$")
        return pos + 1

    def _expand(self, name: str, *, quoted: bool) -> None:
        value = self.env.get(name) or ""
        if quoted:
            self._chars.append(value)
            return

        fields = value.split()
        if not fields:
            if value:
                self._end_word()
            return
        if value[0].isspace():
            self._end_word()
        for index, field in enumerate(fields):
            if index:
                self._end_word()
            if any(c in _GLOB_CHARS for c in field):
                self._is_glob = True
            self._append(field)
        if value[-1].isspace():
            self._end_word()
