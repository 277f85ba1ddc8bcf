"""Lexical analysis and parsing for the acalc language. Note that this module does not provide input file handling (see
session.py), but rather parsing of single string expressions/listing lines.

Infix expressions follow the usual precedence rules, associating by left (8 - 2 - 1 = (8 - 2) - 1):

```
<expr>   ::= <term> (("+" | "-") <term>)*
<term>   ::= <factor> (("*" | "/") <factor>)*
<factor> ::= <number>
           | "(" <expr> ")"
<number> ::= ["-"] <digits> ["." <digits>] [("e" | "E") ["+" | "-"] <digits>]   ; also "inf" and "nan"
```

There are no unary operators: a "-" in operand position must be directly followed by a number.

Assembly listings hold one instruction per line:

```
<line>   ::= "push" <number>
           | "apply" ("+" | "-" | "*" | "/")
```
"""

from dataclasses import dataclass
import re

from acalc.lang.error import GenericException
from acalc.pure.bytecode import Program
from acalc.pure.operators import Operator
from acalc.pure.tree import BinaryOp, Literal


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: int

    @property
    def end(self):
        return self.start + len(self.text)


class Lexer:
    """Splits an infix expression into number, operator and paren Tokens."""
    NUMBER = re.compile(r"(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?|inf|nan")
    PATTERN = re.compile(
        r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|nan)"
        r"|(?P<operator>[-+*/])"
        r"|(?P<paren>[()])"
        r"|(?P<space>\s+)"
        r"|(?P<illegal>.)"
    )

    @staticmethod
    def tokenize(expr):
        """Returns list of Tokens in expr. Raises GenericException on characters outside the grammar."""
        tokens = []
        for match in Lexer.PATTERN.finditer(expr):
            kind = match.lastgroup
            if kind == "space":
                continue
            elif kind == "illegal":
                start = match.start()
                raise GenericException("'{}' contains illegal character '{}'", (expr, match.group()),
                                       start=start, end=start + 1)
            tokens.append(Token(kind, match.group(), match.start()))
        return tokens


class Parser:
    """Recursive descent parser from infix text to an Expression tree."""

    def __init__(self, expr):
        self.expr = expr
        self.tokens = Lexer.tokenize(expr)
        self.pos = 0

    def parse(self):
        """Parses all of self.expr. Raises GenericException if any tokens are left over."""
        if not self.tokens:
            raise GenericException("expression cannot be empty", self.expr)

        tree = self._expr()
        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            msg = "'{}' has mismatched parentheses" if token.text == ")" else "'{}' has unexpected '{}'"
            raise GenericException(msg, (self.expr, token.text), start=token.start, end=token.end)
        return tree

    def _peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self):
        token = self._peek()
        if token is None:
            end = len(self.expr.rstrip())
            raise GenericException("'{}' ends unexpectedly", self.expr, start=max(end - 1, 0), end=end)
        self.pos += 1
        return token

    def _binary(self, operand, symbols):
        left = operand()
        token = self._peek()
        while token is not None and token.kind == "operator" and token.text in symbols:
            self.pos += 1
            left = BinaryOp(Operator(token.text), left, operand())
            token = self._peek()
        return left

    def _expr(self):
        return self._binary(self._term, "+-")

    def _term(self):
        return self._binary(self._factor, "*/")

    def _factor(self):
        token = self._next()

        if token.kind == "number":
            return Literal(float(token.text))

        elif token.text == "-":
            number = self._next()
            if number.kind != "number" or number.start != token.end:
                msg = "'{}' has '-' not directly followed by a number"
                raise GenericException(msg, self.expr, start=token.start, end=token.end)
            return Literal(-float(number.text))

        elif token.text == "(":
            inner = self._expr()
            close = self._peek()
            if close is None or close.text != ")":
                raise GenericException("'{}' has mismatched parentheses", self.expr, start=token.start,
                                       end=token.end)
            self.pos += 1
            return inner

        raise GenericException("'{}' has unexpected '{}'", (self.expr, token.text), start=token.start, end=token.end)


def parse(expr):
    """Parses infix expr into an Expression tree."""
    return Parser(expr).parse()


def parse_instruction(line):
    """Parses one assembly line into a (tag, operand) record, e.g. "push 2" -> ("push", 2.0). Unknown mnemonics are
    passed through and rejected by Program.from_records.
    """
    words = line.split()
    if len(words) != 2:
        raise GenericException("'{}' expects an instruction and one operand", line)

    tag, operand = words[0].lower(), words[1]
    if tag == "push":
        unsigned = operand[1:] if operand.startswith("-") else operand
        if not Lexer.NUMBER.fullmatch(unsigned):
            start = line.rindex(operand)
            raise GenericException("'{}' pushes '{}', which is not a number", (line, operand), start=start,
                                   end=start + len(operand))
        return tag, float(operand)
    return tag, operand


def parse_listing(lines):
    """Parses assembly lines into a Program. Blank lines are skipped."""
    return Program.from_records(parse_instruction(line) for line in lines if line.strip())
