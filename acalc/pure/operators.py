"""Binary arithmetic operators shared by the tree evaluator and the stack machine.

`apply` is the only place arithmetic happens, so both execution strategies agree on every input. All arithmetic is
IEEE-754 double precision: division by zero and invalid operations produce infinities/NaN instead of raising.
"""

from enum import Enum
import math

from acalc.lang.error import MalformedExpression


class Operator(Enum):
    """Closed set of binary operators. Values are the symbols used in source text and listings."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @classmethod
    def from_symbol(cls, symbol):
        """Returns the Operator for symbol, or None if symbol isn't an operator."""
        try:
            return cls(symbol)
        except ValueError:
            return None

    def __str__(self):
        return self.value


def _divide(lhs, rhs):
    if rhs == 0.0:
        # python raises ZeroDivisionError here, so produce the IEEE result by hand
        if lhs == 0.0 or math.isnan(lhs):
            return math.nan
        return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)
    return lhs / rhs


_TABLE = {
    Operator.ADD: lambda lhs, rhs: lhs + rhs,
    Operator.SUBTRACT: lambda lhs, rhs: lhs - rhs,
    Operator.MULTIPLY: lambda lhs, rhs: lhs * rhs,
    Operator.DIVIDE: _divide,
}


def apply(op, lhs, rhs):
    """Returns op applied to float(lhs) and float(rhs). Raises MalformedExpression if op isn't an Operator."""
    try:
        operation = _TABLE[op]
    except (KeyError, TypeError):
        raise MalformedExpression(op, "unrecognized operator")
    return operation(float(lhs), float(rhs))


def identical(lhs, rhs):
    """Whether lhs and rhs are the same float: NaN is identical to NaN, 0.0 is not identical to -0.0."""
    if math.isnan(lhs) or math.isnan(rhs):
        return math.isnan(lhs) and math.isnan(rhs)
    return lhs == rhs and math.copysign(1.0, lhs) == math.copysign(1.0, rhs)


def format_number(value):
    """Formats value without a trailing '.0' for integral floats: 13.0 -> '13', 0.5 -> '0.5', inf -> 'inf'."""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e16:
        return str(int(value)) if value or math.copysign(1.0, value) > 0 else "-0"
    return repr(value)
