"""Instructions and programs for the acalc stack machine.

A Program is a flat, immutable sequence of two kinds of Instruction:

```
PushConstant(value)   ; push value onto the stack                              (stack effect +1)
Apply(operator)       ; pop rhs, pop lhs, push apply(operator, lhs, rhs)       (stack effect -1)
```

Execution is always start to end: there are no jumps. Programs can be flattened to (tag, operand) records, e.g. to
cache a compiled program between a compile phase and a later run phase.
"""

from dataclasses import dataclass
from numbers import Real

from acalc.lang.error import UnknownInstruction
from acalc.pure.operators import Operator, format_number


class Instruction:
    """Superclass of all instructions."""
    __slots__ = ()
    TAG = None

    @property
    def operand(self):
        """Operand stored in this instruction's record."""
        raise NotImplementedError


@dataclass(frozen=True)
class PushConstant(Instruction):
    value: float
    TAG = "push"

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, Real):
            raise UnknownInstruction(self)
        try:
            object.__setattr__(self, "value", float(self.value))
        except OverflowError:
            raise UnknownInstruction(self)

    @property
    def operand(self):
        return self.value

    def __str__(self):
        return f"{self.TAG} {format_number(self.value)}"


@dataclass(frozen=True)
class Apply(Instruction):
    operator: Operator
    TAG = "apply"

    def __post_init__(self):
        if not isinstance(self.operator, Operator):
            raise UnknownInstruction(self)

    @property
    def operand(self):
        return self.operator.value

    def __str__(self):
        return f"{self.TAG} {self.operator}"


INSTRUCTIONS = {cls.TAG: cls for cls in (PushConstant, Apply)}
STACK_EFFECT = {PushConstant: +1, Apply: -1}


@dataclass(frozen=True)
class Program:
    """Ordered, immutable sequence of Instructions. Compile once, run arbitrarily many times."""
    instructions: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))

    @property
    def depth(self):
        """Maximum number of values the stack holds while running this program. Running on a fixed stack of at least
        this capacity never overflows. Raises UnknownInstruction for instructions without a stack effect.
        """
        height = deepest = 0
        for instruction in self.instructions:
            try:
                height += STACK_EFFECT[type(instruction)]
            except KeyError:
                raise UnknownInstruction(instruction)
            deepest = max(deepest, height)
        return deepest

    def to_records(self):
        """Returns the program as a list of (tag, operand) pairs, e.g. [("push", 2.0), ("apply", "+")]."""
        return [(instruction.TAG, instruction.operand) for instruction in self.instructions]

    @classmethod
    def from_records(cls, records):
        """Rebuilds a Program from (tag, operand) pairs. Raises UnknownInstruction on an unrecognized record."""
        instructions = []
        for record in records:
            try:
                tag, operand = record
                instruction_cls = INSTRUCTIONS[tag]
            except (KeyError, TypeError, ValueError):
                raise UnknownInstruction(record)

            if instruction_cls is Apply:
                operator = Operator.from_symbol(operand)
                if operator is None:
                    raise UnknownInstruction(record)
                instructions.append(Apply(operator))
            else:
                instructions.append(PushConstant(operand))
        return cls(tuple(instructions))

    def display(self):
        """Returns a numbered listing of this program, one instruction per line."""
        width = len(str(max(len(self.instructions) - 1, 0)))
        return "\n".join(f"{idx:>{width}}  {instruction}" for idx, instruction in enumerate(self.instructions))

    def __len__(self):
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    def __getitem__(self, idx):
        return self.instructions[idx]
