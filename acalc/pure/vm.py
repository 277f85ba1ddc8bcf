"""Straight-line stack machine for acalc programs.

`run` executes each instruction exactly once, in order, against a caller-owned Stack. Cost is linear in program
length and nothing recurses, which is the point of lowering a tree into a Program in the first place.

Operand order: Apply pops the most recently pushed value as rhs and the one beneath it as lhs.
"""

from acalc.lang.error import ExcessValues, IncompleteProgram, StackOverflow, StackUnderflow, UnknownInstruction
from acalc.pure.bytecode import Apply, PushConstant
from acalc.pure.operators import apply


class Stack:
    """Scratch stack of floats addressed by a top-of-stack index (-1 when empty).

    Stack(capacity=n) is pre-sized and fixed: pushing an (n+1)th value raises StackOverflow. Stack() grows as needed.
    A Stack may be reused across sequential runs, but must not be shared between concurrent ones.
    """

    def __init__(self, capacity=None):
        if capacity is not None and capacity < 0:
            raise ValueError("capacity cannot be negative")

        self.capacity = capacity
        self.values = [0.0] * capacity if capacity is not None else []
        self.top = -1

    @property
    def growable(self):
        return self.capacity is None

    def clear(self):
        """Marks the stack as empty. Slots of a fixed stack are kept allocated."""
        self.top = -1
        if self.growable:
            self.values.clear()

    def push(self, value):
        if self.growable:
            self.values.append(value)
        elif self.top + 1 >= self.capacity:
            raise StackOverflow(self.capacity)
        else:
            self.values[self.top + 1] = value
        self.top += 1

    def pop(self):
        """Pops the top value. Callers check len(self) first: popping an empty stack raises IndexError."""
        if self.top < 0:
            raise IndexError("pop from empty stack")

        value = self.values[self.top]
        if self.growable:
            self.values.pop()
        self.top -= 1
        return value

    def __len__(self):
        return self.top + 1

    def __repr__(self):
        return f"Stack(capacity={self.capacity}, values={self.values[:self.top + 1]})"


def run(program, stack=None):
    """Runs program on stack and returns the single value it leaves behind. stack is emptied first; if it's None, a
    fresh growable Stack is used.
    """
    if stack is None:
        stack = Stack()
    stack.clear()

    for instruction in program:
        if isinstance(instruction, PushConstant):
            stack.push(instruction.value)
        elif isinstance(instruction, Apply):
            if len(stack) < 2:
                raise StackUnderflow(instruction, len(stack))
            rhs = stack.pop()
            lhs = stack.pop()
            stack.push(apply(instruction.operator, lhs, rhs))
        else:
            raise UnknownInstruction(instruction)

    if len(stack) == 0:
        raise IncompleteProgram()
    elif len(stack) > 1:
        raise ExcessValues(len(stack))
    return stack.pop()
