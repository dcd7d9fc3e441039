"""Runtime values produced by the evaluator. Values are immutable and compare by value: Number(7) == Number(7.0), but a
Bool never equals a Number.
"""

import math
from dataclasses import dataclass


class Value:
    """Superclass of every runtime value. kind is the name used in error messages."""
    kind = "value"

    def display(self):
        """Human-readable rendering, close to TrudWave literal syntax."""
        raise NotImplementedError

    def __str__(self):
        return self.display()


@dataclass(frozen=True)
class Number(Value):
    kind = "number"
    value: float

    def display(self):
        if math.isnan(self.value):
            return "NaN"
        if math.isinf(self.value):
            return "Infinity" if self.value > 0 else "-Infinity"
        if float(self.value).is_integer() and abs(self.value) < 1e21:
            return str(int(self.value))
        return format_float(float(self.value))


def format_float(value):
    """Shortest round-tripping form of value, with an exponent only outside [1e-6, 1e21): 1e+23, 1e-7, 0.00001."""
    text = repr(value)
    if "e" not in text:
        return text

    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    if exponent < -6 or exponent >= 21:
        return f"{mantissa}e{exponent:+d}"

    # repr switches to an exponent below 1e-4, one decade earlier
    digits = mantissa.lstrip("-").replace(".", "")
    return ("-" if value < 0 else "") + "0." + "0" * (-exponent - 1) + digits


@dataclass(frozen=True)
class String(Value):
    kind = "string"
    value: str

    def display(self):
        return '"' + self.value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Bool(Value):
    kind = "bool"
    value: bool

    def display(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Null(Value):
    kind = "null"

    def display(self):
        return "null"


@dataclass(frozen=True)
class Tuple(Value):
    kind = "tuple"
    elements: tuple

    def display(self):
        return "(" + ", ".join(element.display() for element in self.elements) + ")"


@dataclass(frozen=True)
class Function(Value):
    """A callable value. body is the MatchExpression selected on each call. There is no captured environment."""
    kind = "function"
    name: str
    params: tuple
    body: object

    def display(self):
        return f"<function {self.name}({', '.join(self.params)})>"


NULL = Null()
TRUE = Bool(True)
FALSE = Bool(False)


def boolean(value):
    """Returns the shared Bool for a Python truth value."""
    return TRUE if value else FALSE
