from __future__ import annotations
from fractions import Fraction
from typing import Any, Protocol

from errors import FieldError


class Field(Protocol):
    """Arithmetic the reduction engine needs from a coefficient domain."""
    zero: Any
    one: Any

    def __call__(self, x: Any) -> Any: ...
    def add(self, a: Any, b: Any) -> Any: ...
    def sub(self, a: Any, b: Any) -> Any: ...
    def neg(self, a: Any) -> Any: ...
    def mul(self, a: Any, b: Any) -> Any: ...
    def inv(self, a: Any) -> Any: ...
    def div(self, a: Any, b: Any) -> Any: ...
    def is_zero(self, a: Any) -> bool: ...


def _is_prime(p: int) -> bool:
    if p < 2:
        return False
    i = 2
    while i * i <= p:
        if p % i == 0:
            return False
        i += 1
    return True


class PrimeField:
    """
    GF(p) with elements stored as ints in 0..p-1.
    Every result is reduced into that range, so zero is always the int 0.
    """

    def __init__(self, p: int) -> None:
        if not _is_prime(p):
            raise FieldError(f"modulus {p} is not prime")
        self.p = p
        self.zero = 0
        self.one = 1 % p

    def __call__(self, x: int) -> int:
        return int(x) % self.p

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.p

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.p

    def neg(self, a: int) -> int:
        return (-a) % self.p

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.p

    def inv(self, a: int) -> int:
        a %= self.p
        if a == 0:
            raise FieldError(f"inverse of zero in GF({self.p})")
        # Fermat: a^(p-2) = a^-1
        return pow(a, self.p - 2, self.p)

    def div(self, a: int, b: int) -> int:
        return self.mul(a, self.inv(b))

    def is_zero(self, a: int) -> bool:
        return a == 0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PrimeField) and other.p == self.p

    def __hash__(self) -> int:
        return hash(("GF", self.p))

    def __repr__(self) -> str:
        return f"PrimeField({self.p})"


class RationalField:
    """Exact rational coefficients (characteristic 0)."""
    zero = Fraction(0)
    one = Fraction(1)

    def __call__(self, x: Any) -> Fraction:
        return Fraction(x)

    def add(self, a: Fraction, b: Fraction) -> Fraction:
        return a + b

    def sub(self, a: Fraction, b: Fraction) -> Fraction:
        return a - b

    def neg(self, a: Fraction) -> Fraction:
        return -a

    def mul(self, a: Fraction, b: Fraction) -> Fraction:
        return a * b

    def inv(self, a: Fraction) -> Fraction:
        if a == 0:
            raise FieldError("inverse of zero in Q")
        return 1 / Fraction(a)

    def div(self, a: Fraction, b: Fraction) -> Fraction:
        return self.mul(a, self.inv(b))

    def is_zero(self, a: Fraction) -> bool:
        return a == 0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RationalField)

    def __hash__(self) -> int:
        return hash("Q")

    def __repr__(self) -> str:
        return "RationalField()"


F2 = PrimeField(2)
F3 = PrimeField(3)
Q = RationalField()
