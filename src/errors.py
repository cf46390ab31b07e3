from __future__ import annotations


class PersistenceError(Exception):
    """Base class for failures raised by the reduction engine."""


class PreconditionError(PersistenceError, ValueError):
    """
    Input violates a structural requirement of the engine:
    malformed boundary data, unsorted or non-finite values, duplicate cells.
    """


class FiltrationError(PreconditionError):
    """A cell appears before one of its faces."""


class FieldError(PersistenceError, ArithmeticError):
    """Invalid field arithmetic (inverse of zero, non-prime modulus)."""


class BarcodeUnavailable(PersistenceError):
    """The reduction for a dimension did not finish (e.g. timed out)."""
