"""Error taxonomy shared by every BackpropNets component."""

from __future__ import annotations


class BackpropNetsError(Exception):
    """Base class for errors raised by BackpropNets."""


class DimensionMismatchError(BackpropNetsError, ValueError):
    """An operand does not have the shape the receiving component expects."""


class ConfigurationAccessError(BackpropNetsError, AttributeError):
    """A setting was accessed through the wrong mode (e.g. scalar vs per-weight rates)."""


class OperationNotPermittedError(BackpropNetsError, RuntimeError):
    """The receiver is not in a state that allows the requested operation."""


def check_length(name: str, actual: int, expected: int) -> None:
    if actual != expected:
        raise DimensionMismatchError(
            f"{name} has length {actual} but {expected} was expected"
        )


def check_shape(name: str, actual: tuple, expected: tuple) -> None:
    if tuple(actual) != tuple(expected):
        raise DimensionMismatchError(
            f"{name} has shape {tuple(actual)} but {tuple(expected)} was expected"
        )


__all__ = [
    "BackpropNetsError",
    "DimensionMismatchError",
    "ConfigurationAccessError",
    "OperationNotPermittedError",
    "check_length",
    "check_shape",
]
