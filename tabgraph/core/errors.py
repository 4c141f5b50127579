"""Exceptions raised by tabgraph operations.

Every class derives from :class:`ValidationError`, itself a ``ValueError``, so
callers that already catch ``ValueError`` keep working.
"""

__all__ = [
    "ValidationError",
    "InvalidGraphError",
    "EmptyTableError",
    "MissingSelectionError",
    "ReservedAttributeError",
    "InvalidArgumentError",
]


class ValidationError(ValueError):
    """Base class for eager validation failures."""


class InvalidGraphError(ValidationError):
    """The graph violates a structural invariant."""


class EmptyTableError(ValidationError):
    """The operation needs rows and the target table has none."""


class MissingSelectionError(ValidationError):
    """No active selection of the required kind."""


class ReservedAttributeError(ValidationError):
    """Attempt to write one of the structural columns (``id``, ``from``, ``to``)."""

    def __init__(self, names):
        self.names = tuple(names)
        listed = ", ".join(f"`{n}`" for n in self.names)
        super().__init__(f"The variables {listed} cannot undergo mutation.")


class InvalidArgumentError(ValidationError):
    """An argument has the wrong shape, type, or refers to an unknown id."""
