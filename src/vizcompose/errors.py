"""
Error and warning kinds raised by the composition algebra.

Every failure is synchronous: an operator either returns a complete new
tree or raises one of these. None of them is worth retrying with the
same inputs; the caller has to restructure the operands.
"""


class SpecError(Exception):
    """Base class for every error raised by vizcompose."""


class CompositionError(SpecError, ValueError):
    """
    Illegal operand pairing for merge (e.g. layer x layer, concat x concat).
    """


class LayeringError(CompositionError):
    """A facet, repeat or concat view was used on either side of `+`."""


class MissingProperty(SpecError, AttributeError):
    """A property name outside the fixed field set of the target record."""

    def __init__(self, name: str, owner: str):
        super().__init__(f"'{name}' is not a property of {owner}")
        self.name = name
        self.owner = owner


class GlobalPropertyConflict(UserWarning):
    """
    Layered documents disagree on a global property.

    Non-fatal. The right operand's value is kept.
    """
