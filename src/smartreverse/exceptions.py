"""Error hierarchy for SmartReverse.

Every error derives from :class:`ReverseError` and from the built-in exception
raised for the same situation elsewhere in the package, so ``except
ValueError`` / ``except LookupError`` blocks keep working.

None of these errors is transient: they flag configuration mistakes made
while declaring routes or calling the resolver, and are never retried.
"""

from __future__ import annotations

__all__ = [
    "ReverseError",
    "MissingArgumentError",
    "DuplicateNameError",
    "UnknownRouteError",
    "UnboundPathError",
    "AlreadyBoundError",
    "RegistryFrozenError",
    "TemplateError",
    "TemplateSyntaxError",
    "MissingParameterError",
    "InvalidParameterError",
]


class ReverseError(Exception):
    """Base class for every SmartReverse error."""


class MissingArgumentError(ReverseError, ValueError):
    """A required registration argument was omitted."""


class DuplicateNameError(ReverseError, ValueError):
    """A route name is already registered."""


class UnknownRouteError(ReverseError, LookupError):
    """No route is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f'Route with name "{name}" not defined')
        self.name = name


class UnboundPathError(ReverseError, ValueError):
    """A route in the mount chain never received its path segment."""


class AlreadyBoundError(ReverseError, ValueError):
    """A route path segment was assigned twice."""


class RegistryFrozenError(ReverseError, RuntimeError):
    """Registration attempted after the registry was finalized."""


class TemplateError(ReverseError, ValueError):
    """Base class for path template failures."""


class TemplateSyntaxError(TemplateError):
    """The path template is malformed."""


class MissingParameterError(TemplateError):
    """A parameter required by the template has no value."""

    def __init__(self, name: object):
        super().__init__(f'Expected "{name}" to be defined')
        self.name = name


class InvalidParameterError(TemplateError):
    """A parameter value does not satisfy the template."""
