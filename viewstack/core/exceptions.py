"""Exception types raised by viewstack."""


class ViewStackError(Exception):
    """Base class for all viewstack errors."""


class InvalidArgumentError(ViewStackError, ValueError):
    """Raised when options, attributes or add() input have the wrong shape."""


class InvalidElementError(ViewStackError, LookupError):
    """Raised when a named element cannot be found or a class is not an Element."""


class DomainError(ViewStackError, RuntimeError):
    """Raised by render helpers when an element cannot be rendered."""
