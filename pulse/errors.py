"""Domain errors raised by the goal services.

Both subclass ValueError so callers that only care about bad input can keep
catching ValueError; routers map them to 404 and 400 respectively.
"""


class NotFoundError(ValueError):
    """A goal, log or parent goal id did not resolve."""


class ValidationError(ValueError):
    """Caller input was missing or inconsistent."""
