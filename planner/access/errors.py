from __future__ import annotations


class AccessDeniedError(Exception):
    """
    Raised by the throwing guards when the actor may not act on a resource.

    The message never says whether the resource exists: a missing resource and
    an inaccessible one produce the same error.
    """

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)
        self.message = message
