"""Service-level errors mapped to HTTP responses by the error handler middleware.

Services raise ``ValueError`` for bad input (400). The two classes below cover
the other outcomes routes need to tell apart.
"""


class PourfoliolicError(Exception):
    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


class NotFoundError(PourfoliolicError):
    """The requested row does not exist (404)."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ForbiddenError(PourfoliolicError):
    """The caller exists but may not act on the row (403)."""

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message)
