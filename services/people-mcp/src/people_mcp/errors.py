"""
Error taxonomy for the people tools.

Every failure the dispatcher knows how to report derives from
`PeopleError`; its string form is the message placed in the error
envelope returned to the calling agent.
"""


class PeopleError(Exception):
    """Base class for all reportable tool failures."""


class ValidationError(PeopleError):
    """An argument is missing or fails its declared constraint."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid argument '{field}': {reason}")


class NotFoundError(PeopleError):
    def __init__(self, message: str = "Person not found"):
        super().__init__(message)


class ConflictError(PeopleError):
    """A uniqueness constraint was violated."""

    def __init__(self, field: str = "email"):
        self.field = field
        super().__init__(f"A person with this {field} already exists")


class NoFieldsError(PeopleError):
    def __init__(self):
        super().__init__("No fields to update")


class UnknownToolError(PeopleError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class StoreUnavailableError(PeopleError):
    """The record store failed for infrastructure reasons."""

    def __init__(self, detail: str = ""):
        message = "Record store unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
