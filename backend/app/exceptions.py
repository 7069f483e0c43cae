"""Error taxonomy shared by the repository, service and transport layers.

Every failure the core can produce is one of these, so the transport layer
can render a structured error list instead of a bare string.
"""


class RepositoryError(Exception):
    """Base class for all persistence-layer failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def errors(self) -> list[str]:
        return [self.message]


class NotFound(RepositoryError):
    """No row matches the requested identifier."""


class AmbiguousResult(RepositoryError):
    """A single-result query matched more than one row (non-selective predicate)."""


class ConstraintViolation(RepositoryError):
    """A uniqueness or referential-integrity rule was broken."""


class StoreUnavailable(RepositoryError):
    """The backing store could not be reached. The only retryable failure."""


class PatchRejected(RepositoryError):
    """A partial update failed validation; carries every field-level violation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "Patch rejected")
        self._errors = list(errors)

    @property
    def errors(self) -> list[str]:
        return list(self._errors)
