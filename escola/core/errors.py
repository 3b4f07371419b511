"""Domain errors.

Services raise these; escola.main turns them into JSON responses, so route
handlers don't need to know about status codes for domain failures.
"""


class EscolaError(Exception):
    """Base class for every error the API reports to the client."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(EscolaError):
    status_code = 404


class ConflictError(EscolaError):
    """Unique key already taken (username, email, registration number...)."""

    status_code = 409


class NothingToScheduleError(EscolaError):
    """The class has no teacher/subject assignments, so there is nothing to place.

    Raised before any row is touched.
    """

    status_code = 400


class InvalidScheduleRequestError(EscolaError):
    status_code = 422


class StorageError(EscolaError):
    """Database failure on read, delete or insert. Not retried."""

    status_code = 503
