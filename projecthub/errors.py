"""
projecthub/errors.py

Domain errors raised by the project core.

The core never imports FastAPI; main.py maps these to HTTP responses with
the same {"detail": ...} body HTTPException produces.
"""


class ProjectHubError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ProjectHubError):
    status_code = 404


class ForbiddenError(ProjectHubError):
    status_code = 403


class ConflictError(ProjectHubError):
    status_code = 409
