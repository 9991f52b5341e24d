from __future__ import annotations


class EditorError(Exception):
    """Base class for failures reported to API callers."""

    status = 500

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class NotFound(EditorError):
    """The requested document does not exist."""

    status = 404


class AccessDenied(EditorError):
    """The relative path escapes its document root or is not an allowed file."""

    status = 403


class InvalidPath(EditorError):
    """A field path is malformed or addresses something that is not a container."""

    status = 400


class ValidationFailure(EditorError):
    """User supplied input (a new page name, a number field) is not usable."""

    status = 400


class ParseFailure(EditorError):
    """Stored YAML could not be decoded.

    Front matter recovers from this with an empty mapping; data files surface it.
    """

    status = 422


class BuildFailure(EditorError):
    """The external site build exited unsuccessfully.

    Recorded on the build result and never raised past a completed save.
    """

    status = 500

    def __init__(self, message: str, *, output: str = "", path: str | None = None) -> None:
        super().__init__(message, path=path)
        self.output = output
