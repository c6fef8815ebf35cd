"""Exception types raised by dirzip.

Filesystem failures are not wrapped: they surface as the built-in OSError
family exactly as the operating system reported them.
"""


class DirzipError(Exception):
    """Base class for errors that abort a job."""


class ConflictError(DirzipError):
    """An output path collides with something that cannot be overwritten."""

    def __init__(self, path, message: str | None = None):
        self.path = path
        super().__init__(message or f"cannot create file {path}")


class EncodingError(DirzipError):
    """A filename could not be transcoded into the target charset."""

    def __init__(self, name: str, charset: str, reason: str):
        self.name = name
        self.charset = charset
        if name:
            message = f"cannot encode {name!r} as {charset}: {reason}"
        else:
            message = f"{reason}: {charset}"
        super().__init__(message)


class ConfigError(DirzipError):
    """The configuration or a target argument is unusable."""
