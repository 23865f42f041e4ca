"""Exceptions for mkly.

Grammar and schema problems in documents are reported as diagnostics, not
raised. These exceptions cover configuration and caller errors only.
"""

from dataclasses import dataclass


class MklyError(Exception):
    """Base exception for all mkly errors."""

    pass


@dataclass
class InvalidInputError(MklyError):
    """Input is not valid for processing.

    Raised when:
    - An explicit origin is not one of web, email or generic
    - Input is not a string
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class KitDefinitionError(MklyError):
    """A kit definition file could not be loaded.

    Attributes:
        message: Description of the error.
        path: File the definition was read from, if any.
    """

    message: str
    path: str | None = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message
