"""
Exception types shared by the parsing and assembly layers.
"""


class DocbinderError(Exception):
    """Base class for all job errors."""
    pass


class UsageError(DocbinderError):
    """Bad or missing flag argument, unknown flag or format keyword. Always fatal."""

    def __init__(self, message: str, arg: str | None = None):
        super().__init__(message)
        self.arg = arg


class FormatError(DocbinderError):
    """Raised when a book script has a bad or missing header."""
    pass


class NotFoundError(DocbinderError):
    """A file or URL could not be resolved or opened."""

    def __init__(self, message: str, name: str = ''):
        super().__init__(message)
        self.name = name


class ConfigurationError(DocbinderError):
    """The environment lacks a variable the current mode requires."""
    pass
