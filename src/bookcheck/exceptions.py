class BuildError(Exception):
    """
    Exception raised when the build process is unsuccessful.
    """


class MissingInputError(RuntimeError):
    """
    Error raised when asked for a non-existing input
    """


class LanguageUnavailableError(RuntimeError):
    """
    Raised when the tool needed to check or run a language is not installed.
    """


class DocumentError(ValueError):
    """
    Error raised for documents that cannot be read as chapters.
    """
