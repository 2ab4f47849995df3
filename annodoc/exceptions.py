"""Custom exceptions for annodoc."""


class AnnodocError(Exception):
    """Base exception for annodoc operations."""


class ConfigurationError(AnnodocError):
    """Configuration value has the wrong shape."""


class SourceReadError(AnnodocError):
    """Input file could not be read."""

    def __init__(self, path, reason):
        self.path = str(path)
        super().__init__(f"Could not read source file '{self.path}': {reason}")


class DestinationWriteError(AnnodocError):
    """Output file could not be written."""

    def __init__(self, path, reason):
        self.path = str(path)
        super().__init__(f"Could not write help file '{self.path}': {reason}")


class GenerationInProgressError(AnnodocError):
    """Generation was requested while another run is active."""


class EvaluationError(AnnodocError):
    """Snippet of an `@eval` section failed to parse or execute."""
