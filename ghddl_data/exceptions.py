# ghddl_data/exceptions.py

"""
Error taxonomy for the data setup utility.
None of these are recovered locally: they surface as a terminated process.
"""


class FetchError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationMissing(FetchError):
    """Raised when the data directory is not configured or the config file is unusable."""


class NetworkFailure(FetchError):
    """Raised on connection errors, timeouts and non-success HTTP responses."""


class IOFailure(FetchError):
    """Raised when a local directory or file cannot be created or written."""


class ExtractionFailure(FetchError):
    """Raised when an archive is corrupt, unsupported or cannot be unpacked."""
