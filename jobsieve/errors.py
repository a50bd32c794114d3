"""Exception types raised by the scrape and scoring pipeline."""
from __future__ import annotations


class JobSieveError(Exception):
    """Base class for errors raised by jobsieve itself."""


class UnknownSourceError(JobSieveError, KeyError):
    def __init__(self, source: str, available: list[str]) -> None:
        self.source = source
        self.available = available
        super().__init__(f"Unknown source: {source}. Available: {', '.join(available)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.args[0]


class MissingCredentialError(JobSieveError):
    """A required API key is not configured."""


class JudgeResponseError(JobSieveError):
    """The judge answered, but not with a usable score payload."""
