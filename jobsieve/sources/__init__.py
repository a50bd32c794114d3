from typing import Callable

from .base import JobSourceBase
from .cryptojobslist import CryptoJobsListSource
from .jobstash import JobStashSource
from .safary import SafarySource
from .web3career import Web3CareerSource

from jobsieve.errors import UnknownSourceError

__all__ = [
    "JobSourceBase", "JobStashSource", "SafarySource", "Web3CareerSource",
    "CryptoJobsListSource", "SOURCES", "get_source",
]

# Insertion order is the order `run_all` visits sources in.
SOURCES: dict[str, Callable[[], JobSourceBase]] = {
    "jobstash": JobStashSource,
    "safary": SafarySource,
    "web3career": Web3CareerSource,
    "cryptojobslist": CryptoJobsListSource,
}


def get_source(name: str, registry: dict[str, Callable[[], JobSourceBase]] | None = None) -> JobSourceBase:
    registry = SOURCES if registry is None else registry
    factory = registry.get(name)
    if factory is None:
        raise UnknownSourceError(name, list(registry))
    return factory()
