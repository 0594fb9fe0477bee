"""
Base Extractor

Abstract base class for data extractors.
"""

from abc import ABC

from core.logging import get_logger
from core.resilience import ResilientHTTPClient


class BaseExtractor(ABC):
    """
    Abstract base class for data extractors.

    Extractors are responsible for fetching data from external sources
    through a ResilientHTTPClient. They raise on failure (NetworkError,
    RateLimitError, ClientError, ...) and leave the decision to skip or
    abort to the caller. Transformation is done by transformers.
    """

    def __init__(self, name: str, http_client: ResilientHTTPClient):
        """
        Initialize extractor.

        Args:
            name: Extractor name for logging
            http_client: Client carrying the retry, pacing and circuit policy
        """
        self.name = name
        self.http = http_client
        self.log = get_logger(f"extractor.{name}")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
