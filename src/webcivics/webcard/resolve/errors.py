"""Resolution error taxonomy.

Every failure a resolution stage can produce is a `ResolutionException` tagged with an
`ErrorKind`. Messages carry a stable error code so they can be searched in logs.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of resolution failure.

    All kinds except `SecondaryError` end the run they occur in.
    """

    InvalidDomain = "InvalidDomain"
    DnsFailure = "DnsFailure"
    RecordMissing = "RecordMissing"
    PointerNotFound = "PointerNotFound"
    PointerUnrecognized = "PointerUnrecognized"
    FetchFailure = "FetchFailure"
    GraphParseError = "GraphParseError"
    SecondaryError = "SecondaryError"


class ResolutionException(Exception):
    """
    Exception raised when a resolution stage fails.

    Use the static constructors rather than building instances directly so that the
    kind, error code and message stay consistent.

    Attributes:
        kind: The failure kind
        message: Human readable message, including the error code
        status: HTTP status of the failed response, for fetch failures
    """

    def __init__(
        self, kind: ErrorKind, message: str, status: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    @staticmethod
    def invalid_domain(domain: str) -> "ResolutionException":
        """The input is not a hostname."""
        return ResolutionException(
            ErrorKind.InvalidDomain,
            f"error-resolve-1000 Invalid domain: {domain!r}",
        )

    @staticmethod
    def dns_failure(reason: str) -> "ResolutionException":
        """The DNS query errored or reported a non-success status."""
        return ResolutionException(
            ErrorKind.DnsFailure,
            f"error-resolve-1001 DNS query failed: {reason}",
        )

    @staticmethod
    def record_missing(lookup_name: str) -> "ResolutionException":
        """The DNS query succeeded but returned no TXT answer."""
        return ResolutionException(
            ErrorKind.RecordMissing,
            f"error-resolve-1002 No TXT record found for {lookup_name}",
        )

    @staticmethod
    def pointer_not_found() -> "ResolutionException":
        """The TXT record does not contain `adp:signer <URI>`."""
        return ResolutionException(
            ErrorKind.PointerNotFound,
            "error-resolve-1003 Could not find a valid adp:signer in the TXT record",
        )

    @staticmethod
    def pointer_unrecognized(uri: str) -> "ResolutionException":
        """The signer URI does not contain an IPFS CID."""
        return ResolutionException(
            ErrorKind.PointerUnrecognized,
            f"error-resolve-1004 Could not extract a valid IPFS CID from {uri}",
        )

    @staticmethod
    def fetch_failure(
        url: str, status: Optional[int], reason: str = ""
    ) -> "ResolutionException":
        """The GET failed at the network level or returned a non-2xx status."""
        detail = f"status: {status}" if status is not None else "network error"
        if reason:
            detail = f"{detail}, {reason}"
        return ResolutionException(
            ErrorKind.FetchFailure,
            f"error-resolve-1005 Failed to fetch {url} ({detail})",
            status=status,
        )

    @staticmethod
    def graph_parse_error(reason: str) -> "ResolutionException":
        """The document could not be parsed into a graph."""
        return ResolutionException(
            ErrorKind.GraphParseError,
            f"error-resolve-1006 RDF parsing error: {reason}",
        )

    @staticmethod
    def secondary_error(reason: str) -> "ResolutionException":
        """The WebID document could not be resolved."""
        return ResolutionException(
            ErrorKind.SecondaryError,
            f"error-resolve-1007 Failed to fetch WebID data: {reason}",
        )
