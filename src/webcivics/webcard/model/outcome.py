"""Resolution outcome model.

The outcome is the only value that leaves a resolution run. The presentation layer
reads it as a snapshot and never mutates it.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from webcivics.webcard.model.profile import MergedField, Profile, SecondaryProfile
from webcivics.webcard.resolve.errors import ErrorKind, ResolutionException


class OutcomeStatus(str, Enum):
    idle = "idle"
    loading = "loading"
    found = "found"
    failed = "failed"


class ResolutionOutcome(BaseModel):
    """Externally observable result of one resolution run.

    For `found`, `profile` and `merged` are populated and `secondary` or
    `secondary_error` may be. For `failed`, `message` is set, and `error_kind` is too
    unless the run ended on an unexpected error.
    """

    model_config = {"frozen": True}

    status: OutcomeStatus
    domain: Optional[str] = None
    profile: Optional[Profile] = None
    secondary: Optional[SecondaryProfile] = None
    secondary_error: Optional[str] = None
    merged: list[MergedField] = Field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @staticmethod
    def idle() -> "ResolutionOutcome":
        return ResolutionOutcome(status=OutcomeStatus.idle)

    @staticmethod
    def loading(domain: str) -> "ResolutionOutcome":
        return ResolutionOutcome(status=OutcomeStatus.loading, domain=domain)

    @staticmethod
    def found(
        domain: str,
        profile: Profile,
        merged: list[MergedField],
        secondary: Optional[SecondaryProfile] = None,
        secondary_error: Optional[str] = None,
    ) -> "ResolutionOutcome":
        return ResolutionOutcome(
            status=OutcomeStatus.found,
            domain=domain,
            profile=profile,
            secondary=secondary,
            secondary_error=secondary_error,
            merged=merged,
        )

    @staticmethod
    def failed(domain: str, error: ResolutionException) -> "ResolutionOutcome":
        return ResolutionOutcome(
            status=OutcomeStatus.failed,
            domain=domain,
            error_kind=error.kind,
            message=error.message,
        )

    @staticmethod
    def unexpected(domain: str, message: str) -> "ResolutionOutcome":
        """A failed outcome for an error outside the resolution taxonomy."""
        return ResolutionOutcome(
            status=OutcomeStatus.failed,
            domain=domain,
            message=message,
        )
