"""Commit-reveal registration of ENS ``.eth`` names."""

from .errors import RegistrarError
from .models import (
    CommitmentRecord,
    PriceQuote,
    RegistrationRequest,
    RegistrationResult,
    RegistrationStage,
    SECONDS_PER_YEAR,
)
from .names import normalize_name
from .orchestrator import CommitRevealOrchestrator
from .service import RegistrarService

__all__ = [
    "CommitRevealOrchestrator",
    "CommitmentRecord",
    "PriceQuote",
    "RegistrarError",
    "RegistrarService",
    "RegistrationRequest",
    "RegistrationResult",
    "RegistrationStage",
    "SECONDS_PER_YEAR",
    "normalize_name",
]
