"""Models module.

This module provides data models and dataclasses for the application.
"""

from pmp_gateway.models.outcomes import (
    BadRequest,
    CouldNotIdentifyUniquePatient,
    Failure,
    InternalServerError,
    NotFound,
    Outcome,
    OutcomeKind,
    PMPError,
    Success,
    Unauthorized,
)
from pmp_gateway.models.patient import Patient
from pmp_gateway.models.requester import Provider, ProviderRole

__all__ = [
    "Patient",
    "Provider",
    "ProviderRole",
    # Outcome taxonomy
    "Outcome",
    "OutcomeKind",
    "Success",
    "BadRequest",
    "Unauthorized",
    "NotFound",
    "InternalServerError",
    "CouldNotIdentifyUniquePatient",
    "PMPError",
    "Failure",
]
