"""Gateway outcome data models.

Every gateway stage produces exactly one Outcome. The set of variants is closed:
callers dispatch on ``outcome.kind`` (or ``isinstance``) and are expected to
handle every OutcomeKind.

Variant availability per stage:

    ============================== ======= ====== ========
    Variant                        Patient Report Combined
    ============================== ======= ====== ========
    Success                        yes     yes    yes
    BadRequest                     yes     yes    yes
    Unauthorized                   yes     yes    yes
    NotFound                       yes     yes    yes
    InternalServerError            yes     yes    yes
    CouldNotIdentifyUniquePatient  yes     no     yes
    PMPError                       no      no     yes
    Failure                        yes     yes    yes
    ============================== ======= ====== ========
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union


class OutcomeKind(Enum):
    """Tag identifying an Outcome variant."""

    SUCCESS = "SUCCESS"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    COULD_NOT_IDENTIFY_UNIQUE_PATIENT = "COULD_NOT_IDENTIFY_UNIQUE_PATIENT"
    PMP_ERROR = "PMP_ERROR"
    FAILURE = "FAILURE"


class Outcome:
    """Base class of the outcome taxonomy."""

    kind: ClassVar[OutcomeKind]

    @property
    def is_success(self) -> bool:
        """Check if the stage succeeded.
        
        Returns:
            True only for Success
        """
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True)
class Success(Outcome):
    """Stage completed; ``document`` is the parsed XML root or HTML report root."""

    document: Any
    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCESS


@dataclass(frozen=True)
class BadRequest(Outcome):
    """Gateway answered 400 Bad Request."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.BAD_REQUEST


@dataclass(frozen=True)
class Unauthorized(Outcome):
    """Gateway answered 401 Unauthorized."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.UNAUTHORIZED


@dataclass(frozen=True)
class NotFound(Outcome):
    """Gateway answered 404 Not Found."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.NOT_FOUND


@dataclass(frozen=True)
class InternalServerError(Outcome):
    """Gateway answered 500 Internal Server Error."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.INTERNAL_SERVER_ERROR


@dataclass(frozen=True)
class CouldNotIdentifyUniquePatient(Outcome):
    """Gateway answered 200 with a Disallowed node (patient not uniquely matched)."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.COULD_NOT_IDENTIFY_UNIQUE_PATIENT


@dataclass(frozen=True)
class PMPError(Outcome):
    """Patient response carried an Error node and no ViewableReport."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.PMP_ERROR


@dataclass(frozen=True)
class Failure(Outcome):
    """Unexpected status code, unparsable body, or local transport failure."""

    message: str
    kind: ClassVar[OutcomeKind] = OutcomeKind.FAILURE


PatientOutcome = Union[
    Success,
    BadRequest,
    Unauthorized,
    NotFound,
    InternalServerError,
    CouldNotIdentifyUniquePatient,
    Failure,
]

ReportOutcome = Union[
    Success,
    BadRequest,
    Unauthorized,
    NotFound,
    InternalServerError,
    Failure,
]

PatientReportOutcome = Union[
    Success,
    BadRequest,
    Unauthorized,
    NotFound,
    InternalServerError,
    CouldNotIdentifyUniquePatient,
    PMPError,
    Failure,
]

OUTCOME_TYPES: dict[OutcomeKind, type] = {
    OutcomeKind.SUCCESS: Success,
    OutcomeKind.BAD_REQUEST: BadRequest,
    OutcomeKind.UNAUTHORIZED: Unauthorized,
    OutcomeKind.NOT_FOUND: NotFound,
    OutcomeKind.INTERNAL_SERVER_ERROR: InternalServerError,
    OutcomeKind.COULD_NOT_IDENTIFY_UNIQUE_PATIENT: CouldNotIdentifyUniquePatient,
    OutcomeKind.PMP_ERROR: PMPError,
    OutcomeKind.FAILURE: Failure,
}
