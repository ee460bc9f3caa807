"""Patient data model.

This module defines the Patient dataclass describing the subject of a PMP lookup.
"""

from dataclasses import dataclass
from typing import Optional


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Strip hyphens from a phone number.

    Args:
        phone: Phone number as entered (e.g. "614-555-1994")

    Returns:
        Phone number without hyphens, or the input unchanged if blank

    Example:
        >>> normalize_phone("614-555-1994")
        '6145551994'
    """
    if phone and phone.strip():
        return phone.replace("-", "")
    return phone


@dataclass(frozen=True)
class Patient:
    """Patient identifying details for a PMP Gateway lookup.

    The gateway requires either a zip code or a phone number. That rule is not
    enforced here; a request missing both comes back as a BadRequest outcome.

    Attributes:
        first_name: Patient's first name
        last_name: Patient's last name
        birthdate: Date of birth as YYYY-MM-DD
        sex_code: Sex code (optional)
        street: First street line (optional)
        street2: Additional street line (optional)
        city: City (optional)
        state_code: Two-letter state code (optional)
        zip_code: Zip code (optional)
        phone: Phone number, hyphens removed at construction (optional)
    """

    first_name: str
    last_name: str
    birthdate: str
    sex_code: Optional[str] = None
    street: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    state_code: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "phone", normalize_phone(self.phone))
