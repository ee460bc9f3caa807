"""Requesting provider data model.

This module defines the Provider dataclass attached to every gateway request and
the ProviderRole enumeration of roles recognised by the PMP Gateway.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ProviderRole(Enum):
    """Prescriber and delegate roles accepted by the PMP Gateway."""

    PHYSICIAN = "Physician"
    PHARMACIST = "Pharmacist"
    PHARMACIST_PRESCRIPTIVE = "Pharmacist with prescriptive authority"
    NURSE_PRACTITIONER = "Nurse Practitioner"
    PSYCHOLOGIST_PRESCRIPTIVE = "Psychologist with prescriptive authority"
    OPTOMETRIST_PRESCRIPTIVE = "Optometrist with prescriptive authority"
    NATUROPATHIC_PHYSICIAN_PRESCRIPTIVE = "Naturopathic Physician with prescriptive authority"
    PHYSICIAN_ASSISTANT_PRESCRIPTIVE = "Physician Assistant with prescriptive authority"
    MEDICAL_RESIDENT_PRESCRIPTIVE = "Medical Resident with prescriptive authority"
    MEDICAL_INTERN_PRESCRIPTIVE = "Medical Intern with prescriptive authority"
    DENTIST = "Dentist"
    MEDICAL_RESIDENT_NON_INDEPENDENT = "Medical Resident with no independent prescriptive authority"
    MEDICAL_INTERN_NON_INDEPENDENT = "Medical Intern with no independent prescriptive authority"
    PRESCRIBER_DELEGATE_LICENSED = "Prescriber Delegate - Licensed"
    PRESCRIBER_DELEGATE_UNLICENSED = "Prescriber Delegate - Unlicensed"
    PHARMACIST_DELEGATE_LICENSED = "Pharmacist's Delegate - Licensed"
    PHARMACIST_DELEGATE_UNLICENSED = "Pharmacist's Delegate - Unlicensed"
    OTHER_NON_PRESCRIBER = "Other - Non Prescriber"
    OTHER_PRESCRIBER = "Other Prescriber"

    @classmethod
    def from_value(cls, value: str) -> "ProviderRole":
        """Resolve a role from its gateway string, ignoring case.
        
        Args:
            value: Role string such as "Physician" or "nurse practitioner"
            
        Returns:
            Matching ProviderRole member
            
        Raises:
            ValueError: If value is not a recognised role
            
        Example:
            >>> ProviderRole.from_value("prescriber delegate - licensed")
            <ProviderRole.PRESCRIBER_DELEGATE_LICENSED: 'Prescriber Delegate - Licensed'>
        """
        normalized = value.strip().lower()
        for role in cls:
            if role.value.lower() == normalized:
                return role
        raise ValueError(
            f"Invalid provider role '{value}'. "
            f"Must be one of: {', '.join(role.value for role in cls)}"
        )


@dataclass(frozen=True)
class Provider:
    """Clinician or delegate requesting a PMP report.

    The remote schema requires at least one identifier (DEA number, NPI number,
    or professional license). Identifier contents are not validated locally;
    the gateway rejects bad values with a BadRequest response.

    Attributes:
        first_name: Provider's first name
        last_name: Provider's last name
        role: Gateway role (ProviderRole or its string value)
        location_name: Name of the requesting location
        state_code: Two-letter state code of the requesting location
        dea_number: DEA registration number (optional)
        npi_number: NPI number (optional)
        professional_license: Professional license number (optional)
        professional_license_type: Professional license type code (optional)
    """

    first_name: str
    last_name: str
    role: Union[ProviderRole, str]
    location_name: str
    state_code: str
    dea_number: Optional[str] = None
    npi_number: Optional[str] = None
    professional_license: Optional[str] = None
    professional_license_type: Optional[str] = None

    @property
    def role_value(self) -> str:
        """Role as the string sent to the gateway."""
        if isinstance(self.role, ProviderRole):
            return self.role.value
        return self.role
