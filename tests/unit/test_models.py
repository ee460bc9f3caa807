"""Unit tests for data models."""

import dataclasses

import pytest

from pmp_gateway.models.outcomes import (
    OUTCOME_TYPES,
    BadRequest,
    CouldNotIdentifyUniquePatient,
    Failure,
    InternalServerError,
    NotFound,
    OutcomeKind,
    PMPError,
    Success,
    Unauthorized,
)
from pmp_gateway.models.patient import Patient, normalize_phone
from pmp_gateway.models.requester import Provider, ProviderRole


class TestProviderRole:
    """Test cases for ProviderRole."""

    def test_nineteen_roles(self):
        """Test every gateway role is represented."""
        assert len(ProviderRole) == 19

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Physician", ProviderRole.PHYSICIAN),
            ("nurse practitioner", ProviderRole.NURSE_PRACTITIONER),
            ("  Pharmacist's Delegate - Unlicensed ", ProviderRole.PHARMACIST_DELEGATE_UNLICENSED),
            ("OTHER PRESCRIBER", ProviderRole.OTHER_PRESCRIBER),
        ],
    )
    def test_from_value(self, value, expected):
        """Test roles resolve case-insensitively."""
        assert ProviderRole.from_value(value) is expected

    def test_from_value_unknown_role(self):
        """Test unknown roles raise ValueError listing valid roles."""
        # Act & Assert
        with pytest.raises(ValueError) as exc_info:
            ProviderRole.from_value("Veterinarian")

        assert "Invalid provider role" in str(exc_info.value)
        assert "Physician" in str(exc_info.value)


class TestProvider:
    """Test cases for Provider."""

    def test_role_value_from_enum(self, sample_provider):
        """Test role_value returns the gateway string for an enum role."""
        assert sample_provider.role_value == "Physician"

    def test_role_value_from_string(self):
        """Test role_value passes a string role through."""
        # Arrange
        provider = Provider(
            first_name="A",
            last_name="B",
            role="Dentist",
            location_name="Clinic",
            state_code="OH",
        )

        # Act & Assert
        assert provider.role_value == "Dentist"

    def test_immutable(self, sample_provider):
        """Test providers cannot be modified after construction."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_provider.first_name = "Other"


class TestPatient:
    """Test cases for Patient."""

    def test_phone_normalized_on_construction(self):
        """Test hyphens are stripped from the phone number."""
        # Act
        patient = Patient(
            first_name="Jane", last_name="Doe", birthdate="1970-07-01", phone="614-555-1994"
        )

        # Assert
        assert patient.phone == "6145551994"

    @pytest.mark.parametrize("phone", [None, "", "   "])
    def test_blank_phone_unchanged(self, phone):
        """Test blank phone values are left as given."""
        assert normalize_phone(phone) == phone

    def test_optional_fields_default_to_none(self):
        """Test only name and birthdate are required."""
        # Act
        patient = Patient(first_name="Jane", last_name="Doe", birthdate="1970-07-01")

        # Assert
        assert patient.state_code is None
        assert patient.zip_code is None
        assert patient.phone is None


class TestOutcomes:
    """Test cases for the outcome taxonomy."""

    def test_every_kind_has_a_type(self):
        """Test the outcome table covers every kind exactly once."""
        # Assert
        assert set(OUTCOME_TYPES) == set(OutcomeKind)
        for kind, outcome_type in OUTCOME_TYPES.items():
            assert outcome_type.kind is kind

    def test_only_success_is_success(self):
        """Test is_success is True only for Success."""
        # Arrange
        failures = [
            BadRequest("x"),
            Unauthorized("x"),
            NotFound("x"),
            InternalServerError("x"),
            CouldNotIdentifyUniquePatient("x"),
            PMPError("x"),
            Failure("x"),
        ]

        # Assert
        assert Success(document=None).is_success
        assert not any(outcome.is_success for outcome in failures)

    def test_equality_by_variant_and_message(self):
        """Test outcomes compare by type and message."""
        assert BadRequest("A - B") == BadRequest("A - B")
        assert BadRequest("A") != Failure("A")
