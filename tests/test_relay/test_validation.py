"""
Tests for request validation.

These tests verify that each route's required fields are checked, including
nested partner fields, before any model is built.
"""

import pytest

from relay.validation import (
    CONTACT_FIELDS_MESSAGE,
    PARTNER_FIELDS,
    PARTNER_FIELDS_MESSAGE,
    first_missing,
    lookup,
    validate_abandoned_match,
    validate_contact_message,
    validate_match_request,
    validate_order_request,
    validate_payment_verification,
    validate_service_request,
)
from shared.errors import ValidationError


class TestLookup:

    def test_nested_path(self, match_payload):
        assert lookup(match_payload, "formData.partner2.name") == "Meera"

    def test_missing_step_returns_none(self):
        assert lookup({"formData": {}}, "formData.partner1.name") is None
        assert lookup({"formData": "oops"}, "formData.partner1.name") is None

    def test_first_missing_in_order(self):
        assert first_missing({"a": "x", "c": ""}, ("a", "b", "c")) == "b"
        assert first_missing({"a": "x"}, ("a",)) is None


class TestServiceRequestValidation:
    """Contact-requiring routes need name, email and phone."""

    def test_valid_request(self, astro_payload):
        request = validate_service_request(astro_payload)
        assert request.name == "Asha Rao"

    @pytest.mark.parametrize("field", ["name", "email", "phone"])
    def test_missing_contact_field(self, astro_payload, field):
        del astro_payload[field]

        with pytest.raises(ValidationError) as exc_info:
            validate_service_request(astro_payload)

        assert exc_info.value.message == CONTACT_FIELDS_MESSAGE
        assert exc_info.value.field == field
        assert exc_info.value.http_status == 400

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_contact_field(self, astro_payload, value):
        astro_payload["email"] = value

        with pytest.raises(ValidationError):
            validate_service_request(astro_payload)

    def test_unusable_nested_type(self, astro_payload):
        """A nested object sent as a list is rejected as invalid data."""
        astro_payload["birthDetails"] = ["1990-04-12"]

        with pytest.raises(ValidationError) as exc_info:
            validate_service_request(astro_payload)

        assert exc_info.value.message == "Invalid request data"
        assert exc_info.value.field == "birthDetails"


class TestMatchValidation:
    """The match route needs every mandatory field of both partners."""

    def test_valid_request(self, match_payload):
        request = validate_match_request(match_payload)
        assert request.form_data.partner2.name == "Meera"

    @pytest.mark.parametrize("path", PARTNER_FIELDS)
    def test_each_partner_field_is_required(self, match_payload, path):
        _, partner, field = path.split(".")
        del match_payload["formData"][partner][field]

        with pytest.raises(ValidationError) as exc_info:
            validate_match_request(match_payload)

        assert exc_info.value.message == PARTNER_FIELDS_MESSAGE
        assert exc_info.value.field == path

    def test_missing_form_data(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_match_request({"customerEmail": "a@x.com"})

        assert exc_info.value.field == "formData.partner1.name"

    def test_gender_is_optional(self, match_payload):
        del match_payload["formData"]["partner1"]["gender"]
        assert validate_match_request(match_payload).form_data.partner1.gender == "Not specified"


class TestOtherRoutes:

    def test_contact_requires_message(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_contact_message({"name": "Asha", "message": " "})

        assert exc_info.value.message == "Message is required"

    def test_contact_message_only(self):
        assert validate_contact_message({"message": "Hello"}).message == "Hello"

    def test_order_requires_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_order_request({"currency": "INR"})

        assert exc_info.value.message == "Amount is required"

    def test_order_rejects_non_positive_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_order_request({"amount": 0})

        assert exc_info.value.field == "amount"

    def test_verification_requires_all_ids(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payment_verification({
                "razorpay_order_id": "order_1",
                "razorpay_signature": "abc",
            })

        assert exc_info.value.field == "razorpay_payment_id"

    def test_verification_keys_are_snake_case(self):
        verification = validate_payment_verification({
            "razorpay_order_id": "order_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": "abc",
        })

        assert verification.razorpay_payment_id == "pay_1"

    def test_abandoned_match_requires_form_data(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_abandoned_match({"sessionData": {}})

        assert exc_info.value.message == "Form data is required"

    def test_abandoned_match_accepts_partial_form(self):
        request = validate_abandoned_match({"formData": {"partner1": {"name": "Ravi"}}})
        assert request.form_data.partner1.name == "Ravi"
