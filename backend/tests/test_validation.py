"""
Tests for input validation
"""
import pytest

from keyhub.utils.exceptions import ValidationError
from keyhub.utils.validation import (
    CalendarAuthRequest,
    InvoiceNumberRequest,
    RatingUpdateRequest,
    SetRoleRequest,
    validate_request,
)


class TestSetRoleValidation:
    """Test role assignment request validation"""

    def test_valid_request(self):
        result = validate_request(SetRoleRequest, {"uid": " user-1 ", "role": "pm"})
        assert result == {"uid": "user-1", "role": "pm"}

    @pytest.mark.parametrize("data", [
        {"role": "pm"},
        {"uid": "user-1"},
        {"uid": "   ", "role": "pm"},
        {"uid": "user-1", "role": "superuser"},
        {"uid": "user-1", "role": "Admin"},
    ])
    def test_invalid_requests(self, data):
        with pytest.raises(ValidationError):
            validate_request(SetRoleRequest, data)

    def test_error_lists_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(SetRoleRequest, {})
        errors = exc_info.value.details["validation_errors"]
        assert any(e.startswith("uid") for e in errors)
        assert any(e.startswith("role") for e in errors)


class TestRatingUpdateValidation:
    """Test rating update request validation"""

    def test_partial(self):
        assert validate_request(RatingUpdateRequest, {"speed": 4.5}) == {"speed": 4.5}

    def test_empty_body(self):
        assert validate_request(RatingUpdateRequest, {}) == {}

    @pytest.mark.parametrize("data", [
        {"speed": 5.5},
        {"customer": -1},
        {"overall": 4},
        {"customer": "4"},
        {"internal": True},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            validate_request(RatingUpdateRequest, data)


class TestInvoiceNumberValidation:
    """Test invoice numbering request validation"""

    def test_default_prefix(self):
        assert validate_request(InvoiceNumberRequest, {}) == {"prefix": "INV"}

    @pytest.mark.parametrize("prefix", ["inv", "I", "INVOICE", "IN-V"])
    def test_bad_prefix(self, prefix):
        with pytest.raises(ValidationError):
            validate_request(InvoiceNumberRequest, {"prefix": prefix})


class TestCalendarAuthValidation:
    """Test OAuth start parameters"""

    def test_default_return_url(self):
        assert validate_request(CalendarAuthRequest, {})["returnUrl"] == "/portal/settings"

    @pytest.mark.parametrize("url", ["https://evil.example.com", "//evil.example.com/x", "portal"])
    def test_offsite_return_url_is_rejected(self, url):
        with pytest.raises(ValidationError):
            validate_request(CalendarAuthRequest, {"returnUrl": url})


def test_non_raising_mode():
    is_valid, data, errors = validate_request(SetRoleRequest, {"uid": "u"}, raise_on_error=False)
    assert is_valid is False
    assert data == {}
    assert errors
