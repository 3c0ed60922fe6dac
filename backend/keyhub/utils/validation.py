"""
Input validation schemas using Pydantic
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keyhub.config import RATING_MAX, RATING_MIN
from keyhub.services.permissions import parse_role
from keyhub.utils.exceptions import ValidationError


class SetRoleRequest(BaseModel):
    """Validation schema for assigning a role to a user"""
    uid: str = Field(..., min_length=1, max_length=128, description="Target user ID")
    role: str = Field(..., min_length=1, max_length=32, description="New role")

    @field_validator('uid')
    @classmethod
    def validate_uid(cls, v):
        if not v.strip():
            raise ValueError('uid cannot be empty')
        return v.strip()

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if parse_role(v) is None:
            raise ValueError('Invalid role')
        return v


class RegisterUserRequest(BaseModel):
    """Validation schema for the profile created after sign-up"""
    model_config = ConfigDict(extra='forbid')

    displayName: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)

    @field_validator('displayName')
    @classmethod
    def validate_display_name(cls, v):
        if not v.strip():
            raise ValueError('displayName cannot be empty')
        return v.strip()


class RatingUpdateRequest(BaseModel):
    """Validation schema for a partial contractor rating update"""
    model_config = ConfigDict(extra='forbid', strict=True)

    customer: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX)
    speed: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX)
    warranty: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX)
    internal: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX)


class InvoiceNumberRequest(BaseModel):
    """Validation schema for reserving the next invoice number"""
    prefix: str = Field('INV', pattern=r'^[A-Z]{2,5}$', description="Invoice series prefix")
    year: Optional[int] = Field(None, ge=2000, le=2100)


class CalendarAuthRequest(BaseModel):
    """Validation schema for starting the Google Calendar OAuth flow"""
    returnUrl: str = Field('/portal/settings', max_length=500)

    @field_validator('returnUrl')
    @classmethod
    def validate_return_url(cls, v):
        # Only same-site paths, so the callback cannot be used as an open redirect
        if not v.startswith('/') or v.startswith('//'):
            raise ValueError('returnUrl must be a path on this site')
        return v


def validate_request(schema_class: type[BaseModel], data: dict, raise_on_error: bool = True):
    """
    Validate request data against a Pydantic schema.

    Args:
        schema_class: Pydantic model class
        data: Request data to validate
        raise_on_error: If True, raise ValidationError. If False, return (is_valid, errors)

    Returns:
        If raise_on_error=True: Validated data dict
        If raise_on_error=False: (is_valid: bool, validated_data: dict, errors: list)
    """
    try:
        validated = schema_class(**(data or {}))
        if raise_on_error:
            return validated.model_dump(exclude_none=True)
        return True, validated.model_dump(exclude_none=True), []
    except Exception as e:
        if isinstance(e, ValidationError):
            raise
        errors = []
        if hasattr(e, 'errors'):
            for error in e.errors():
                field = '.'.join(str(x) for x in error.get('loc', []))
                message = error.get('msg', 'Validation error')
                errors.append(f"{field}: {message}")

        error_message = '; '.join(errors) if errors else str(e)

        if raise_on_error:
            raise ValidationError(error_message, details={'validation_errors': errors})
        return False, {}, errors
