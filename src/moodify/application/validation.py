"""Request body schemas and validation.

Every JSON body goes through ``validate_payload``. It reports ALL violated
fields at once as ``{"field": "<dotted.path>", "message": "<text>"}`` records
and raises the domain ValidationError, which the API maps to 400
``{"message": "Invalid input data", "errors": [...]}``.
"""

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from moodify.domain.exceptions import ValidationError
from moodify.domain.value_objects import Emotion

ModelT = TypeVar("ModelT", bound=BaseModel)

# Good enough for "looks like an address", real verification would be a confirmation mail
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Confidence = Annotated[StrictFloat, Field(ge=0, le=1)]
EmailStr = Annotated[StrictStr, Field(pattern=EMAIL_PATTERN, max_length=255)]


class _RequestModel(BaseModel):
    # unknown fields are dropped, not rejected
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserPreferencesInput(_RequestModel):
    """Optional tuning hints sent with a recommendation request."""

    genres: list[StrictStr] | None = None
    exclude_explicit: StrictBool = Field(default=False, alias="excludeExplicit")


# Hey future me - limit and confidence are STRICT on purpose. "20" (a string) or true (a bool) are
# client bugs, not something to coerce. Strict floats still accept JSON integers, so confidence=1 works.
class RecommendationRequest(_RequestModel):
    """Body of POST /api/music/recommendations."""

    emotion: Emotion
    confidence: Confidence | None = None
    limit: Annotated[StrictInt, Field(ge=1, le=50)] = 20
    user_preferences: UserPreferencesInput | None = Field(default=None, alias="userPreferences")


class RegisterRequest(_RequestModel):
    """Body of POST /api/auth/register."""

    name: Annotated[StrictStr, Field(min_length=2, max_length=50)]
    email: EmailStr
    password: Annotated[StrictStr, Field(min_length=8, max_length=128)]


class LoginRequest(_RequestModel):
    """Body of POST /api/auth/login."""

    email: EmailStr
    password: Annotated[StrictStr, Field(min_length=1)]


class EmotionAnalysisRequest(_RequestModel):
    """Body of POST /api/emotions."""

    emotion: Emotion
    confidence: Confidence
    image_url: StrictStr | None = Field(default=None, alias="imageUrl")
    metadata: dict[str, Any] | None = None


class UpdateProfileRequest(_RequestModel):
    """Body of PUT /api/user/profile."""

    name: Annotated[StrictStr, Field(min_length=2, max_length=50)]
    email: EmailStr
    bio: Annotated[StrictStr, Field(max_length=200)] | None = None
    favorite_genres: list[StrictStr] | None = Field(default=None, alias="favoriteGenres")


class DeleteAccountRequest(_RequestModel):
    """Body of DELETE /api/user/profile."""

    confirm_email: Annotated[StrictStr, Field(min_length=1)] = Field(alias="confirmEmail")
    confirm_password: Annotated[StrictStr, Field(min_length=1)] = Field(alias="confirmPassword")


def format_errors(
    errors: Iterable[Mapping[str, Any]], skip_prefixes: tuple[str, ...] = ()
) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` records.

    Args:
        errors: ``exc.errors()`` of a pydantic or FastAPI validation error
        skip_prefixes: Leading loc segments to drop (FastAPI prefixes "body", "query")
    """
    formatted: list[dict[str, str]] = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in skip_prefixes:
            loc = loc[1:]
        formatted.append(
            {
                "field": ".".join(str(part) for part in loc),
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return formatted


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a decoded JSON body against ``model``.

    Raises:
        ValidationError: Body is not a JSON object, or any field is invalid
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            errors=[{"field": "", "message": "Request body must be a JSON object"}]
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        # locs use the aliases, so paths match what the client sent (userPreferences.genres.0)
        raise ValidationError(errors=format_errors(e.errors())) from e


def validate_recommendation_request(payload: Any) -> RecommendationRequest:
    """Validate the body of a recommendation request."""
    return validate_payload(RecommendationRequest, payload)


__all__ = [
    "DeleteAccountRequest",
    "EmotionAnalysisRequest",
    "LoginRequest",
    "RecommendationRequest",
    "RegisterRequest",
    "UpdateProfileRequest",
    "UserPreferencesInput",
    "format_errors",
    "validate_payload",
    "validate_recommendation_request",
]
