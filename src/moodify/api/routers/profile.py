"""User profile and account deletion."""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from moodify.api.dependencies import (
    get_app_settings,
    get_identity,
    get_profile_service,
    read_json_body,
)
from moodify.api.envelopes import isoformat, preflight_response
from moodify.api.schemas.responses import ProfileSchema
from moodify.application.services.profile_service import ProfileService
from moodify.application.validation import (
    DeleteAccountRequest,
    UpdateProfileRequest,
    validate_payload,
)
from moodify.config import Settings
from moodify.domain.entities import Identity, utc_now

router = APIRouter(prefix="/user", tags=["profile"])


@router.get("/profile")
async def get_profile(
    identity: Identity = Depends(get_identity),
    service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    """The caller's profile."""
    profile = await service.get_profile(identity.user_id)
    return JSONResponse(content={"user": ProfileSchema.from_profile(profile).to_json()})


@router.put("/profile")
async def update_profile(
    request: Request,
    identity: Identity = Depends(get_identity),
    service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    """Update name, email, bio and favourite genres."""
    data = validate_payload(UpdateProfileRequest, await read_json_body(request))
    profile = await service.update_profile(
        identity.user_id,
        name=data.name,
        email=data.email,
        bio=data.bio,
        favorite_genres=data.favorite_genres,
    )
    return JSONResponse(
        content={
            "message": "Profile updated successfully",
            "user": ProfileSchema.from_profile(profile).to_json(),
        }
    )


@router.delete("/profile")
async def delete_account(
    request: Request,
    identity: Identity = Depends(get_identity),
    service: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Permanently delete the caller's account and everything it owns."""
    data = validate_payload(DeleteAccountRequest, await read_json_body(request))
    await service.delete_account(identity.user_id, data.confirm_email, data.confirm_password)

    response = JSONResponse(
        content={
            "success": True,
            "message": "Account permanently deleted",
            "deletedAt": isoformat(utc_now()),
        }
    )
    response.delete_cookie(settings.auth.session_cookie_name)
    return response


@router.options("/profile")
async def profile_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
