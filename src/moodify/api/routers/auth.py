"""Registration, login and logout."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from moodify.api.dependencies import get_app_settings, get_auth_service, read_json_body
from moodify.api.envelopes import preflight_response
from moodify.api.schemas.responses import AuthUserSchema
from moodify.application.services.auth_service import AuthService
from moodify.application.validation import LoginRequest, RegisterRequest, validate_payload
from moodify.config import Settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Create an account. 409 if the email is taken."""
    data = validate_payload(RegisterRequest, await read_json_body(request))
    user = await service.register(data.name, data.email, data.password)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "user": AuthUserSchema.from_entity(user).to_json(),
            "message": "User created successfully",
        },
    )


# Hey future me - login hands out BOTH credentials: a bearer JWT in the body (API clients) and a
# session cookie (browsers). Either one alone is enough for the resolver chain.
@router.post("/login")
async def login(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Check credentials, return a bearer token and set the session cookie."""
    data = validate_payload(LoginRequest, await read_json_body(request))
    result = await service.login(data.email, data.password)

    response = JSONResponse(
        content={
            "user": AuthUserSchema.from_entity(result.user).to_json(),
            "token": result.access_token,
            "message": "Login successful",
        }
    )
    response.set_cookie(
        key=settings.auth.session_cookie_name,
        value=result.session.session_token,
        max_age=settings.auth.session_max_age,
        httponly=True,
        secure=settings.auth.cookie_secure,
        samesite="lax",
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Drop the cookie session (if any) and clear the cookie."""
    cookie_name = settings.auth.session_cookie_name
    await service.logout(request.cookies.get(cookie_name))
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(cookie_name)
    return response


@router.options("/register")
@router.options("/login")
@router.options("/logout")
async def auth_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
