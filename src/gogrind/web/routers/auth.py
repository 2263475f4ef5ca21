from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from gogrind.core.modules.auth.models import AUTH_COOKIE_NAME, AuthToken
from gogrind.core.modules.user.models import ProfileUpdate, UserView
from gogrind.web.deps import AppDep, AuthTokenDep, ConfigDep
from gogrind.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class SignupRequest(BaseModel):
    """Account registration request."""

    email: str = Field(..., description="Email address, used as login")
    password: str = Field(..., description="At least 6 characters, no whitespace")
    full_name: str = Field(..., description="Display name")

    model_config = {
        "json_schema_extra": {"examples": [{"email": "ada@example.com", "password": "secret42", "full_name": "Ada"}]}
    }


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class AuthResponse(BaseModel):
    """Authenticated user together with the issued token."""

    user: UserView = Field(..., description="Authenticated user")
    token: str = Field(..., description="JWT for subsequent requests (also set as httpOnly cookie)")


def _set_auth_cookie(response: Response, token: AuthToken, ttl_days: int) -> None:
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=False,  # Set to True in production with HTTPS
        max_age=ttl_days * 24 * 60 * 60,
    )


@router.post(
    "/auth/signup",
    summary="Create account",
    description="Register a new account and log it in.",
    operation_id="signup",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid data or email already registered"},
    },
)
async def signup(req: SignupRequest, app: AppDep, config: ConfigDep, response: Response) -> AuthResponse:
    user, token = await app.signup(req.email, req.password, req.full_name)
    _set_auth_cookie(response, token, config.jwt_ttl_days)
    return AuthResponse(user=user, token=token)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive a JWT.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(req: LoginRequest, app: AppDep, config: ConfigDep, response: Response) -> AuthResponse:
    user, token = await app.login(req.email, req.password)
    _set_auth_cookie(response, token, config.jwt_ttl_days)
    return AuthResponse(user=user, token=token)


@router.post(
    "/auth/logout",
    summary="Log out",
    description="Clear the authentication cookie. Tokens are stateless and stay valid until they expire.",
    operation_id="logout",
    status_code=204,
    responses={204: {"description": "Cookie cleared"}},
)
async def logout(response: Response) -> None:
    response.delete_cookie(AUTH_COOKIE_NAME)


@router.post(
    "/auth/onboarding",
    summary="Complete onboarding",
    description="Fill in the profile and mark the account as onboarded.",
    operation_id="onboard",
    responses={
        200: {"description": "Profile updated"},
        400: {"model": ErrorResponse, "description": "Invalid profile data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def onboard(profile: ProfileUpdate, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.onboard(auth_token, profile)


@router.get(
    "/auth/me",
    summary="Get current user",
    description="Get the profile of the authenticated user.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_current_user(app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.get_current_user(auth_token)
