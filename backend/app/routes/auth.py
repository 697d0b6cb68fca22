"""
Notify Backend: Auth Route Handlers
====================================

What:  POST /api/auth/register and POST /api/auth/login.
How:   Thin wrappers around AuthService; both return the access token and the
       public user fields inside the standard envelope.
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import get_auth_service
from app.schemas.auth import AuthPayload, LoginRequest, RegisterRequest
from app.schemas.common import ApiResponse, ErrorResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing fields or phone number taken", "model": ErrorResponse}},
    summary="Register a new account",
)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthPayload]:
    payload = await auth.register(body.phone_number, body.password, body.name)
    return ApiResponse(message="User registered successfully", data=payload)


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in with phone number and password",
)
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthPayload]:
    payload = await auth.login(body.phone_number, body.password)
    return ApiResponse(message="Login successful", data=payload)
