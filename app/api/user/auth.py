from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.user.schemas import (
    LoginRequest,
    OnboardingRequest,
    SignupRequest,
    TokenResponse,
    UserMe,
)
from app.core.token import CallerDep, create_access_token
from app.infra.db import get_db
from app.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(data={"sub": user.id}),
        user=UserMe.model_validate(user),
    )


# ============ Endpoints ============

@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: AsyncSession = Depends(get_db)):
    """
    General Sign-up
    """
    user = await users.create_user(db, data.email, data.password, data.full_name)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await users.authenticate(db, data.email, data.password)
    return _token_response(user)


@router.get("/me", response_model=UserMe)
async def get_me(caller: CallerDep):
    return caller.user


@router.post("/onboarding", response_model=UserMe)
async def onboard(data: OnboardingRequest, caller: CallerDep, db: AsyncSession = Depends(get_db)):
    """Complete the caller's language profile"""
    return await users.onboard_user(
        db,
        caller.user_id,
        full_name=data.full_name,
        bio=data.bio,
        native_language=data.native_language,
        learning_language=data.learning_language,
        location=data.location,
        profile_pic=data.profile_pic,
    )
