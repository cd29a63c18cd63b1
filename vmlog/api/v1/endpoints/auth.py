# vmlog/api/v1/endpoints/auth.py - Account registration and JWT session endpoints
from fastapi import APIRouter, Depends, HTTPException, status, Form, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi.util import get_remote_address
from datetime import datetime, timezone
from jose import JWTError

from vmlog.db.database import get_db
from vmlog.auth.dependencies import oauth2_scheme
from vmlog.auth.security import Hasher, create_access_token, create_refresh_token, decode_token
from vmlog.db.crud.user import get_user_by_email, create_user_db
from vmlog.db.crud.token import (
    create_refresh_token_db, get_valid_refresh_token, revoke_refresh_token_db, add_to_blacklist
)
from vmlog.api.v1.schemas.auth import Token, UserCreate, UserLogin
from vmlog.db.models import User
from vmlog.core.config import settings
from vmlog.core.limiter import limiter
from vmlog.core import tracing
from vmlog.exceptions.auth import (
    InvalidCredentialsError, InvalidRefreshTokenError, InactiveUserError, UserAlreadyExistsError
)

router = APIRouter()


async def issue_tokens_and_save_refresh(db: AsyncSession, user: User) -> dict:
    claims = {"sub": user.email, "user_id": user.id}
    access_token = create_access_token(data=claims)
    refresh_token = create_refresh_token(data=claims)

    refresh_expires_at = datetime.fromtimestamp(decode_token(refresh_token)["exp"], tz=timezone.utc)

    try:
        await create_refresh_token_db(db, user.id, refresh_token, refresh_expires_at)
    except Exception as e:
        tracing.error("Failed to save refresh token", email=user.email, user_id=user.id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save refresh token.")

    return {"access_token": access_token, "refresh_token": refresh_token, "token_type": "bearer"}


async def authenticate(db: AsyncSession, username: str, password: str, ip: str) -> User:
    user = await get_user_by_email(db, username)
    if not user or not Hasher.verify_password(password, user.hashed_password):
        tracing.warning("Login failed - invalid credentials", username=username, ip=ip)
        raise InvalidCredentialsError()

    if not user.is_active:
        tracing.warning("Login failed - account inactive", username=username, ip=ip)
        raise InactiveUserError()

    tracing.info("Login successful", email=user.email, user_id=user.id, ip=ip)
    return user


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register_user(request: Request, user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    ip = get_remote_address(request)
    tracing.info("Registration attempt", email=user_in.email, ip=ip)

    if await get_user_by_email(db, user_in.email):
        tracing.warning("Registration failed - user exists", email=user_in.email, ip=ip)
        raise UserAlreadyExistsError()

    user_data = {"email": user_in.email, "hashed_password": Hasher.get_password_hash(user_in.password)}
    if user_in.display_name:
        user_data["display_name"] = user_in.display_name

    try:
        user = await create_user_db(db, user_data)
    except Exception as e:
        tracing.error("Failed to create user", email=user_in.email, ip=ip, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not create user.")

    tracing.info("User registered successfully", email=user.email, user_id=user.id, ip=ip)
    return await issue_tokens_and_save_refresh(db, user)


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_for_access_token(
        request: Request,
        form_data: OAuth2PasswordRequestForm = Depends(),
        db: AsyncSession = Depends(get_db)
):
    user = await authenticate(db, form_data.username, form_data.password, get_remote_address(request))
    return await issue_tokens_and_save_refresh(db, user)


@router.post("/login-json", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_via_json(request: Request, user_login: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate(db, user_login.username, user_login.password, get_remote_address(request))
    return await issue_tokens_and_save_refresh(db, user)


@router.post("/refresh-token", response_model=Token)
@limiter.limit("10/minute")
async def refresh_access_token(request: Request, refresh_token: str = Form(...), db: AsyncSession = Depends(get_db)):
    ip = get_remote_address(request)
    credentials_exception = InvalidRefreshTokenError()

    try:
        payload = decode_token(refresh_token)
    except JWTError as e:
        tracing.warning("Invalid refresh token", ip=ip, error=str(e))
        raise credentials_exception

    if payload.get("type") != "refresh" or payload.get("user_id") is None:
        raise credentials_exception

    token_record = await get_valid_refresh_token(db, refresh_token)
    if not token_record:
        tracing.warning("Refresh token not found or revoked", user_id=payload.get("user_id"), ip=ip)
        raise credentials_exception

    user = await get_user_by_email(db, payload.get("sub"))
    if not user or not user.is_active:
        raise credentials_exception

    await revoke_refresh_token_db(db, token_record)
    tracing.info("Token refresh successful", email=user.email, user_id=user.id, ip=ip)
    return await issue_tokens_and_save_refresh(db, user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
async def logout(request: Request, access_token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)):
    ip = get_remote_address(request)

    try:
        payload = decode_token(access_token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token for logout.")

    jti = payload.get("jti")
    exp = payload.get("exp")
    if jti is None or exp is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token for logout.")

    await add_to_blacklist(db, jti, datetime.fromtimestamp(exp, tz=timezone.utc))
    tracing.info("Logout successful", email=payload.get("sub"), ip=ip)
