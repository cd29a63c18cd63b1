# vmlog/exceptions/auth.py
from fastapi import HTTPException, status

class AuthenticationError(HTTPException):
    """Base authentication error"""
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )

class InvalidCredentialsError(AuthenticationError):
    """Invalid username/password"""
    def __init__(self):
        super().__init__(detail="Incorrect username or password")

class InvalidRefreshTokenError(AuthenticationError):
    """Refresh token is malformed, expired, revoked or unknown"""
    def __init__(self):
        super().__init__(detail="Invalid refresh token")

class InactiveUserError(HTTPException):
    """User account is inactive"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

class UserAlreadyExistsError(HTTPException):
    """User already exists"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

class IncorrectPasswordError(HTTPException):
    """Current password supplied for a password change is wrong"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
