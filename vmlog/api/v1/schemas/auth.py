# vmlog/api/v1/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
import re

PASSWORD_RULES = (
    (r"[a-z]", "Password must contain at least one lowercase letter."),
    (r"[A-Z]", "Password must contain at least one uppercase letter."),
    (r"\d", "Password must contain at least one digit."),
    (r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>\/?]", "Password must contain at least one special character."),
)


def check_password(password: str, confirmation: str) -> None:
    for pattern, message in PASSWORD_RULES:
        if not re.search(pattern, password):
            raise ValueError(message)
    if password != confirmation:
        raise ValueError("Passwords do not match.")


class Token(BaseModel):
    """
    JWT pair returned by the board authentication endpoints.
    """
    access_token: str
    token_type: str = "bearer"
    refresh_token: Optional[str] = None


class TokenData(BaseModel):
    email: Optional[EmailStr] = None
    user_id: Optional[int] = None


class UserCreate(BaseModel):
    """Sign-up form; the display name is optional and shown on the board"""
    email: EmailStr = Field(..., description="User's email address.")
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: str = Field(
        ...,
        min_length=8,
        max_length=64,
        description="At least 8 characters with upper and lower case letters, a digit and a special character."
    )
    password_confirm: str = Field(..., description="Must match the password field.")

    @model_validator(mode='after')
    def validate_passwords(self) -> 'UserCreate':
        check_password(self.password, self.password_confirm)
        return self


class UserLogin(BaseModel):
    username: EmailStr = Field(..., description="User's email address for login.")
    password: str = Field(..., description="User's password for login.")


class PasswordChange(BaseModel):
    """Change the signed-in user's password; the current one must be supplied"""
    current_password: str = Field(..., description="The password in use now.")
    new_password: str = Field(..., min_length=8, max_length=64)
    new_password_confirm: str = Field(..., description="Must match new_password.")

    @model_validator(mode='after')
    def validate_passwords(self) -> 'PasswordChange':
        check_password(self.new_password, self.new_password_confirm)
        return self
