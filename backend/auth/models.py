from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, alias="newPassword")


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: str
    role: str = "user"
    name: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    profile_image: str | None = Field(default=None, alias="profileImage")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class ProfileResponse(BaseModel):
    message: str
    user: UserOut


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserOut
    changes: list[str] = Field(default_factory=list)
