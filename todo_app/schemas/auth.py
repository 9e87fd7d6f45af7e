from typing import Optional

from pydantic import BaseModel, ConfigDict


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyRequest(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class ResendRequest(BaseModel):
    email: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    token: str
    email: str
    message: str


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class MessageResponse(BaseModel):
    message: str
