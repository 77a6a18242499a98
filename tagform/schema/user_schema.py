from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, description="At least 8 characters")
    fullName: str = Field(..., min_length=1)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class UserData(BaseModel):
    id: str
    email: str
    name: str
    exp: int
    jti: str | None = None
