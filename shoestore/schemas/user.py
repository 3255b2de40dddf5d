from pydantic import BaseModel, EmailStr, Field


class RegisterSchema(BaseModel):
    firstName: str
    lastName: str
    email: EmailStr
    phone: str | None = None
    password: str = Field(min_length=6)


class LoginSchema(BaseModel):
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in_minutes: int
    isAdmin: bool = False
