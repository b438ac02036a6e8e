from pydantic import BaseModel, Field

from nextplay import settings


class RegisterIn(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=settings.MIN_PASSWORD_LENGTH)
    consent_accepted: bool = False
    isThirteenOrOlder: bool = False


class LoginIn(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class EmailIn(BaseModel):
    email: str = Field(min_length=1)


class TokenIn(BaseModel):
    token: str = Field(min_length=1)


class ResetPasswordIn(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=settings.MIN_PASSWORD_LENGTH)
