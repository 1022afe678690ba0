# storecast/schemas/auth.py
from pydantic import EmailStr, ConfigDict
from sqlmodel import SQLModel, Field

from storecast.schemas.profile import Role


class RegisterRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: Role = "client"


class SignInRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)
