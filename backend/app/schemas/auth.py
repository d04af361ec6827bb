from pydantic import BaseModel, Field


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    sub: str | None = None
    role: str | None = None


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=3, max_length=64)
    phone: str = Field(..., min_length=5, max_length=50)
    password: str = Field(..., min_length=6)
    email: str | None = Field(default=None, max_length=255)
    profile_pic_url: str | None = Field(default=None, max_length=512)
