from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.schemas.profile import ProfileBrief


class NotificationRead(BaseModel):
    id: int
    title: str
    message: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChatMessageCreate(BaseModel):
    content_text: str | None = Field(default=None, max_length=5000)
    content_image_urls: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_not_empty(self) -> "ChatMessageCreate":
        """Нужен текст или хотя бы одна картинка."""
        if not (self.content_text or "").strip() and not self.content_image_urls:
            raise ValueError("Сообщение не может быть пустым")
        return self


class ReactionToggle(BaseModel):
    emoji: str = Field(..., min_length=1, max_length=16)


class ChatMessageRead(BaseModel):
    id: int
    user_id: int
    content_text: str | None
    content_image_urls: list[str]
    reactions: dict[str, list[int]]
    profile: ProfileBrief | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class MomentCreate(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=512)
    caption: str | None = Field(default=None, max_length=2000)
    intel: str | None = Field(default=None, max_length=2000)


class MomentRead(BaseModel):
    id: int
    user_id: int
    image_url: str
    caption: str | None
    intel: str | None
    created_at: datetime

    class Config:
        from_attributes = True
