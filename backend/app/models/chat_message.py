from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.profile import Profile


class ChatMessage(Base):
    """Сообщение общего чата."""

    __tablename__ = "chat_message"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile: Mapped[Profile] = relationship(lazy="selectin")

    content_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    # emoji -> список id отреагировавших
    reactions: Mapped[dict[str, list[int]]] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )
