from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from app.db.guards import empty_on_missing_schema, reload, write_guard
from app.loader import APP_LOGGER
from app.models.chat_message import ChatMessage
from app.models.profile import Profile, UserRole
from app.services.votes import Reactions


@empty_on_missing_schema("chat.list")
async def get_messages(session: AsyncSession, limit: int = 100) -> list[ChatMessage]:
    """Последние сообщения в хронологическом порядке."""
    stmt = (
        select(ChatMessage)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(reversed(result.scalars().all()))


async def send_message(
    session: AsyncSession,
    user_id: int,
    content_text: str | None = None,
    content_image_urls: list[str] | None = None,
) -> ChatMessage:
    text = (content_text or "").strip() or None
    images = [url for url in (content_image_urls or []) if url]
    if text is None and not images:
        raise ValidationFailedError("Сообщение не может быть пустым")

    message = ChatMessage(
        user_id=user_id,
        content_text=text,
        content_image_urls=images,
        reactions={},
    )
    async with write_guard(session, "chat.send"):
        session.add(message)
        await session.commit()
    return await reload(session, ChatMessage, message.id)


async def delete_message(session: AsyncSession, message_id: int, actor: Profile) -> None:
    message = await session.get(ChatMessage, message_id)
    if message is None:
        raise NotFoundError("Сообщение не найдено")
    if actor.role != UserRole.admin and message.user_id != actor.id:
        raise PermissionDeniedError("Удалять можно только свои сообщения")

    async with write_guard(session, "chat.delete"):
        await session.delete(message)
        await session.commit()
    APP_LOGGER.info("[chat.delete] message_id=%s by=%s", message_id, actor.id)


async def toggle_reaction(
    session: AsyncSession,
    message_id: int,
    emoji: str,
    user_id: int,
) -> ChatMessage:
    """Ставит или снимает реакцию пользователя на сообщение."""
    message = await session.get(ChatMessage, message_id)
    if message is None:
        raise NotFoundError("Сообщение не найдено")

    reactions = Reactions(message.reactions)
    reactions.toggle(emoji, user_id)

    async with write_guard(session, "chat.react"):
        message.reactions = reactions.to_dict()
        session.add(message)
        await session.commit()
    return await reload(session, ChatMessage, message_id)
