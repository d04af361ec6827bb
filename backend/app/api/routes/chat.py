from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.db.session import get_session
from app.models.profile import Profile
from app.schemas.social import ChatMessageCreate, ChatMessageRead, ReactionToggle
from app.services import chat as chat_service

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
)


@router.get("/messages", response_model=list[ChatMessageRead])
async def list_messages(
    limit: int = Query(default=100, ge=1, le=500),
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[ChatMessageRead]:
    messages = await chat_service.get_messages(session, limit=limit)
    return [ChatMessageRead.model_validate(m) for m in messages]


@router.post(
    "/messages",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    payload: ChatMessageCreate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ChatMessageRead:
    message = await chat_service.send_message(
        session,
        current_user.id,
        content_text=payload.content_text,
        content_image_urls=payload.content_image_urls,
    )
    return ChatMessageRead.model_validate(message)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await chat_service.delete_message(session, message_id, current_user)


@router.post("/messages/{message_id}/reactions", response_model=ChatMessageRead)
async def toggle_reaction(
    message_id: int,
    payload: ReactionToggle,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ChatMessageRead:
    """Ставит реакцию, а повторный запрос с тем же emoji её снимает."""
    message = await chat_service.toggle_reaction(
        session, message_id, payload.emoji, current_user.id
    )
    return ChatMessageRead.model_validate(message)
