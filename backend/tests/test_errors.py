import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.errors import SchemaMissingError
from app.models.payment import PaymentStatus
from app.services import invitations as invitation_service
from app.services import notifications as notification_service
from app.services import payments as payment_service
from app.services import selections as selection_service


@pytest.fixture
async def bare_session(tmp_path):
    # база без таблиц: окружение, где миграции не применены
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bare.db'}",
        poolclass=NullPool,
    )
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


# ----------------------
# 🔹 Missing schema
# ----------------------
async def test_list_readers_return_empty_without_schema(bare_session):
    assert await payment_service.get_payments(bare_session, 1) == []
    assert await invitation_service.get_invitations(bare_session, 1) == []
    assert await selection_service.get_user_selections(bare_session, 1, 1) == []
    assert await notification_service.get_notifications(bare_session, 1) == []


async def test_writes_raise_schema_missing(bare_session):
    with pytest.raises(SchemaMissingError) as exc_info:
        await payment_service.upsert_payment(bare_session, 1, 1, PaymentStatus.paid)

    assert exc_info.value.status_code == 503


async def test_payment_bootstrap_swallows_missing_schema(bare_session):
    assert await payment_service.bootstrap_payment(bare_session, 1, 1) is False


async def test_broadcast_swallows_missing_schema(bare_session):
    sent = await notification_service.create_notification_for_all_users(
        bare_session, "Spot Updated", "Nothing to see"
    )
    assert sent == 0
