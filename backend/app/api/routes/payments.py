from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user, role_required
from app.db.session import get_session
from app.models.payment import PaymentStatus
from app.models.profile import Profile, UserRole
from app.schemas.status import PaymentMutate, PaymentRead
from app.services import payments as payment_service
from app.services import spots as spot_service

router = APIRouter(tags=["payments"])


@router.get("/spots/{spot_id}/payments", response_model=list[PaymentRead])
async def list_payments(
    spot_id: int,
    bootstrap: bool = Query(default=True),
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[PaymentRead]:
    """
    Оплаты по встрече.

    По умолчанию перед чтением заводит недостающие строки not_paid
    для всех, кто подтвердил участие.
    """
    if bootstrap:
        await payment_service.bootstrap_payments(session, spot_id)
    payments = await payment_service.get_payments(session, spot_id)
    return [PaymentRead.model_validate(p) for p in payments]


@router.get("/spots/{spot_id}/payments/me", response_model=PaymentRead | None)
async def get_my_payment(
    spot_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PaymentRead | None:
    payment = await payment_service.get_payment(session, spot_id, current_user.id)
    if payment is None:
        return None
    return PaymentRead.model_validate(payment)


@router.put("/spots/{spot_id}/payments/{user_id}", response_model=PaymentRead)
async def upsert_payment(
    spot_id: int,
    user_id: int,
    payload: PaymentMutate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> PaymentRead:
    await spot_service.get_spot(session, spot_id)
    payment = await payment_service.upsert_payment(session, spot_id, user_id, payload.status)
    return PaymentRead.model_validate(payment)


@router.patch("/payments/{payment_id}", response_model=PaymentRead)
async def update_payment_status(
    payment_id: int,
    payload: PaymentMutate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> PaymentRead:
    payment = await payment_service.update_payment_status(session, payment_id, payload.status)
    return PaymentRead.model_validate(payment)


@router.post("/payments/{payment_id}/paid", response_model=PaymentRead)
async def mark_paid(
    payment_id: int,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> PaymentRead:
    payment = await payment_service.update_payment_status(
        session, payment_id, PaymentStatus.paid
    )
    return PaymentRead.model_validate(payment)


@router.post("/payments/{payment_id}/unpaid", response_model=PaymentRead)
async def mark_unpaid(
    payment_id: int,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> PaymentRead:
    payment = await payment_service.update_payment_status(
        session, payment_id, PaymentStatus.not_paid
    )
    return PaymentRead.model_validate(payment)
