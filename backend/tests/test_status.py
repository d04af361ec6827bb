from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.errors import NotFoundError, ValidationFailedError
from app.models.invitation import InvitationStatus
from app.models.payment import PaymentStatus
from app.models.profile import Profile
from app.services import attendance as attendance_service
from app.services import invitations as invitation_service
from app.services import payments as payment_service
from app.services import selections as selection_service


async def _mission_count(session, user_id) -> int:
    profile = await session.get(Profile, user_id, populate_existing=True)
    return profile.mission_count


# ----------------------
# 🔹 Invitations
# ----------------------
async def test_new_spot_invites_everyone(session, user, make_spot, admin):
    spot = await make_spot()

    invitations = await invitation_service.get_invitations(session, spot.id)
    statuses = {i.user_id: i.status for i in invitations}

    assert statuses[admin.id] == InvitationStatus.confirmed
    assert statuses[user.id] == InvitationStatus.pending


async def test_rsvp_upsert_keeps_one_row(session, user, make_spot):
    spot = await make_spot()

    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.declined)
    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)

    rows = [i for i in await invitation_service.get_invitations(session, spot.id) if i.user_id == user.id]
    assert len(rows) == 1
    assert rows[0].status == InvitationStatus.confirmed


async def test_rsvp_stats_count_by_status(session, user, make_profile, make_spot):
    other = await make_profile(username="petya")
    spot = await make_spot()
    await invitation_service.upsert_invitation(session, spot.id, other.id, InvitationStatus.declined)

    stats = await invitation_service.get_rsvp_stats(session, spot.id)

    assert stats[InvitationStatus.confirmed] == 1
    assert stats[InvitationStatus.pending] == 1
    assert stats[InvitationStatus.declined] == 1


async def test_update_missing_invitation_raises(session):
    with pytest.raises(NotFoundError):
        await invitation_service.update_invitation_status(session, 404, InvitationStatus.confirmed)


async def test_update_invitation_status_to_confirmed_creates_payment(session, user, make_spot):
    spot = await make_spot()
    invitation = await invitation_service.get_invitation(session, spot.id, user.id)

    await invitation_service.update_invitation_status(
        session, invitation.id, InvitationStatus.confirmed
    )

    payment = await payment_service.get_payment(session, spot.id, user.id)
    assert payment is not None
    assert payment.status == PaymentStatus.not_paid


# ----------------------
# 🔹 Payments
# ----------------------
async def test_confirm_then_order_scenario(session, make_spot, make_profile, brand):
    spot = await make_spot(budget="500")
    newcomer = await make_profile(username="newbie")
    assert await invitation_service.get_invitation(session, spot.id, newcomer.id) is None

    await invitation_service.upsert_invitation(
        session, spot.id, newcomer.id, InvitationStatus.confirmed
    )

    rows = [p for p in await payment_service.get_payments(session, spot.id) if p.user_id == newcomer.id]
    assert len(rows) == 1
    assert rows[0].status == PaymentStatus.not_paid
    assert rows[0].drink_total_amount == Decimal("0")

    await selection_service.upsert_selection(
        session, spot.id, newcomer.id, brand.id, quantity=2, unit_price=Decimal("100")
    )

    rows = [p for p in await payment_service.get_payments(session, spot.id) if p.user_id == newcomer.id]
    assert len(rows) == 1
    assert rows[0].drink_total_amount == Decimal("200")


async def test_reconfirming_does_not_duplicate_or_reset_payment(session, user, make_spot):
    spot = await make_spot()
    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)
    await payment_service.upsert_payment(session, spot.id, user.id, PaymentStatus.paid)

    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)

    rows = [p for p in await payment_service.get_payments(session, spot.id) if p.user_id == user.id]
    assert len(rows) == 1
    assert rows[0].status == PaymentStatus.paid


async def test_payment_bootstrap_failure_does_not_fail_rsvp(session, user, make_spot, monkeypatch):
    spot = await make_spot()

    async def broken_ensure(*args, **kwargs):
        raise RuntimeError("payments table is read-only")

    monkeypatch.setattr(payment_service, "ensure_payment", broken_ensure)

    invitation = await invitation_service.upsert_invitation(
        session, spot.id, user.id, InvitationStatus.confirmed
    )

    assert invitation.status == InvitationStatus.confirmed
    assert await payment_service.get_payment(session, spot.id, user.id) is None


async def test_upsert_payment_does_not_touch_drink_total(session, user, make_spot, brand):
    spot = await make_spot()
    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)
    await selection_service.upsert_selection(
        session, spot.id, user.id, brand.id, quantity=3, unit_price=Decimal("100")
    )

    payment = await payment_service.upsert_payment(session, spot.id, user.id, PaymentStatus.paid)

    assert payment.status == PaymentStatus.paid
    assert payment.drink_total_amount == Decimal("300")


async def test_confirm_after_ordering_picks_up_cart_total(session, user, make_spot, brand):
    spot = await make_spot()
    await selection_service.upsert_selection(
        session, spot.id, user.id, brand.id, quantity=2, unit_price=Decimal("100")
    )

    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)

    payment = await payment_service.get_payment(session, spot.id, user.id)
    assert payment.status == PaymentStatus.not_paid
    assert payment.drink_total_amount == Decimal("200")


async def test_admin_payment_upsert_after_ordering_picks_up_cart_total(
    session, user, make_spot, brand
):
    spot = await make_spot()
    await selection_service.upsert_selection(
        session, spot.id, user.id, brand.id, quantity=3, unit_price=Decimal("100")
    )

    payment = await payment_service.upsert_payment(session, spot.id, user.id, PaymentStatus.paid)

    assert payment.status == PaymentStatus.paid
    assert payment.drink_total_amount == Decimal("300")


async def test_bootstrap_payments_covers_confirmed_only(session, user, make_profile, make_spot, admin):
    other = await make_profile(username="petya")
    spot = await make_spot()
    # приглашение подтверждено напрямую, без создания оплаты
    invitation = await invitation_service.get_invitation(session, spot.id, other.id)
    invitation.status = InvitationStatus.confirmed
    await session.commit()

    created = await payment_service.bootstrap_payments(session, spot.id)

    assert created == 2
    payer_ids = {p.user_id for p in await payment_service.get_payments(session, spot.id)}
    assert payer_ids == {admin.id, other.id}


async def test_update_payment_status(session, user, make_spot):
    spot = await make_spot()
    await invitation_service.upsert_invitation(session, spot.id, user.id, InvitationStatus.confirmed)
    payment = await payment_service.get_payment(session, spot.id, user.id)

    updated = await payment_service.update_payment_status(session, payment.id, PaymentStatus.paid)
    assert updated.status == PaymentStatus.paid

    with pytest.raises(NotFoundError):
        await payment_service.update_payment_status(session, 9999, PaymentStatus.paid)


# ----------------------
# 🔹 Attendance
# ----------------------
def test_should_increment_mission_count_only_on_first_true():
    assert attendance_service.should_increment_mission_count(None, True) is True
    assert attendance_service.should_increment_mission_count(False, True) is True
    assert attendance_service.should_increment_mission_count(True, True) is False
    assert attendance_service.should_increment_mission_count(True, False) is False
    assert attendance_service.should_increment_mission_count(None, False) is False


async def test_attendance_twice_increments_once(session, user, make_spot):
    spot = await make_spot(when=date.today() - timedelta(days=1))
    before = await _mission_count(session, user.id)

    await attendance_service.upsert_attendance(session, spot, user.id, True)
    await attendance_service.upsert_attendance(session, spot, user.id, True)

    assert await _mission_count(session, user.id) == before + 1


async def test_attendance_flip_back_to_true_counts_again(session, user, make_spot):
    spot = await make_spot(when=date.today() - timedelta(days=1))

    await attendance_service.upsert_attendance(session, spot, user.id, True)
    await attendance_service.upsert_attendance(session, spot, user.id, False)
    await attendance_service.upsert_attendance(session, spot, user.id, True)

    assert await _mission_count(session, user.id) == 2


async def test_attendance_not_attended_keeps_count(session, user, make_spot):
    spot = await make_spot(when=date.today() - timedelta(days=1))

    record = await attendance_service.upsert_attendance(session, spot, user.id, False)

    assert record.attended is False
    assert await _mission_count(session, user.id) == 0


async def test_attendance_before_spot_date_is_rejected(session, user, make_spot):
    spot = await make_spot(when=date.today() + timedelta(days=2))

    with pytest.raises(ValidationFailedError):
        await attendance_service.upsert_attendance(session, spot, user.id, True)

    record = await attendance_service.upsert_attendance(
        session, spot, user.id, True, allow_before_date=True
    )
    assert record.attended is True


async def test_missing_attendance_is_none(session, user, make_spot):
    spot = await make_spot()
    assert await attendance_service.get_user_attendance(session, spot.id, user.id) is None
