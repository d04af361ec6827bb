from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from app.models.invitation import InvitationStatus
from app.models.payment import PaymentStatus
from app.schemas.profile import ProfileBrief


class InvitationMutate(BaseModel):
    status: InvitationStatus


class InvitationRead(BaseModel):
    id: int
    spot_id: int
    user_id: int
    status: InvitationStatus
    profile: ProfileBrief
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RSVPStats(BaseModel):
    pending: int
    confirmed: int
    declined: int


class PaymentMutate(BaseModel):
    status: PaymentStatus


class PaymentRead(BaseModel):
    id: int
    spot_id: int
    user_id: int
    status: PaymentStatus
    drink_total_amount: Decimal
    profile: ProfileBrief
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AttendanceMutate(BaseModel):
    attended: bool


class AttendanceRead(BaseModel):
    id: int
    spot_id: int
    user_id: int
    attended: bool
    profile: ProfileBrief | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
