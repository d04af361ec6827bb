from app.models.profile import Profile, UserRole
from app.models.spot import Spot
from app.models.invitation import Invitation, InvitationStatus
from app.models.payment import Payment, PaymentStatus
from app.models.attendance import Attendance
from app.models.drink_brand import DrinkBrand, DrinkCategory
from app.models.drink_selection import UserDrinkSelection
from app.models.drink import Drink
from app.models.food import Food
from app.models.cigarette import Cigarette
from app.models.notification import Notification
from app.models.chat_message import ChatMessage
from app.models.moment import Moment

__all__ = [
    "Attendance",
    "ChatMessage",
    "Cigarette",
    "Drink",
    "DrinkBrand",
    "DrinkCategory",
    "Food",
    "Invitation",
    "InvitationStatus",
    "Moment",
    "Notification",
    "Payment",
    "PaymentStatus",
    "Profile",
    "Spot",
    "UserDrinkSelection",
    "UserRole",
]
