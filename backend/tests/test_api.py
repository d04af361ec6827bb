from datetime import date, timedelta
from decimal import Decimal

API = "/api/v1"


# ----------------------
# 🔹 Auth & profile
# ----------------------
async def test_register_and_login_by_username_or_phone(client):
    response = await client.post(
        f"{API}/auth/register",
        json={
            "name": "Vasya",
            "username": "Vasya_Bro",
            "phone": "+79001112233",
            "password": "StrongPass123!",
        },
    )
    assert response.status_code == 201
    assert response.json()["username"] == "vasya_bro"
    assert response.json()["mission_count"] == 0

    for login in ("vasya_bro", "+79001112233"):
        response = await client.post(
            f"{API}/auth/login",
            data={"username": login, "password": "StrongPass123!"},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

    response = await client.get(
        f"{API}/profiles/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
    assert response.json()["phone"] == "+79001112233"


async def test_register_duplicate_username(client, user):
    response = await client.post(
        f"{API}/auth/register",
        json={
            "name": "Clone",
            "username": user.username,
            "phone": "+79009999999",
            "password": "StrongPass123!",
        },
    )
    assert response.status_code == 400


async def test_login_failure(client, user):
    response = await client.post(
        f"{API}/auth/login",
        data={"username": user.username, "password": "badpass"},
    )
    assert response.status_code == 400


async def test_requests_without_token_are_rejected(client):
    response = await client.get(f"{API}/spots/")
    assert response.status_code == 401


async def test_update_profile_ignores_mission_count(client, user, auth_headers):
    response = await client.put(
        f"{API}/profiles/me",
        json={"about": "Always late", "mission_count": 100},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert response.json()["about"] == "Always late"
    assert response.json()["mission_count"] == 0


async def test_update_profile_rejects_taken_phone(client, user, make_profile, auth_headers):
    other = await make_profile(username="petya")

    response = await client.put(
        f"{API}/profiles/me",
        json={"phone": other.phone},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Пользователь с таким телефоном уже существует"}


# ----------------------
# 🔹 Spots & RSVP
# ----------------------
async def test_only_admin_creates_spots(client, user, admin, auth_headers):
    payload = {
        "date": (date.today() + timedelta(days=2)).isoformat(),
        "budget": "500",
        "location": "Garage",
    }

    response = await client.post(f"{API}/spots/", json=payload, headers=auth_headers(user))
    assert response.status_code == 403

    response = await client.post(f"{API}/spots/", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    spot_id = response.json()["id"]

    response = await client.get(f"{API}/spots/upcoming", headers=auth_headers(user))
    assert response.json()["id"] == spot_id

    response = await client.get(
        f"{API}/spots/{spot_id}/rsvp/stats", headers=auth_headers(user)
    )
    assert response.json() == {"pending": 1, "confirmed": 1, "declined": 0}


async def test_missing_spot_returns_404_detail(client, user, auth_headers):
    response = await client.get(f"{API}/spots/12345", headers=auth_headers(user))
    assert response.status_code == 404
    assert response.json() == {"detail": "Встреча не найдена"}


async def test_rsvp_confirm_bootstraps_payment_and_cart_updates_total(
    client, user, make_spot, brand, auth_headers
):
    spot = await make_spot(budget="500")
    headers = auth_headers(user)

    response = await client.post(
        f"{API}/spots/{spot.id}/rsvp", json={"status": "confirmed"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    response = await client.get(f"{API}/spots/{spot.id}/payments/me", headers=headers)
    assert response.json()["status"] == "not_paid"
    assert Decimal(response.json()["drink_total_amount"]) == Decimal("0")

    response = await client.post(
        f"{API}/spots/{spot.id}/cart",
        json={"drink_brand_id": brand.id, "quantity": 2},
        headers=headers,
    )
    assert response.status_code == 200
    cart = response.json()
    assert cart["item_count"] == 2
    assert Decimal(cart["amount"]) == Decimal("200")
    assert Decimal(cart["items"][0]["unit_price"]) == Decimal("100")

    response = await client.get(f"{API}/spots/{spot.id}/payments/me", headers=headers)
    assert Decimal(response.json()["drink_total_amount"]) == Decimal("200")

    selection_id = cart["items"][0]["id"]
    response = await client.patch(
        f"{API}/selections/{selection_id}", json={"quantity": 0}, headers=headers
    )
    assert response.status_code == 200
    assert response.json() is None

    response = await client.get(f"{API}/spots/{spot.id}/cart", headers=headers)
    assert response.json()["items"] == []
    assert Decimal(response.json()["amount"]) == Decimal("0")

    response = await client.get(f"{API}/spots/{spot.id}/payments/me", headers=headers)
    assert Decimal(response.json()["drink_total_amount"]) == Decimal("0")


async def test_cart_price_comes_from_catalog(client, user, make_spot, brand, auth_headers):
    spot = await make_spot()

    response = await client.post(
        f"{API}/spots/{spot.id}/cart",
        json={"drink_brand_id": brand.id, "quantity": 3, "unit_price": "0"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    cart = response.json()
    assert Decimal(cart["items"][0]["unit_price"]) == Decimal("100")
    assert Decimal(cart["amount"]) == Decimal("300")


async def test_foreign_selection_is_forbidden(
    client, user, make_profile, make_spot, brand, auth_headers
):
    other = await make_profile(username="petya")
    spot = await make_spot()

    response = await client.post(
        f"{API}/spots/{spot.id}/cart",
        json={"drink_brand_id": brand.id, "quantity": 1},
        headers=auth_headers(user),
    )
    selection_id = response.json()["items"][0]["id"]

    response = await client.delete(
        f"{API}/selections/{selection_id}", headers=auth_headers(other)
    )
    assert response.status_code == 403


async def test_paid_status_survives_reconfirm(client, user, admin, make_spot, auth_headers):
    spot = await make_spot()
    await client.post(
        f"{API}/spots/{spot.id}/rsvp", json={"status": "confirmed"}, headers=auth_headers(user)
    )
    payment = (
        await client.get(f"{API}/spots/{spot.id}/payments/me", headers=auth_headers(user))
    ).json()

    response = await client.post(
        f"{API}/payments/{payment['id']}/paid", headers=auth_headers(user)
    )
    assert response.status_code == 403

    response = await client.post(
        f"{API}/payments/{payment['id']}/paid", headers=auth_headers(admin)
    )
    assert response.json()["status"] == "paid"

    await client.post(
        f"{API}/spots/{spot.id}/rsvp", json={"status": "confirmed"}, headers=auth_headers(user)
    )

    response = await client.get(f"{API}/spots/{spot.id}/payments", headers=auth_headers(user))
    rows = [p for p in response.json() if p["user_id"] == user.id]
    assert len(rows) == 1
    assert rows[0]["status"] == "paid"


# ----------------------
# 🔹 Attendance
# ----------------------
async def test_attendance_rules(client, user, admin, make_spot, auth_headers):
    future = await make_spot(when=date.today() + timedelta(days=5))
    past = await make_spot(when=date.today() - timedelta(days=1))

    response = await client.put(
        f"{API}/spots/{future.id}/attendance/me",
        json={"attended": True},
        headers=auth_headers(user),
    )
    assert response.status_code == 400

    response = await client.get(
        f"{API}/spots/{past.id}/attendance/me", headers=auth_headers(user)
    )
    assert response.json() is None

    for _ in range(2):
        response = await client.put(
            f"{API}/spots/{past.id}/attendance/me",
            json={"attended": True},
            headers=auth_headers(user),
        )
        assert response.status_code == 200

    response = await client.get(f"{API}/profiles/me", headers=auth_headers(user))
    assert response.json()["mission_count"] == 1


# ----------------------
# 🔹 Votes, chat, notifications
# ----------------------
async def test_vote_toggle_endpoint(client, user, make_spot, auth_headers):
    spot = await make_spot()
    headers = auth_headers(user)

    response = await client.post(
        f"{API}/spots/{spot.id}/drinks", json={"name": "Jameson"}, headers=headers
    )
    assert response.status_code == 201
    drink_id = response.json()["id"]

    response = await client.post(f"{API}/drinks/{drink_id}/vote", headers=headers)
    assert response.json()["votes"] == 1
    assert response.json()["voted_by"] == [user.id]

    response = await client.post(f"{API}/drinks/{drink_id}/vote", headers=headers)
    assert response.json()["votes"] == 0
    assert response.json()["voted_by"] == []


async def test_chat_reaction_endpoint(client, user, admin, auth_headers):
    response = await client.post(
        f"{API}/chat/messages", json={"content_text": "Friday?"}, headers=auth_headers(user)
    )
    assert response.status_code == 201
    message_id = response.json()["id"]

    response = await client.post(
        f"{API}/chat/messages/{message_id}/reactions",
        json={"emoji": "🍻"},
        headers=auth_headers(admin),
    )
    assert response.json()["reactions"] == {"🍻": [admin.id]}

    response = await client.delete(
        f"{API}/chat/messages/{message_id}", headers=auth_headers(admin)
    )
    assert response.status_code == 204


async def test_notifications_flow(client, user, make_spot, auth_headers):
    await make_spot()
    headers = auth_headers(user)

    response = await client.get(f"{API}/notifications/", headers=headers)
    notifications = response.json()
    assert notifications[0]["title"] == "New Spot Created!"
    assert notifications[0]["read"] is False

    response = await client.post(
        f"{API}/notifications/{notifications[0]['id']}/read", headers=headers
    )
    assert response.json()["read"] is True
