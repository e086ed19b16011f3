import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers


async def register(client, user, event):
    response = await client.post(f"/api/events/{event.id}/register", headers=auth_headers(user))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, admin, make_user, make_event):
    active = make_event(title="Debate")
    hidden = make_event(title="Archived", is_active=False)
    alice, bob = make_user(), make_user()
    await register(client, alice, active)
    await register(client, bob, active)

    # registrations on inactive events are not counted
    await client.put(f"/api/events/{hidden.id}", json={"is_active": True}, headers=auth_headers(admin))
    await register(client, alice, hidden)
    await client.put(f"/api/events/{hidden.id}", json={"is_active": False}, headers=auth_headers(admin))

    await client.post(
        "/api/events/admin/select-student",
        json={"user_id": bob.id, "event_id": active.id},
        headers=auth_headers(admin),
    )

    response = await client.get("/api/events/admin/stats", headers=auth_headers(admin))

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_events"] == 1
    assert stats["total_users"] == 2
    assert stats["total_registrations"] == 2
    assert stats["selected_students"] == 1
    assert [e["title"] for e in stats["recent_events"]] == ["Debate"]


@pytest.mark.asyncio
async def test_stats_requires_admin(client: AsyncClient, student):
    response = await client.get("/api/events/admin/stats", headers=auth_headers(student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_registrations_lists_only_registered_students(client: AsyncClient, admin, make_user, make_event):
    event = make_event(title="Career Fair", selection_required=True)
    registered, idle = make_user(full_name="Asha"), make_user(full_name="Ben")
    await register(client, registered, event)

    response = await client.get("/api/events/admin/registrations", headers=auth_headers(admin))

    assert response.status_code == 200
    students = response.json()
    assert [s["email"] for s in students] == [registered.email]
    registration = students[0]["registered_events"][0]
    assert registration["selected"] is False
    assert registration["event"]["title"] == "Career Fair"
    assert registration["event"]["selection_required"] is True


@pytest.mark.asyncio
async def test_select_student(client: AsyncClient, admin, student, event):
    await register(client, student, event)

    response = await client.post(
        "/api/events/admin/select-student",
        json={"user_id": student.id, "event_id": event.id},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Student selected successfully"}

    response = await client.get("/api/users/registered-events", headers=auth_headers(student))
    assert response.json()[0]["selected"] is True


@pytest.mark.asyncio
async def test_select_student_without_registration(client: AsyncClient, admin, student, event):
    response = await client.post(
        "/api/events/admin/select-student",
        json={"user_id": student.id, "event_id": event.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Registration not found"


@pytest.mark.asyncio
async def test_select_unknown_user(client: AsyncClient, admin, event):
    response = await client.post(
        "/api/events/admin/select-student",
        json={"user_id": 999, "event_id": event.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"
