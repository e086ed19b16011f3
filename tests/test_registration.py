import pytest

from exceptions import (
    AlreadyRegisteredError, CapacityExceededError, InvalidStateError, NotFoundError
)
from models import Event, Notification, Registration, User
from services.registration import RegistrationService


def counts(db, user_id, event_id):
    db.expire_all()
    event = db.get(Event, event_id)
    user = db.get(User, user_id)
    return len(event.registered_participants), len(user.registered_events)


def test_register_adds_one_entry_on_each_side(db_session, student, event):
    before = counts(db_session, student.id, event.id)

    RegistrationService(db_session).register(student.id, event.id)

    after = counts(db_session, student.id, event.id)
    assert after == (before[0] + 1, before[1] + 1)

    registration = db_session.query(Registration).one()
    assert registration.user_id == student.id
    assert registration.event_id == event.id
    assert registration.selected is False
    assert registration.registered_at is not None


def test_register_sends_confirmation(db_session, student, event):
    RegistrationService(db_session).register(student.id, event.id)

    notification = db_session.query(Notification).filter_by(user_id=student.id).one()
    assert notification.type == "confirmation"
    assert "Tech Talk" in notification.message


def test_register_missing_event(db_session, student):
    with pytest.raises(NotFoundError):
        RegistrationService(db_session).register(student.id, 999)


def test_register_inactive_event(db_session, student, make_event):
    event = make_event(is_active=False)

    with pytest.raises(InvalidStateError):
        RegistrationService(db_session).register(student.id, event.id)

    assert db_session.query(Registration).count() == 0


def test_register_full_event_changes_nothing(db_session, make_user, make_event):
    event = make_event(max_participants=1)
    first, second = make_user(), make_user()
    service = RegistrationService(db_session)
    service.register(first.id, event.id)

    with pytest.raises(CapacityExceededError):
        service.register(second.id, event.id)

    assert counts(db_session, second.id, event.id) == (1, 0)
    assert db_session.query(Notification).filter_by(user_id=second.id).count() == 0


def test_register_twice(db_session, student, event):
    service = RegistrationService(db_session)
    service.register(student.id, event.id)

    with pytest.raises(AlreadyRegisteredError):
        service.register(student.id, event.id)

    assert counts(db_session, student.id, event.id) == (1, 1)


def test_full_check_comes_before_duplicate_check(db_session, student, make_event):
    event = make_event(max_participants=1)
    service = RegistrationService(db_session)
    service.register(student.id, event.id)

    with pytest.raises(CapacityExceededError):
        service.register(student.id, event.id)


def test_unregister_removes_both_sides(db_session, student, event):
    service = RegistrationService(db_session)
    service.register(student.id, event.id)

    assert service.unregister(student.id, event.id) is True
    assert counts(db_session, student.id, event.id) == (0, 0)


def test_unregister_non_member_is_noop(db_session, make_user, event):
    member, outsider = make_user(), make_user()
    service = RegistrationService(db_session)
    service.register(member.id, event.id)

    assert service.unregister(outsider.id, event.id) is False
    assert counts(db_session, member.id, event.id) == (1, 1)


def test_unregister_missing_event(db_session, student):
    with pytest.raises(NotFoundError):
        RegistrationService(db_session).unregister(student.id, 999)


def test_delete_event_cascades_to_every_user(db_session, make_user, make_event):
    event = make_event()
    other = make_event(title="Football Final", category="sports")
    users = [make_user() for _ in range(3)]
    service = RegistrationService(db_session)
    for user in users:
        service.register(user.id, event.id)
    service.register(users[0].id, other.id)

    affected = service.delete_event(event.id)

    assert affected == 3
    db_session.expire_all()
    assert db_session.get(Event, event.id) is None
    assert [len(db_session.get(User, u.id).registered_events) for u in users] == [1, 0, 0]
    assert db_session.query(Notification).filter_by(type="cancellation").count() == 3


def test_delete_missing_event(db_session):
    with pytest.raises(NotFoundError):
        RegistrationService(db_session).delete_event(999)


def test_select_student(db_session, student, event):
    service = RegistrationService(db_session)
    service.register(student.id, event.id)

    registration = service.select_student(student.id, event.id)

    assert registration.selected is True
    assert db_session.query(Notification).filter_by(type="selection").count() == 1

    # selecting again does not notify twice
    service.select_student(student.id, event.id)
    assert db_session.query(Notification).filter_by(type="selection").count() == 1


def test_select_student_without_registration(db_session, student, event):
    with pytest.raises(NotFoundError, match="Registration not found"):
        RegistrationService(db_session).select_student(student.id, event.id)


def test_select_unknown_student(db_session, event):
    with pytest.raises(NotFoundError, match="User not found"):
        RegistrationService(db_session).select_student(999, event.id)


def test_remove_user_registrations(db_session, student, make_event):
    service = RegistrationService(db_session)
    events = [make_event(title=f"Event {i}") for i in range(2)]
    for event in events:
        service.register(student.id, event.id)

    assert service.remove_user_registrations(student.id) == 2

    db_session.expire_all()
    assert db_session.query(Registration).count() == 0
    assert all(len(db_session.get(Event, e.id).registered_participants) == 0 for e in events)
