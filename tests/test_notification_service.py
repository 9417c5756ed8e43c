"""Tests for the owner notification inbox."""

import pytest

from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.intelligence.due_calculator import DueStatus
from vehicle_care.services.notification_dispatcher import dispatch_service_due
from vehicle_care.services.notification_service import (
    delete_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)


@pytest.fixture
def inbox(db, fake, make_owner, make_vehicle):
    """Two notifications for one owner, one for another."""
    owner = make_owner()
    other = make_owner()
    for _ in range(2):
        vehicle = make_vehicle(owner, current_mileage=5000, next_service_due=5000)
        dispatch_service_due(db, vehicle, DueStatus.OVERDUE, transports=fake.transports)
    dispatch_service_due(
        db,
        make_vehicle(other, current_mileage=5000, next_service_due=5000),
        DueStatus.OVERDUE,
        transports=fake.transports,
    )
    return owner, other


class TestListing:
    def test_newest_first_and_scoped(self, db, inbox):
        owner, _ = inbox

        notifications = list_notifications(db, owner.id)

        assert len(notifications) == 2
        assert notifications[0].id > notifications[1].id
        assert all(item.owner_id == owner.id for item in notifications)

    def test_unread_only(self, db, inbox):
        owner, _ = inbox
        first = list_notifications(db, owner.id)[0]

        mark_as_read(db, owner.id, first.id)

        unread = list_notifications(db, owner.id, unread_only=True)
        assert [item.id for item in unread] != [first.id]
        assert len(unread) == 1


class TestMarkRead:
    def test_mark_all(self, db, inbox):
        owner, other = inbox

        assert mark_all_as_read(db, owner.id) == 2
        assert list_notifications(db, owner.id, unread_only=True) == []
        assert len(list_notifications(db, other.id, unread_only=True)) == 1

    def test_cannot_touch_other_owner_rows(self, db, inbox):
        owner, other = inbox
        foreign = list_notifications(db, other.id)[0]

        with pytest.raises(DomainException) as exc:
            mark_as_read(db, owner.id, foreign.id)
        assert exc.value.code == ErrorCode.NOTIFICATION_NOT_FOUND


class TestDelete:
    def test_delete_own(self, db, inbox):
        owner, _ = inbox
        target = list_notifications(db, owner.id)[0]

        delete_notification(db, owner.id, target.id)

        assert target.id not in [item.id for item in list_notifications(db, owner.id)]

    def test_delete_foreign_is_not_found(self, db, inbox):
        owner, other = inbox
        foreign = list_notifications(db, other.id)[0]

        with pytest.raises(DomainException):
            delete_notification(db, owner.id, foreign.id)
        assert len(list_notifications(db, other.id)) == 1
