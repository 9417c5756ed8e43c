"""Tests for the scheduled due-check, upcoming-check and weekly report scans."""

from datetime import timedelta

from sqlalchemy import select

from tests.conftest import TODAY, FakeTransports
from vehicle_care.db.models import Notification, ServiceRecord
from vehicle_care.scheduler import reminder_scheduler
from vehicle_care.scheduler.reminder_scheduler import (
    SchedulerState,
    _run_scan,
    check_due_services,
    check_upcoming_services,
    send_weekly_reports,
    start_scheduler,
)


def days(n):
    return TODAY + timedelta(days=n)


class TestDueCheck:
    """Daily scan: 3-day horizon or 90% of the mileage threshold."""

    def test_matches_horizon_and_mileage_ratio(self, db, fake, make_owner, make_vehicle):
        owner = make_owner()
        by_date = make_vehicle(owner, current_mileage=1000, next_service_due=10000, next_service_date=days(3))
        by_miles = make_vehicle(owner, current_mileage=9200, next_service_due=10000)
        make_vehicle(owner, current_mileage=1000, next_service_due=10000, next_service_date=days(5))
        make_vehicle(owner, current_mileage=1000, next_service_due=10000)

        summary = check_due_services(db, today=TODAY, transports=fake.transports)

        assert summary.candidates == 2
        assert summary.sent == 2
        assert {result.vehicle_id for result in summary.results} == {by_date.id, by_miles.id}
        assert len(fake.emails) == 2

    def test_failing_vehicle_does_not_abort_batch(self, db, make_owner, make_vehicle):
        fake = FakeTransports(email_raises=True)
        first = make_owner()
        second = make_owner()
        make_vehicle(first, current_mileage=10000, next_service_due=10000)
        make_vehicle(second, current_mileage=10000, next_service_due=10000)

        summary = check_due_services(db, today=TODAY, transports=fake.transports)

        # in-app still delivers for both owners
        assert summary.sent == 2
        owners = {row.owner_id for row in db.scalars(select(Notification)).all()}
        assert owners == {first.id, second.id}

    def test_vehicle_with_no_working_channel_counts_failed(self, db, make_owner, make_vehicle):
        fake = FakeTransports(email_ok=False)
        owner = make_owner(preferences={"in_app": False})
        make_vehicle(owner, current_mileage=10000, next_service_due=10000)

        summary = check_due_services(db, today=TODAY, transports=fake.transports)

        assert summary.failed == 1
        assert summary.sent == 0

    def test_rerun_without_state_notifies_again(self, db, fake, make_owner, make_vehicle):
        owner = make_owner()
        make_vehicle(owner, current_mileage=10000, next_service_due=10000)

        check_due_services(db, today=TODAY, transports=fake.transports)
        check_due_services(db, today=TODAY, transports=fake.transports)

        assert len(fake.emails) == 2

    def test_state_dedupes_same_day(self, db, fake, make_owner, make_vehicle):
        owner = make_owner()
        make_vehicle(owner, current_mileage=10000, next_service_due=10000)
        state = SchedulerState()

        check_due_services(db, today=TODAY, state=state, transports=fake.transports)
        second = check_due_services(db, today=TODAY, state=state, transports=fake.transports)
        check_due_services(db, today=days(1), state=state, transports=fake.transports)

        assert second.skipped == 1
        assert len(fake.emails) == 2

    def test_state_not_marked_when_nothing_delivered(self, db, make_owner, make_vehicle):
        failing = FakeTransports(email_ok=False)
        owner = make_owner(preferences={"in_app": False})
        make_vehicle(owner, current_mileage=10000, next_service_due=10000)
        state = SchedulerState()

        check_due_services(db, today=TODAY, state=state, transports=failing.transports)
        retry = check_due_services(db, today=TODAY, state=state, transports=FakeTransports().transports)

        assert retry.sent == 1


class TestSchedulerState:
    def test_prune_drops_old_days(self):
        state = SchedulerState()
        state.mark_notified("due_check", 1, days(-5))
        state.mark_notified("due_check", 2, TODAY)

        state.prune(days(-2))

        assert not state.already_notified("due_check", 1, days(-5))
        assert state.already_notified("due_check", 2, TODAY)


class TestUpcomingCheck:
    """Email-only reminder for service dates exactly seven days away."""

    def test_exact_day_only(self, db, fake, make_owner, make_vehicle):
        owner = make_owner(phone="+15550001111", preferences={"sms": True})
        hit = make_vehicle(owner, next_service_date=days(7))
        make_vehicle(owner, next_service_date=days(6))
        make_vehicle(owner, next_service_date=days(8))

        summary = check_upcoming_services(db, today=TODAY, transports=fake.transports)

        assert summary.sent == 1
        assert len(fake.emails) == 1
        assert hit.plate_number in fake.emails[0][1]
        assert fake.sms == []
        assert fake.published == []
        assert db.scalars(select(Notification)).all() == []

    def test_email_failure_counted(self, db, make_owner, make_vehicle):
        fake = FakeTransports(email_raises=True)
        owner = make_owner()
        make_vehicle(owner, next_service_date=days(7))

        summary = check_upcoming_services(db, today=TODAY, transports=fake.transports)

        assert summary.failed == 1


class TestWeeklyReport:
    """Owners with services in the last 7 days get a count and total."""

    def _service(self, db, vehicle, service_date, cost):
        db.add(
            ServiceRecord(
                vehicle_id=vehicle.id,
                service_date=service_date,
                mileage_at_service=vehicle.current_mileage,
                total_cost=cost,
                status="completed",
            )
        )
        db.commit()

    def test_only_owners_with_services(self, db, fake, make_owner, make_vehicle):
        active = make_owner()
        idle = make_owner()
        self._service(db, make_vehicle(active), days(-2), 120.00)
        self._service(db, make_vehicle(idle), days(-30), 80.00)

        summary = send_weekly_reports(db, today=TODAY, transports=fake.transports)

        assert summary.sent == 1
        (email,) = fake.emails
        assert email[0] == active.email
        assert "Services in the last 7 days: 1" in email[2]
        assert "Total cost: 120.00" in email[2]

    def test_totals_across_vehicles(self, db, fake, make_owner, make_vehicle):
        owner = make_owner()
        self._service(db, make_vehicle(owner), days(-1), 100.25)
        self._service(db, make_vehicle(owner), days(-6), 50.50)

        send_weekly_reports(db, today=TODAY, transports=fake.transports)

        assert "Services in the last 7 days: 2" in fake.emails[0][2]
        assert "Total cost: 150.75" in fake.emails[0][2]

    def test_service_a_week_old_is_outside_window(self, db, fake, make_owner, make_vehicle):
        """The window is today and the six days before it."""
        self._service(db, make_vehicle(make_owner()), days(-7), 60.00)

        summary = send_weekly_reports(db, today=TODAY, transports=fake.transports)

        assert summary.sent == 0
        assert fake.emails == []

    def test_no_services_sends_nothing(self, db, fake, make_owner, make_vehicle):
        make_vehicle(make_owner())

        summary = send_weekly_reports(db, today=TODAY, transports=fake.transports)

        assert summary.candidates == 0
        assert fake.emails == []


class RecordingSession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class TestRunScan:
    def test_scan_error_is_contained_and_session_closed(self, monkeypatch):
        session = RecordingSession()
        monkeypatch.setattr(reminder_scheduler, "SessionLocal", lambda: session)
        seen = []

        def exploding_scan(db, **kwargs):
            seen.append((db, kwargs))
            raise RuntimeError("database unavailable")

        _run_scan(exploding_scan, state="marker")

        assert seen == [(session, {"state": "marker"})]
        assert session.closed


class TestStartScheduler:
    def test_registers_three_cron_jobs(self):
        state = SchedulerState()
        scheduler = start_scheduler(state)
        try:
            jobs = {job.id: job for job in scheduler.get_jobs()}

            assert set(jobs) == {"daily_due_check", "daily_upcoming_check", "weekly_service_report"}

            fields = {
                job_id: {field.name: str(field) for field in job.trigger.fields}
                for job_id, job in jobs.items()
            }
            assert (fields["daily_due_check"]["hour"], fields["daily_due_check"]["minute"]) == ("9", "0")
            assert (fields["daily_upcoming_check"]["hour"], fields["daily_upcoming_check"]["minute"]) == ("10", "0")
            assert fields["weekly_service_report"]["day_of_week"] == "mon"
            assert fields["weekly_service_report"]["hour"] == "8"

            assert jobs["daily_due_check"].args == (check_due_services,)
            assert jobs["daily_due_check"].kwargs == {"state": state}
            assert jobs["daily_upcoming_check"].args == (check_upcoming_services,)
            assert jobs["weekly_service_report"].args == (send_weekly_reports,)

            for job in jobs.values():
                assert job.max_instances == 1
                assert job.coalesce is True
        finally:
            scheduler.shutdown(wait=False)
