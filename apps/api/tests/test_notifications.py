from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timezone

import httpx
import pytest
from fastapi import BackgroundTasks

from app.core.config import settings
from app.notifications import NullNotifier, SendGridNotifier, dispatch, templates
from app.notifications.base import Contact, RegistrationNotice
from app.notifications.factory import create_notifier
from tests.conftest import RecordingNotifier

CONTACT = Contact(email="ana@x.io", first_name="Ana", last_name="Lee", interest_areas=["product"])

NOTICE = RegistrationNotice(
    registration_id="reg-1",
    contact=CONTACT,
    event_title="Build <Night>",
    event_description="Ship something",
    start_datetime=datetime(2026, 11, 5, 18, 0, tzinfo=timezone.utc),
    end_datetime=datetime(2026, 11, 5, 21, 30, tzinfo=timezone.utc),
    hub_name="Nairobi Hub",
    hub_address="Ngong Rd",
    hub_city="Nairobi",
    hub_country="Kenya",
)


def _sendgrid(handler) -> SendGridNotifier:
    return SendGridNotifier(
        api_key="SG.test",
        sender="ops@buildclub.example",
        base_url="https://sendgrid.test",
        transport=httpx.MockTransport(handler),
    )


def test_dispatch_runs_every_step_despite_failures():
    notifier = RecordingNotifier(fail={"contact"})
    results = dispatch.notify_registration(notifier, NOTICE)

    assert results == {"contact": False, "confirmation": True, "operator": True}
    assert notifier.kinds() == ["contact", "confirmation", "operator"]


def test_new_member_dispatch():
    notifier = RecordingNotifier(fail={"welcome"})
    results = dispatch.notify_new_member(notifier, CONTACT)
    assert results == {"contact": True, "welcome": False, "operator": True}


def test_sendgrid_sends_mail_and_upserts_contact():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    notifier = _sendgrid(handler)
    results = dispatch.notify_registration(notifier, NOTICE)
    notifier.close()

    assert all(results.values())
    assert [(r.method, r.url.path) for r in seen] == [
        ("PUT", "/v3/marketing/contacts"),
        ("POST", "/v3/mail/send"),
        ("POST", "/v3/mail/send"),
    ]
    assert seen[0].headers["Authorization"] == "Bearer SG.test"

    confirmation = json.loads(seen[1].content)
    assert confirmation["personalizations"][0]["to"][0]["email"] == "ana@x.io"
    assert confirmation["from"]["email"] == "ops@buildclub.example"
    assert confirmation["subject"] == "Registered: Build <Night>"
    assert "Build &lt;Night&gt;" in confirmation["content"][0]["value"]

    operator = json.loads(seen[2].content)
    assert operator["personalizations"][0]["to"][0]["email"] == "ops@buildclub.example"
    assert operator["subject"] == "New Registration: Build <Night> (Nairobi Hub)"
    assert "Build &lt;Night&gt;" in operator["content"][0]["value"]


def test_sendgrid_timeout_is_contained():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("provider too slow", request=request)

    results = dispatch.notify_cancellation(_sendgrid(handler), NOTICE)
    assert results == {"cancellation": False}


def test_sendgrid_error_status_is_contained():
    results = dispatch.notify_new_member(_sendgrid(lambda request: httpx.Response(500)), CONTACT)
    assert results == {"contact": False, "welcome": False, "operator": False}


def test_missing_credentials_select_null_notifier():
    assert isinstance(create_notifier(api_key=None, sender=None), NullNotifier)
    assert isinstance(
        create_notifier(api_key="SG.test", sender="ops@buildclub.example"), SendGridNotifier
    )


def test_templates_render_event_details():
    message = templates.registration_confirmation(NOTICE)
    assert message.to == "ana@x.io"
    assert "Thursday, November 05, 2026" in message.html
    assert "6:00 PM - 9:30 PM" in message.html
    assert "Nairobi Hub" in message.html

    assert templates.cancellation(NOTICE).subject == "Registration Cancelled: Build <Night>"
    assert templates.welcome(CONTACT).subject == "Welcome to BuildClub!"


def test_operator_template_names_event_only_for_registrations():
    joined = templates.operator_notification(CONTACT, "ops@buildclub.example")
    assert joined.subject == "New BuildClub Member Joined"
    assert "Nairobi Hub" not in joined.html

    registered = templates.operator_notification(CONTACT, "ops@buildclub.example", NOTICE)
    assert registered.to == "ops@buildclub.example"
    assert "Nairobi Hub" in registered.html
    assert "Thursday, November 05, 2026" in registered.html
    assert "product" in registered.html


def test_notice_payload_survives_serialization():
    payload = json.loads(json.dumps(NOTICE.to_payload()))
    assert RegistrationNotice.from_payload(payload) == NOTICE


def test_schedule_uses_background_tasks_by_default():
    notifier = RecordingNotifier()
    tasks = BackgroundTasks()
    dispatch.schedule(tasks, notifier, "notify_new_member", CONTACT)
    assert notifier.calls == []
    assert len(tasks.tasks) == 1


def test_schedule_can_enqueue_on_celery(monkeypatch):
    from app.worker.celery_app import celery_app

    sent: list[tuple[str, list]] = []
    monkeypatch.setattr(
        dispatch, "settings", dataclasses.replace(settings, notification_dispatch="celery")
    )
    monkeypatch.setattr(celery_app, "send_task", lambda name, args: sent.append((name, args)))

    tasks = BackgroundTasks()
    dispatch.schedule(tasks, RecordingNotifier(), "notify_registration", NOTICE)

    assert tasks.tasks == []
    [(name, args)] = sent
    assert name == "notify_registration"
    assert args[0]["contact"]["email"] == "ana@x.io"
    assert args[0]["start_datetime"] == "2026-11-05T18:00:00+00:00"


def test_worker_task_rebuilds_payload(monkeypatch):
    from app.worker import tasks

    recording = RecordingNotifier()
    monkeypatch.setattr(tasks, "get_notifier", lambda: recording)

    result = tasks.notify_cancellation_task.run(NOTICE.to_payload())
    assert result == {"cancellation": True}
    assert recording.calls == [("cancellation", "ana@x.io")]


@pytest.mark.parametrize("kind", ["contact", "confirmation", "operator", "welcome", "cancellation"])
def test_null_notifier_accepts_everything(kind):
    notifier = NullNotifier()
    calls = {
        "contact": lambda: notifier.upsert_contact(CONTACT),
        "confirmation": lambda: notifier.send_registration_confirmation(NOTICE),
        "operator": lambda: notifier.send_operator_notification(CONTACT),
        "welcome": lambda: notifier.send_welcome(CONTACT),
        "cancellation": lambda: notifier.send_cancellation(NOTICE),
    }
    assert calls[kind]() is None
