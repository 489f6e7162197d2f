"""Fire-and-forget dispatch and Telegram message formatting."""
import asyncio
from datetime import date

import pytest
import requests

from app.helpers.time import utcnow
from app.notifications.dispatcher import NotificationDispatcher, TelegramNotifier
from app.notifications.telegram_client import (
    TelegramClient,
    format_cancelled_appointment,
    format_new_appointment,
    format_price,
)
from app.system_models.appointment_model.appointment_schemas import Appointment, ServiceType
from tests.utils.fakes import RecordingNotifier


@pytest.fixture
def appointment():
    return Appointment(
        id="apt-1741600000000-abcdef1234",
        patient_name="<b>Robert</b> & Sons",
        patient_phone="+7 701 555 0101",
        patient_email="robert@example.com",
        date=date(2025, 3, 10),
        time="13:00",
        service_type=ServiceType(
            id="treatment",
            name="Kinesiotherapy",
            description="Therapeutic exercise",
            duration_minutes=120,
            price=20000,
            icon="🏃",
        ),
        problem_description="Knee pain <3 weeks",
        status="pending",
        created_at=utcnow(),
    )


class SlowNotifier(RecordingNotifier):
    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def notify(self, event, appointment):
        await asyncio.sleep(self.delay)
        return await super().notify(event, appointment)


@pytest.mark.asyncio
async def test_dispatch_delivers_in_background(appointment):
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(notifier)

    dispatcher.dispatch("created", appointment)
    assert dispatcher.pending == 1
    await dispatcher.drain(timeout=1.0)

    assert notifier.events == [("created", appointment.id)]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_dispatch_swallows_notifier_failure(appointment):
    dispatcher = NotificationDispatcher(RecordingNotifier(fail=True))

    dispatcher.dispatch("cancelled", appointment)
    await dispatcher.drain(timeout=1.0)

    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_drain_cancels_stragglers(appointment):
    notifier = SlowNotifier(delay=10)
    dispatcher = NotificationDispatcher(notifier)

    dispatcher.dispatch("created", appointment)
    await dispatcher.drain(timeout=0.05)
    await asyncio.sleep(0.01)

    assert notifier.events == []
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_drain_without_pending_work_returns_immediately():
    dispatcher = NotificationDispatcher(RecordingNotifier())

    await dispatcher.drain(timeout=0.01)

    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_unconfigured_telegram_client_sends_nothing(monkeypatch, appointment):
    def fail_post(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(requests, "post", fail_post)
    client = TelegramClient(bot_token="", chat_id="")

    assert client.is_configured is False
    assert await TelegramNotifier(client).notify("created", appointment) is False


@pytest.mark.asyncio
async def test_telegram_transport_error_reports_failure(monkeypatch):
    def broken_post(*args, **kwargs):
        raise requests.ConnectionError("network down")

    monkeypatch.setattr(requests, "post", broken_post)
    client = TelegramClient(bot_token="123:abc", chat_id="42")

    assert await client.send_message("hello") is False


@pytest.mark.asyncio
async def test_telegram_sends_html_message(monkeypatch):
    calls = []

    class FakeResponse:
        def raise_for_status(self):
            return None

    def fake_post(url, json, timeout):
        calls.append((url, json, timeout))
        return FakeResponse()

    monkeypatch.setattr(requests, "post", fake_post)
    client = TelegramClient(bot_token="123:abc", chat_id="42", timeout=3.0)

    assert await client.send_message("<b>hi</b>") is True
    url, payload, timeout = calls[0]
    assert url == "https://api.telegram.org/bot123:abc/sendMessage"
    assert payload["chat_id"] == "42"
    assert payload["parse_mode"] == "HTML"
    assert timeout == 3.0


def test_new_appointment_message_escapes_patient_text(appointment):
    text = format_new_appointment(appointment)

    assert "&lt;b&gt;Robert&lt;/b&gt; &amp; Sons" in text
    assert "Knee pain &lt;3 weeks" in text
    assert "Monday, March 10, 2025" in text
    assert "20 000 ₸" in text
    assert appointment.id in text


def test_optional_lines_are_omitted(appointment):
    bare = appointment.model_copy(update={"patient_email": None, "problem_description": None})

    text = format_new_appointment(bare)

    assert "Email" not in text
    assert "Problem description" not in text


def test_cancelled_message(appointment):
    text = format_cancelled_appointment(appointment)

    assert text.startswith("❌")
    assert "13:00" in text
    assert appointment.id in text


def test_format_price_groups_thousands():
    assert format_price(5000) == "5 000 ₸"
    assert format_price(950) == "950 ₸"
