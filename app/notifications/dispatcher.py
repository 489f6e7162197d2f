# app/notifications/dispatcher.py
import asyncio
import logging
from typing import Literal, Protocol, Set

from fastapi import Request

from app.notifications.telegram_client import (
    TelegramClient,
    format_cancelled_appointment,
    format_new_appointment,
)
from app.system_models.appointment_model.appointment_schemas import Appointment

logger = logging.getLogger(__name__)

NotificationEvent = Literal["created", "cancelled"]


class Notifier(Protocol):
    """Receives a finalized appointment and reports success or failure."""

    async def notify(self, event: NotificationEvent, appointment: Appointment) -> bool:
        ...


class TelegramNotifier:
    def __init__(self, client: TelegramClient):
        self.client = client

    async def notify(self, event: NotificationEvent, appointment: Appointment) -> bool:
        if event == "created":
            text = format_new_appointment(appointment)
        else:
            text = format_cancelled_appointment(appointment)
        return await self.client.send_message(text)


class NotificationDispatcher:
    """
    Fire-and-forget delivery.
    dispatch() schedules a task and returns immediately; the caller never
    awaits the result and failures are only logged.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, event: NotificationEvent, appointment: Appointment) -> None:
        task = asyncio.create_task(self._deliver(event, appointment))
        # Keep a strong reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: NotificationEvent, appointment: Appointment) -> None:
        try:
            delivered = await self.notifier.notify(event, appointment)
        except Exception as e:
            logger.error(f"❌ Notification '{event}' for {appointment.id} failed: {e}", exc_info=True)
            return
        if delivered:
            logger.info(f"📨 Notification '{event}' sent for {appointment.id}")
        else:
            logger.warning(f"Notification '{event}' for {appointment.id} was not delivered")

    async def drain(self, timeout: float = 5.0) -> None:
        """Give in-flight notifications a bounded chance to finish at shutdown."""
        if not self._pending:
            return
        _, not_done = await asyncio.wait(set(self._pending), timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            logger.warning(f"Dropped {len(not_done)} unfinished notification(s) at shutdown")


# ===========================================
# ✅ Dispatcher dependency
# ===========================================
def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher
