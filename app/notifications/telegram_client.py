# app/notifications/telegram_client.py
"""
Telegram Bot API client for staff notifications.
Messages are HTML-formatted and sent with requests in a worker thread.
"""
import asyncio
import logging
from datetime import datetime
from html import escape

import requests

from app.system_models.appointment_model.appointment_schemas import Appointment

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


def format_date(value) -> str:
    """e.g. 'Monday, March 10, 2025'."""
    return value.strftime("%A, %B %d, %Y")


def format_price(price: int) -> str:
    return f"{price:,}".replace(",", " ") + " ₸"


# =================================================
# ✅ Message formatting
# =================================================
def format_new_appointment(appointment: Appointment) -> str:
    service = appointment.service_type
    lines = [
        "🆕 <b>New appointment!</b>",
        "",
        f"👤 <b>Patient:</b> {escape(appointment.patient_name)}",
        f"📞 <b>Phone:</b> {escape(appointment.patient_phone)}",
    ]
    if appointment.patient_email:
        lines.append(f"✉️ <b>Email:</b> {escape(appointment.patient_email)}")
    lines += [
        "",
        f"🏥 <b>Service:</b> {escape(service.name)}",
        f"📝 <b>Description:</b> {escape(service.description)}",
        f"⏱ <b>Duration:</b> {service.duration_minutes} min",
        f"💰 <b>Price:</b> {format_price(service.price)}",
        "",
        f"📅 <b>Date:</b> {format_date(appointment.date)}",
        f"🕐 <b>Time:</b> {appointment.time}",
    ]
    if appointment.problem_description:
        lines += ["", f"💬 <b>Problem description:</b>\n{escape(appointment.problem_description)}"]
    lines += [
        "",
        f"📋 <b>Appointment ID:</b> {appointment.id}",
        f"⏰ <b>Created:</b> {appointment.created_at:%Y-%m-%d %H:%M} UTC",
    ]
    return "\n".join(lines)


def format_cancelled_appointment(appointment: Appointment) -> str:
    lines = [
        "❌ <b>Appointment cancelled</b>",
        "",
        f"👤 <b>Patient:</b> {escape(appointment.patient_name)}",
        f"📞 <b>Phone:</b> {escape(appointment.patient_phone)}",
        "",
        f"🏥 <b>Service:</b> {escape(appointment.service_type.name)}",
        f"📅 <b>Date:</b> {format_date(appointment.date)}",
        f"🕐 <b>Time:</b> {appointment.time}",
        "",
        f"📋 <b>Appointment ID:</b> {appointment.id}",
    ]
    return "\n".join(lines)


class TelegramClient:
    """Sends messages to one chat. Unconfigured clients log a warning and send nothing."""

    def __init__(self, bot_token: str, chat_id: str, timeout: float = 10.0):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def _post(self, text: str) -> bool:
        response = requests.post(
            TELEGRAM_API_URL.format(token=self.bot_token),
            json={
                "chat_id": self.chat_id,
                "text": text,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return True

    async def send_message(self, text: str) -> bool:
        if not self.is_configured:
            logger.warning("Telegram bot is not configured; skipping notification")
            return False

        try:
            return await asyncio.to_thread(self._post, text)
        except requests.RequestException as e:
            logger.error(f"❌ Telegram send failed: {e}")
            return False
