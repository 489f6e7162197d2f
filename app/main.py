# app/main.py
from dotenv import load_dotenv

load_dotenv()

import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.appconfig import settings

# Apply logging configuration
logging.config.dictConfig(settings.LOGGING_CONFIG)

from app.database.store_factory import build_store
from app.notifications.dispatcher import NotificationDispatcher, TelegramNotifier
from app.notifications.telegram_client import TelegramClient
from app.shared.error_handlers import register_error_handlers
from app.users.auth_routers import admin_users_router
from app.users.auth_routers import router as auth_router
from app.users.auth_services import create_initial_admins
from app.system_services.system_routes import router as system_router

logger = logging.getLogger("app.main")


def build_dispatcher() -> NotificationDispatcher:
    client = TelegramClient(
        bot_token=settings.TELEGRAM_BOT_TOKEN,
        chat_id=settings.TELEGRAM_CHAT_ID,
        timeout=settings.TELEGRAM_TIMEOUT,
    )
    return NotificationDispatcher(TelegramNotifier(client))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    store = build_store(settings)
    await store.initialize()
    seeded = await create_initial_admins(store)

    app.state.store = store
    app.state.dispatcher = build_dispatcher()

    logger.info("===============================================================")
    logger.info(f" 🚀 Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    logger.info(f" ✅ Storage backend: {store.backend_name}")
    logger.info(f" ✅ Seeded admin accounts: {seeded}")
    logger.info(f" ✅ Telegram notifications: {'on' if settings.telegram_configured else 'off'}")
    logger.info(f" ✅ Token lifetime: {settings.ACCESS_TOKEN_EXPIRY} min")
    logger.info("===============================================================")
    yield
    # Shutdown
    await app.state.dispatcher.drain(timeout=settings.NOTIFICATION_DRAIN_TIMEOUT)
    await store.close()
    logger.info("👋 Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Clinic appointment booking with an admin panel API",
    version="1.0.0",
    lifespan=lifespan,
)

register_error_handlers(app)

# Include routers with prefixes
app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(admin_users_router, prefix="/api/admin", tags=["Admin Users"])
app.include_router(system_router, prefix="/api", tags=["Appointments"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {"status": "healthy", "service": "clinic-booking-api", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
