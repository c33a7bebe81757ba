import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from pythonjsonlogger import jsonlogger

from fightnight.config import settings
from fightnight.database import init_db
from fightnight.routers import guilds, health, orgs
from fightnight.services.scheduler import start_scheduler, stop_scheduler

# JSON structured logging on stdout
handler = logging.StreamHandler(sys.stdout)
formatter = jsonlogger.JsonFormatter(
    fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
    rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
)
handler.setFormatter(formatter)
logging.root.handlers = [handler]
logging.root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

# Suppress verbose logs from external libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting fightnight (default tz %s, run at %s)", settings.tz, settings.run_at)
    if not settings.discord_token:
        logger.warning("DISCORD_TOKEN is not set; posts and reminders will fail")
    if not settings.api_key and not settings.api_open:
        logger.warning("API_KEY is not set; guild updates and previews are disabled")
    elif not settings.api_key:
        logger.warning("API_OPEN is set; write endpoints accept unauthenticated requests")
    await init_db()
    start_scheduler()
    yield
    stop_scheduler()
    logger.info("Shutting down fightnight")


app = FastAPI(title="fightnight", lifespan=lifespan)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/health", "/metrics"],
).instrument(app).expose(app, endpoint="/metrics")

app.include_router(health.router)
app.include_router(orgs.router)
app.include_router(guilds.router)
