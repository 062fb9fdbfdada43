import asyncio
import logging
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI

from .cleanup import purge_idle_sessions
from .settings import settings
from .routers import health
from .routers import curriculum
from .routers import formula
from .routers import tutor

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 5 * 60

app = FastAPI(title="Maximum Likelihood Tutor API")
app.include_router(health.router)
app.include_router(curriculum.router)
app.include_router(formula.router)
app.include_router(tutor.router)

_sweeper: Optional[asyncio.Task] = None


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


async def _session_sweeper():
	# Run once at startup, then periodically
	max_idle = timedelta(minutes=settings.session_idle_minutes)
	while True:
		try:
			await purge_idle_sessions(tutor._sessions, max_idle)
		except Exception:
			logger.exception("Idle session sweep failed")
		await asyncio.sleep(SWEEP_INTERVAL_SECONDS)


@app.on_event("startup")
async def startup_event():
	global _sweeper
	if not settings.gemini_api_key:
		logger.warning("GEMINI_API_KEY is not set; questions and grading will use offline fallbacks")
	_sweeper = asyncio.create_task(_session_sweeper())


@app.on_event("shutdown")
async def shutdown_event():
	if _sweeper is not None:
		_sweeper.cancel()
	for controller in list(tutor._sessions.values()):
		await controller.aclose()
	tutor._sessions.clear()
