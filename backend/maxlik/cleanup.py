from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .progression import ProgressionController

logger = logging.getLogger(__name__)


async def purge_idle_sessions(
	sessions: Dict[str, ProgressionController],
	max_idle: timedelta,
	*,
	now: Optional[datetime] = None,
) -> int:
	threshold = (now or datetime.now(timezone.utc)) - max_idle
	# Sessions with a gateway call in flight are skipped
	stale = [
		sid for sid, controller in sessions.items()
		if controller.state.last_activity < threshold and not controller.busy
	]
	removed = 0
	for sid in stale:
		controller = sessions.pop(sid, None)
		if controller is None:
			continue
		await controller.aclose()
		removed += 1
	if removed:
		logger.info("Purged %d idle tutor sessions", removed)
	return removed
