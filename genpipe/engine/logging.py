from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..flows.base import RunLogger
from ..schemas.run import FlowRun, LogEntry

logger = logging.getLogger("genpipe.runs")

_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


async def insert_log(run: FlowRun, message: str, *, level: str = "info", data: Optional[Dict[str, Any]] = None) -> None:
    run.logs.append(LogEntry(at=datetime.now(timezone.utc), message=message, data=data or {}))
    logger.log(_LEVELS.get(level, logging.INFO), "[%s] %s", run.flow, message)


def make_run_logger(run: FlowRun, forward: Optional[RunLogger] = None) -> RunLogger:
    """Build the ``logger`` callback for a run's context.

    Entries land in ``run.logs``; ``forward`` (the caller's own logger, if any)
    receives them too.
    """

    async def run_logger(message: str, data: Dict[str, Any] | None = None, level: str = "info") -> None:
        await insert_log(run, message, level=level, data=data)
        if forward is not None:
            await forward(message, data, level=level)

    return run_logger
