"""
Debug API

Only mounted when the service runs with DEBUG enabled.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/vars")
def get_debug_vars(request: Request) -> Dict[str, Any]:
    """Service counters and the currently tracked driver names."""
    stats = request.app.state.stats
    finder = request.app.state.volume_finder
    return {
        "counters": stats.snapshot(),
        "driver_names": list(finder.driver_names.snapshot()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
