"""Health report for the coaching engine."""

import logging
import time
from typing import Any, Dict

from .. import __version__

logger = logging.getLogger(__name__)

# Without the store no session can be loaded or committed
REQUIRED_SERVICES = ("document_store",)


class HealthCheckService:
    """Builds the report printed by ``growcoach health``."""

    def __init__(self, container):
        self.container = container
        self.startup_time = time.time()

    async def get_health_status(self, include_ai: bool = True) -> Dict[str, Any]:
        """
        Get the health report.

        Status is ``unhealthy`` when a required service is down,
        ``degraded`` when only optional ones (the generator) are down,
        ``healthy`` otherwise.
        """
        health_data = {
            "status": "healthy",
            "timestamp": time.time(),
            "uptime": time.time() - self.startup_time,
            "version": __version__,
            "services": {}
        }

        try:
            service_health = await self.container.health_check(include_ai=include_ai)
            health_data["sessions"] = self._session_stats()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            health_data["status"] = "unhealthy"
            health_data["error"] = str(e)
            return health_data

        health_data["services"] = service_health
        failing = [service for service, healthy in service_health.items() if not healthy]
        if failing:
            health_data["unhealthy_services"] = failing
            if any(service in REQUIRED_SERVICES for service in failing):
                health_data["status"] = "unhealthy"
            else:
                health_data["status"] = "degraded"

        return health_data

    def _session_stats(self) -> Dict[str, int]:
        return {
            "cached": len(self.container.get("cache_backend")),
            "capacity": self.container.settings.session_cache_max_entries,
        }
