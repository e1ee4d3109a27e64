"""Controller for health and readiness checks."""
import os
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from sqlalchemy import func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer import __version__
from resume_optimizer.config import Settings
from resume_optimizer.database.models import Resume, ResumeTemplate, User, UserProfile
from resume_optimizer.services.completion_client import CompletionClient
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

PROCESS_STARTED = time.monotonic()

COUNTED_TABLES = (User, UserProfile, ResumeTemplate, Resume)


def _uptime() -> float:
    return round(time.monotonic() - PROCESS_STARTED, 3)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthController:
    """Database and AI service health checks."""

    def __init__(self, session: AsyncSession, client: CompletionClient, config: Settings):
        self.session = session
        self.client = client
        self.config = config

    async def _database_ok(self) -> Tuple[bool, str]:
        try:
            await self.session.execute(text("SELECT 1"))
            return True, ""
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}", extra={"error": str(e)})
            return False, str(e)

    def _ai_status(self, check: Dict[str, Any]) -> Dict[str, Any]:
        status = {
            "configured": self.client.configured,
            "status": "Connected" if check.get("connected") else "Error",
            "model": check.get("model", self.client.model),
        }
        for key in ("error", "testResponse"):
            if check.get(key):
                status[key] = check[key]
        return status

    async def health(self) -> Tuple[int, Dict[str, Any]]:
        """Overall status: OK, DEGRADED (AI unavailable) or ERROR (database down)."""
        report: Dict[str, Any] = {
            "status": "OK",
            "timestamp": _timestamp(),
            "uptime": _uptime(),
            "environment": self.config.environment,
            "version": __version__,
        }

        db_ok, db_error = await self._database_ok()
        if db_ok:
            report["database"] = {"status": "Connected", "type": self.session.bind.dialect.name}
        else:
            report["database"] = {"status": "Error", "error": db_error}
            report["status"] = "ERROR"

        check = await self.client.check_connection()
        report["aiService"] = self._ai_status(check)
        if not check.get("connected") and report["status"] == "OK":
            report["status"] = "DEGRADED"

        return (503 if report["status"] == "ERROR" else 200), report

    async def system(self, transport: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "success": True,
            "system": {
                "platform": sys.platform,
                "architecture": platform.machine(),
                "pythonVersion": platform.python_version(),
                "pid": os.getpid(),
                "uptime": _uptime(),
                "loadAverage": list(os.getloadavg()) if hasattr(os, "getloadavg") else None,
                "httpTransport": transport,
                "environment": {
                    "environment": self.config.environment,
                    "hasGeminiKey": self.client.configured,
                    "geminiModel": self.client.model,
                },
            },
        }

    async def database(self) -> Tuple[int, Dict[str, Any]]:
        db_health: Dict[str, Any] = {
            "status": "Unknown",
            "type": self.session.bind.dialect.name,
            "tables": [],
            "stats": {},
        }
        try:
            connection = await self.session.connection()
            tables = await connection.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            db_health["tables"] = tables
            for model in COUNTED_TABLES:
                if model.__tablename__ in tables:
                    result = await self.session.execute(select(func.count()).select_from(model))
                    db_health["stats"][model.__tablename__] = {"count": int(result.scalar_one())}
            db_health["status"] = "Connected"
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}", extra={"error": str(e)})
            db_health["status"] = "Error"
            db_health["error"] = str(e)

        connected = db_health["status"] == "Connected"
        return (200 if connected else 503), {"success": connected, "database": db_health}

    async def ai(self) -> Tuple[int, Dict[str, Any]]:
        ai_health: Dict[str, Any] = {
            "configured": self.client.configured,
            "model": self.client.model,
            "timeout": self.client.timeout_ms,
            "maxRetries": self.client.max_retries,
        }
        if not self.client.configured:
            ai_health.update(status="Not Configured", error="GEMINI_API_KEY not found in environment variables")
            return 503, {"success": False, "ai": ai_health}

        check = await self.client.check_connection()
        ai_health.update(self._ai_status(check))
        connected = bool(check.get("connected"))
        return (200 if connected else 503), {"success": connected, "ai": ai_health}

    async def ready(self) -> Tuple[int, Dict[str, Any]]:
        checks = []
        db_ok, db_error = await self._database_ok()
        if db_ok:
            checks.append({"service": "database", "status": "ready"})
        else:
            checks.append({"service": "database", "status": "not_ready", "error": db_error})

        if self.client.configured:
            checks.append({"service": "ai", "status": "ready"})
        else:
            checks.append({"service": "ai", "status": "not_ready", "error": "API key not configured"})

        ready = all(check["status"] == "ready" for check in checks)
        return (200 if ready else 503), {
            "status": "ready" if ready else "not_ready",
            "timestamp": _timestamp(),
            "checks": checks,
        }

    @staticmethod
    def live() -> Dict[str, Any]:
        return {"status": "alive", "timestamp": _timestamp(), "uptime": _uptime()}
