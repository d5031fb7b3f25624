import os
import time

import psutil  # type: ignore[import-untyped]
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint that monitors system resources and service status.
    Includes build metadata for cache invalidation troubleshooting.

    Returns "initializing" status until the database has been set up.
    """
    # System metrics
    cpu_percent = psutil.cpu_percent()
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")

    database = getattr(request.app.state, "database", None)
    database_status = "healthy" if database and database.initialized else "initializing"

    refresher = getattr(request.app.state, "trending_refresher", None)
    if refresher is None or refresher.interval <= 0:
        refresher_status = "disabled"
    else:
        refresher_status = "running" if refresher.is_running else "stopped"

    overall_status = "healthy" if database_status == "healthy" else "initializing"

    # BUILD_ID is injected via Docker build arg from git commit hash
    build_id = os.getenv("BUILD_ID", "unknown")

    return {
        "status": overall_status,
        "timestamp": int(time.time()),
        "build_id": build_id,
        "system": {
            "cpu_percent": cpu_percent,
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
        },
        "services": {
            "database": database_status,
            "trending_refresh": refresher_status,
        },
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check that reports if the service is ready to handle requests.

    Answers 503 until the database has been initialized.
    """
    database = getattr(request.app.state, "database", None)
    if database is None or not database.initialized:
        return JSONResponse(status_code=503, content={"status": "initializing"})
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check that reports if the service is running.
    """
    return {"status": "alive"}
