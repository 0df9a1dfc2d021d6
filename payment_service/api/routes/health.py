"""
Health Check Routes

Endpoints for health, liveness, and readiness probes.
"""

from typing import Dict, Any
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from payment_service.api.deps import StoreGatewayDep
from payment_service.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz() -> Dict[str, str]:
    """Liveness endpoint used by the deployment's health checks."""
    return {"status": "ok"}


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns application status and version.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(gateway: StoreGatewayDep) -> Dict[str, Any]:
    """
    Readiness probe - checks the payment database is available.
    Used by Kubernetes to determine if the pod can receive traffic.
    """
    checks: Dict[str, Dict[str, Any]] = {}
    overall_status = "ready"

    try:
        await gateway.query(text("SELECT 1"))
        checks["database"] = {"status": "ok"}
    except SQLAlchemyError as e:
        checks["database"] = {"status": "error", "error": str(e)}
        overall_status = "not_ready"

    return {
        "status": overall_status,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe - basic check that the service is running.
    Used by Kubernetes to determine if the pod should be restarted.
    """
    return {"status": "alive"}
