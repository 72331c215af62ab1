"""
Health check and monitoring endpoints.

Provides liveness, database connectivity and basic row counts.
"""

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime, timezone

from app.core.database import get_db, ping
from app.core.errors import classify_error
from app.crud import application as crud_application
from app.crud import job as crud_job
from app.crud import user as crud_user

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    """
    return {
        "status": "healthy",
        "timestamp": _timestamp()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Detailed health check with database connectivity.

    Always answers 200; the body says whether the database is reachable.
    """
    health_status = {
        "status": "healthy",
        "timestamp": _timestamp(),
        "checks": {}
    }

    try:
        ping(db)
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        classification = classify_error(e)
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": classification.message
        }

    return health_status


@router.get("/metrics", status_code=status.HTTP_200_OK)
def get_metrics(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Row counts for users, postings and active applications."""
    return {
        "timestamp": _timestamp(),
        "metrics": {
            "total_users": crud_user.count(db),
            "job_seekers": crud_user.count(db, {"role": "Job Seeker"}),
            "employers": crud_user.count(db, {"role": "Employer"}),
            "total_jobs": crud_job.count(db),
            "pending_newsletters": crud_job.count(db, {"newsLettersSent": False}),
            "total_applications": crud_application.count(db),
        }
    }
