from fastapi import APIRouter, Request

from healthlog.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    manager = getattr(request.app.state, "backups", None)
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "db": getattr(request.app.state, "session_factory", None) is not None,
        "backup_storage": manager.store.kind if manager else None,
    }
