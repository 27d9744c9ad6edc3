"""Routes Historique / Audit log API routes."""

import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulkdispo.database import get_db
from bulkdispo.models.audit import AuditLog

router = APIRouter()


def log_audit(
    db: AsyncSession,
    entity_type: str,
    entity_id: int,
    action: str,
    dispatcher: str | None,
    changes: dict | None = None,
) -> None:
    """Ajouter une entrée à la session courante / Add an entry to the current session.

    Validée avec la requête, annulée avec elle / Committed or rolled back with the request.
    """
    db.add(AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changes=json.dumps(changes, ensure_ascii=False, default=str) if changes else None,
        dispatcher=dispatcher,
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    ))


@router.get("/")
async def list_audit_logs(
    entity_type: str | None = Query(default=None),
    entity_id: int | None = Query(default=None),
    action: str | None = Query(default=None),
    dispatcher: str | None = Query(default=None),
    limit: int = Query(default=100, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Historique filtré, plus récent d'abord / Filtered history, newest first."""
    filters = []
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type)
    if entity_id:
        filters.append(AuditLog.entity_id == entity_id)
    if action:
        filters.append(AuditLog.action == action)
    if dispatcher:
        filters.append(AuditLog.dispatcher == dispatcher)

    total = await db.scalar(select(func.count(AuditLog.id)).where(*filters)) or 0
    result = await db.execute(
        select(AuditLog).where(*filters).order_by(AuditLog.id.desc()).offset(offset).limit(limit)
    )
    return {
        "total": total,
        "items": [
            {
                "id": log.id,
                "entity_type": log.entity_type,
                "entity_id": log.entity_id,
                "action": log.action,
                "changes": json.loads(log.changes) if log.changes else None,
                "dispatcher": log.dispatcher,
                "timestamp": log.timestamp,
            }
            for log in result.scalars().all()
        ],
    }
