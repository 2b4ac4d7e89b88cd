from sqlalchemy.orm import Session
from typing import List

from app.models.activity_log import ActivityLog


def get_activity_logs(db: Session, limit: int = 100) -> List[ActivityLog]:
    return (
        db.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )


def get_activity_logs_for_entity(db: Session, entity_type: str, entity_id) -> List[ActivityLog]:
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.entity_type == entity_type)
        .filter(ActivityLog.entity_id == str(entity_id))
        .order_by(ActivityLog.created_at.asc(), ActivityLog.id.asc())
        .all()
    )
