"""
Activity and admin audit logging.

Both writers run after the main change has been committed and commit on their own,
so a failed log write never undoes or fails the request that triggered it.
"""

import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import ActivityLog, AdminAuditLog, User

logger = logging.getLogger(__name__)

SEVERITIES = ("info", "warning", "error", "critical")


def log_activity(
    db: Session,
    *,
    action: str,
    entity_type: str,
    actor: Optional[User] = None,
    actor_type: str = "system",
    actor_name: Optional[str] = None,
    entity_id=None,
    entity_name: Optional[str] = None,
    description: Optional[str] = None,
    severity: str = "info",
    shop_id: Optional[int] = None,
    branch_id: Optional[int] = None,
) -> None:
    if severity not in SEVERITIES:
        severity = "info"

    entry = ActivityLog(
        shop_id=shop_id,
        branch_id=branch_id,
        actor_id=actor.id if actor else None,
        actor_name=actor_name or (actor.full_name or actor.email if actor else "System"),
        actor_type=actor_type,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        entity_name=entity_name,
        description=description,
        severity=severity,
    )
    try:
        db.add(entry)
        db.commit()
        logger.debug(f"📝 Activity logged: {action} on {entity_type} {entity_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to write activity log ({action}): {e}")


def log_admin_action(
    db: Session,
    admin: User,
    action: str,
    target_type: str,
    target_id=None,
    target_name: Optional[str] = None,
    description: Optional[str] = None,
    request: Optional[Request] = None,
) -> None:
    ip_address = None
    user_agent = None
    if request is not None:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip()
        elif request.client:
            ip_address = request.client.host
        user_agent = (request.headers.get("User-Agent") or "")[:500] or None

    entry = AdminAuditLog(
        admin_id=admin.id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        target_name=target_name,
        description=description,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        db.add(entry)
        db.commit()
        logger.info(f"🛡️ Admin {admin.email} {action} {target_type} {target_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to write admin audit log ({action}): {e}")
