"""
Audit logging utilities
"""

from typing import Any, Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request

from app.models.audit import AuditLog, AuditAction


async def create_audit_log(
    db: AsyncSession,
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    description: Optional[str] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    project_id: Optional[int] = None,
    actor_id: Optional[int] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """
    Create an audit log entry.

    The entry is added to the session but not committed, so it lands in the
    same transaction as the write it describes.

    Args:
        db: Database session
        action: Type of action (create, update, delete, replace, generate)
        entity_type: Type of entity being modified (e.g., 'stop_times', 'shape')
        entity_id: ID of the entity
        description: Optional description of the action
        old_values: Previous values (for updates/deletes)
        new_values: New values (for creates/updates)
        project_id: Project ID for multi-tenancy
        actor_id: ID of the user performing the action, when known
        request: Optional FastAPI request object to extract IP and user agent

    Returns:
        Pending AuditLog instance
    """
    # Extract request metadata if available
    ip_address = None
    user_agent = None
    if request:
        # Try to get real IP from X-Forwarded-For header (for proxy setups)
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            ip_address = forwarded_for.split(",")[0].strip()
        else:
            ip_address = request.client.host if request.client else None

        user_agent = request.headers.get("User-Agent")

    audit_log = AuditLog(
        actor_id=actor_id,
        project_id=project_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        description=description,
        old_values=old_values,
        new_values=new_values,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_log)
    return audit_log


def serialize_model(model: Any, exclude_fields: Optional[list[str]] = None) -> Dict[str, Any]:
    """
    Serialize a SQLAlchemy model to a dictionary for audit logging.

    Args:
        model: SQLAlchemy model instance
        exclude_fields: List of field names to exclude from serialization

    Returns:
        Dictionary representation of the model
    """
    if exclude_fields is None:
        exclude_fields = ["created_at", "updated_at"]

    result = {}
    for column in model.__table__.columns:
        if column.name not in exclude_fields:
            value = getattr(model, column.name)
            # Convert to JSON-serializable types
            if hasattr(value, 'isoformat'):
                result[column.name] = value.isoformat()
            elif isinstance(value, (str, int, float, bool, type(None))):
                result[column.name] = value
            else:
                result[column.name] = str(value)

    return result
