from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from twofa.models.audit_log import AuditLog


async def write_audit(
    db: AsyncSession,
    user_id: str | None,
    action: str,
    target: str | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    entry = AuditLog(user_id=user_id, action=action, target=target, meta=meta)
    db.add(entry)
    await db.commit()
    return entry
