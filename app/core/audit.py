# app/core/audit.py
"""
Security audit trail.
Destructive or privilege-changing actions (deletes, role and permission
changes) are written as JSON lines to a dedicated file for later review.
This is separate from TicketLog, which is the per-ticket activity history.
"""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request

from app.core.config import settings
from app.core.security import TokenClaims

AUDIT_LOG_FILE = os.path.join(settings.audit_log_dir, "audit.log")

audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False

logger = logging.getLogger(__name__)


def _ensure_handler() -> None:
    if audit_logger.handlers:
        return
    os.makedirs(settings.audit_log_dir, exist_ok=True)
    file_handler = logging.FileHandler(AUDIT_LOG_FILE, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(file_handler)


def _client_ip(request: Optional[Request]) -> str:
    if request is None:
        return "unknown"
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def log_action(
    action: str,
    resource_type: str,
    resource_id: str,
    actor: Optional[TokenClaims] = None,
    request: Optional[Request] = None,
    details: Optional[dict] = None,
    status: str = "success",
) -> None:
    """
    Record a security-relevant action.

    Args:
        action: What was done ("DELETE", "ASSIGN", ...).
        resource_type: Kind of resource ("role", "customer", ...).
        resource_id: Identifier of the affected resource.
        actor: Claims of the caller, if known.
        request: Used to extract the client IP.
        details: Extra context.
        status: "success" or "failure".
    """
    _ensure_handler()
    client_ip = _client_ip(request)

    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action.upper(),
        "resource_type": resource_type,
        "resource_id": str(resource_id),
        "user": actor.username if actor else "anonymous",
        "user_roles": actor.roles if actor else [],
        "ip_address": client_ip,
        "status": status,
    }
    if details:
        log_entry["details"] = details

    audit_logger.info(json.dumps(log_entry, ensure_ascii=False))
    logger.info(
        "[AUDIT] %s %s/%s by %s from %s",
        action.upper(), resource_type, resource_id, log_entry["user"], client_ip,
    )
