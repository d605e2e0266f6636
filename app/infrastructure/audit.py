"""
Audit logger for admin dashboard actions.

Logs who did what, when, and from where as structured lines that any log
aggregator can ingest.
"""

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("audit")


def log_admin_action(
    action: str,
    *,
    admin_ip: str = "",
    details: dict[str, Any] | None = None,
) -> None:
    """Log an admin action (settings save, coupon creation, etc.)."""
    logger.info(
        "ADMIN_ACTION action=%s ip=%s time=%s details=%s",
        action,
        admin_ip,
        datetime.now(timezone.utc).isoformat(),
        details or {},
    )
