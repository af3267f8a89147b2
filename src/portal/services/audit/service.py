from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")


@dataclass
class AuditEvent:
    """Structured representation of an audit event.

    Carries IDs, types and counts only. Message text, attachment data and
    passwords never go into an audit event.
    """

    timestamp: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    subject: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        subject: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Log a structured audit event and return its payload.

        - `action`: high-level verb, e.g., "login", "chat_completion", "export".
        - `resource_type`: coarse type, e.g., "user", "consultation".
        - `resource_id`: stable identifier when available.
        - `subject`: optional identifier for the caller. If omitted, it is
          taken from the API-key security context when API auth is enabled.
        - `extra`: optional small dict of non-PHI metadata (counts, flags).
        """

        if subject is None:
            from src.portal.security import get_current_subject

            subject = get_current_subject()

        event = AuditEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            subject=subject,
            extra=extra,
        )

        payload = asdict(event)
        try:
            logger.info(json.dumps(payload))
        except TypeError:
            # Something in extra is not JSON serializable; drop it.
            payload["extra"] = None
            logger.info(json.dumps(payload))
        return payload


audit_service = AuditService()
