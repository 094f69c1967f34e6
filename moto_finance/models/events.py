"""Outbound event envelope."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Event:
    """Notification that a financing entity changed.

    ``data`` holds the serialized entity after the change and ``metadata``
    the operation details (installment number, status transition, ...).
    """

    event_id: str
    event_type: str  # contract.created, installment.paid, ...
    event_time: datetime
    source: str
    subject: str  # Contract or vehicle ID, or "portfolio"
    data: dict
    metadata: dict = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        event_type: str,
        subject: str,
        data: dict[str, Any],
        source: str,
        metadata: dict[str, Any] | None = None,
    ) -> "Event":
        """Build an event stamped with a fresh ID and the current time."""
        return cls(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            event_time=datetime.now(),
            source=source,
            subject=subject,
            data=data,
            metadata=metadata or {},
        )
