"""
Notification dispatch.

Ledger writes announce themselves here. Dispatch is fire-and-forget: it
runs after the surrounding transaction commits, and a failure is logged
without affecting the write that triggered it.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction

from .models import Notification

logger = logging.getLogger(__name__)


class PendingNotification(NamedTuple):
    user_id: UUID
    type: str
    title: str
    body: str
    data: Optional[dict] = None


def create_notifications(pending: Iterable[PendingNotification]) -> List[Notification]:
    """Persist notification records in one batch."""
    return Notification.objects.bulk_create([
        Notification(
            user_id=item.user_id,
            type=item.type,
            title=item.title,
            body=item.body,
            data=item.data or {},
        )
        for item in pending
    ])


def _deliver(pending: List[PendingNotification]) -> None:
    try:
        create_notifications(pending)
    except Exception:
        logger.exception("Failed to dispatch %d notification(s)", len(pending))


def dispatch_on_commit(pending: Iterable[PendingNotification]) -> None:
    """
    Schedule notifications to be created once the current transaction commits.

    Nothing is dispatched when the transaction rolls back or when
    LEDGER_NOTIFICATIONS_ENABLED is off.
    """
    pending = list(pending)
    if not pending or not getattr(settings, 'LEDGER_NOTIFICATIONS_ENABLED', True):
        return
    transaction.on_commit(lambda: _deliver(pending))
