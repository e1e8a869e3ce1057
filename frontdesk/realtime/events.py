import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

QUEUE_GROUP = "queue"


def notify_queue_changed(action: str, entry_id: int) -> None:
    """Tell connected queue boards to refresh.

    Runs after the change is committed, so a broken channel layer only
    costs the push and is logged instead of failing the request.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        "type": "queue.changed",
        "action": action,
        "entryId": entry_id,
        "ts": timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(QUEUE_GROUP, event)
    except Exception:
        logger.exception("Queue board push failed for entry %s (%s)", entry_id, action)
