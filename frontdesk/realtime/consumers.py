import json

from channels.generic.websocket import AsyncWebsocketConsumer

from .events import QUEUE_GROUP


class QueueBoardConsumer(AsyncWebsocketConsumer):
    """Pushes ``queue.changed`` events to waiting-room and desk displays."""

    async def connect(self):
        await self.channel_layer.group_add(QUEUE_GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(QUEUE_GROUP, self.channel_name)

    async def queue_changed(self, event):
        # event: {"type": "queue.changed", "action": str, "entryId": int, "ts": "..."}
        await self.send(json.dumps(event))
