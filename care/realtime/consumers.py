import json

from channels.generic.websocket import AsyncWebsocketConsumer

from care.services.messaging import inbox_group


class InboxConsumer(AsyncWebsocketConsumer):
    """Pushes every message received by the connected user."""

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=4001)
            return
        self.group_name = inbox_group(user.pk)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "userId": user.pk}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def inbox_message(self, event):
        # event: {"type": "inbox.message", "payload": {...message fields...}}
        await self.send(json.dumps({"type": "message", **event.get("payload", {})}))
