from channels.generic.websocket import JsonWebsocketConsumer

from .realtime import registry


class NotificationConsumer(JsonWebsocketConsumer):
    """
    One socket per browser tab. Registers the authenticated user on connect
    so send_to_user() can route pushes to this channel.
    """

    def connect(self):
        user = self.scope.get('user')
        if user is None or not user.is_authenticated:
            self.close()
            return
        self.user_id = user.pk
        registry.register(self.user_id, self.channel_name)
        self.accept()

    def disconnect(self, code):
        user_id = getattr(self, 'user_id', None)
        if user_id is not None:
            registry.unregister(user_id, self.channel_name)

    def notification_message(self, event):
        self.send_json({'event': event['event'], 'data': event['payload']})
