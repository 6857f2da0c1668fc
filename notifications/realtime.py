"""
Process-wide registry of live websocket connections, used only to route
pushes. It is never a source of truth: losing an entry only delays delivery
until the recipient polls the notification list.
"""
import logging
import threading

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Maps a user id to the channel names of that user's open sockets.
    A user may have several tabs/devices connected at once.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._connections = {}

    def register(self, user_id, channel_name):
        with self._lock:
            self._connections.setdefault(str(user_id), set()).add(channel_name)

    def unregister(self, user_id, channel_name):
        key = str(user_id)
        with self._lock:
            channels = self._connections.get(key)
            if not channels:
                return
            channels.discard(channel_name)
            if not channels:
                del self._connections[key]

    def channels_for(self, user_id):
        with self._lock:
            return set(self._connections.get(str(user_id), ()))

    def is_online(self, user_id):
        return bool(self.channels_for(user_id))

    def clear(self):
        with self._lock:
            self._connections.clear()


registry = ConnectionRegistry()


def send_to_user(user_id, event, payload):
    """
    Fire-and-forget push to every open socket of `user_id`.
    Returns the number of connections the event was handed to.
    """
    channel_names = registry.channels_for(user_id)
    if not channel_names:
        logger.debug("No active connection for user %s, skipping push of %s", user_id, event)
        return 0

    channel_layer = get_channel_layer()
    if channel_layer is None:
        return 0

    delivered = 0
    for channel_name in channel_names:
        try:
            async_to_sync(channel_layer.send)(channel_name, {
                'type': 'notification.message',
                'event': event,
                'payload': payload,
            })
            delivered += 1
        except Exception:
            # A dead or full channel must not affect the caller.
            logger.warning("Push to user %s on %s failed", user_id, channel_name, exc_info=True)
    return delivered
