import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import Notification
from .realtime import send_to_user
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class NotificationService:
    """
    The notification sink used by every workflow transition.
    Persisting a record never fails the caller and the socket push is
    best-effort; the stored record is what the recipient sees on next poll.
    """

    @classmethod
    def notify(cls, recipient, type, title, body, link=None, metadata=None):
        recipient_id = getattr(recipient, 'pk', recipient)
        try:
            # Savepoint: a failed insert must not poison the caller's transaction.
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient_id=recipient_id,
                    type=type,
                    title=title,
                    message=body,
                    link=link,
                    metadata=metadata or {},
                )
        except Exception:
            logger.exception("Could not persist %s notification for user %s", type, recipient_id)
            return None

        try:
            payload = dict(NotificationSerializer(notification).data)
        except Exception:
            # The record is stored; the recipient sees it on the next poll.
            logger.exception("Could not build push payload for notification %s", notification.pk)
            return notification

        event = settings.NOTIFICATION_PUSH_EVENT
        transaction.on_commit(lambda: cls._push(recipient_id, event, payload))
        return notification

    @classmethod
    def notify_admins(cls, type, title, body, link=None, metadata=None, exclude=None):
        """
        Fan out one notification to every platform administrator.
        """
        admins = User.objects.filter(is_staff=True, is_active=True)
        if exclude is not None:
            admins = admins.exclude(pk=getattr(exclude, 'pk', exclude))
        return [
            cls.notify(admin, type, title, body, link=link, metadata=metadata)
            for admin in admins
        ]

    @staticmethod
    def _push(recipient_id, event, payload):
        try:
            send_to_user(recipient_id, event, payload)
        except Exception:
            logger.warning("Real-time push to user %s failed", recipient_id, exc_info=True)

    @classmethod
    def mark_read(cls, user, notification_id):
        updated = Notification.objects.filter(pk=notification_id, recipient=user).update(is_read=True)
        return bool(updated)

    @classmethod
    def mark_all_read(cls, user):
        return Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)
