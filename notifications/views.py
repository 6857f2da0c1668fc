from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from jobboard_core.exceptions import NotFound
from .models import Notification
from .serializers import NotificationSerializer
from .services import NotificationService

class NotificationListView(APIView):
    """
    Latest notifications for the current user plus the unread badge count.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', 10))
        except ValueError:
            limit = 10
        limit = max(1, min(limit, 100))

        queryset = Notification.objects.filter(recipient=request.user)
        notifications = queryset[:limit]
        return Response({
            "count": len(notifications),
            "unread_count": queryset.filter(is_read=False).count(),
            "notifications": NotificationSerializer(notifications, many=True).data,
        })

class MarkNotificationReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, pk):
        if not NotificationService.mark_read(request.user, pk):
            raise NotFound("Notification not found.")
        notification = Notification.objects.get(pk=pk)
        return Response(NotificationSerializer(notification).data)

class MarkAllNotificationsReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request):
        updated = NotificationService.mark_all_read(request.user)
        return Response({"message": "All notifications marked as read", "updated": updated})
