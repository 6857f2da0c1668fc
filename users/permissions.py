from rest_framework import permissions

class IsPlatformAdmin(permissions.BasePermission):
    """
    Only staff accounts (dispute mediators).
    """
    message = "Only platform administrators can perform this action."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_platform_admin
        )
