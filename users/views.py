from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import get_user_model
from projects.models import FreelancerProfile
from .serializers import UserSerializer, RegistrationSerializer, AddRoleSerializer

User = get_user_model()

def tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}

class RegisterView(generics.CreateAPIView):
    """
    Sign up and receive a token pair straight away, so the client does not
    need a second round trip to /login/.
    """
    queryset = User.objects.all()
    permission_classes = (permissions.AllowAny,)
    serializer_class = RegistrationSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response(
            {"user": UserSerializer(user).data, **tokens_for(user)},
            status=status.HTTP_201_CREATED
        )

class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    Get or Update own profile (e.g., change name, language).
    """
    permission_classes = (permissions.IsAuthenticated,)
    serializer_class = UserSerializer

    def get_object(self):
        return self.request.user

class AddRoleView(APIView):
    """
    Activate a role and switch to it, e.g. a client who starts freelancing.
    POST { "role": "freelancer" }
    """
    permission_classes = (permissions.IsAuthenticated,)

    def post(self, request):
        serializer = AddRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = serializer.validated_data['role']

        user = request.user
        if role not in user.roles:
            user.roles = [*user.roles, role]
        user.active_role = role
        user.save(update_fields=['roles', 'active_role'])

        if role == User.Roles.FREELANCER:
            FreelancerProfile.objects.get_or_create(user=user)

        return Response({"roles": user.roles, "active_role": user.active_role})
