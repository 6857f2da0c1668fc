from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'phone_number', 'profile_image',
            'roles', 'active_role', 'language_preference', 'is_staff'
        ]
        read_only_fields = ['id', 'email', 'roles', 'active_role', 'is_staff']

class UserSummarySerializer(serializers.ModelSerializer):
    """
    Compact party info embedded in contracts and disputes.
    """
    class Meta:
        model = User
        fields = ['id', 'full_name', 'email']

class RegistrationSerializer(serializers.ModelSerializer):
    """
    Email sign-up with the role the user starts in (client by default).
    """
    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(choices=User.Roles.choices, write_only=True, required=False)

    class Meta:
        model = User
        fields = ['email', 'full_name', 'password', 'phone_number', 'language_preference', 'role']

    def create(self, validated_data):
        role = validated_data.pop('role', User.Roles.CLIENT)
        password = validated_data.pop('password')

        return User.objects.create_user(
            username=validated_data['email'],
            password=password,
            roles=[role],
            active_role=role,
            **validated_data
        )

class AddRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Roles.choices)
