from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    photoURL = serializers.URLField(source='photo_url')
    emailVerified = serializers.BooleanField(source='email_verified')
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')
    lastLoginAt = serializers.DateTimeField(source='last_login_at')

    class Meta:
        model = User
        fields = ['uid', 'email', 'name', 'photoURL', 'role', 'phone', 'address', 'preferences',
                  'emailVerified', 'createdAt', 'updatedAt', 'lastLoginAt']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    photoURL = serializers.URLField(source='photo_url', required=False, allow_blank=True, max_length=500)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    photoURL = serializers.URLField(source='photo_url', required=False, allow_blank=True, max_length=500)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address = serializers.DictField(required=False)
    preferences = serializers.DictField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No updatable profile fields supplied')
        return attrs


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(
        choices=User.ROLE_CHOICES,
        error_messages={
            'required': 'Invalid role. Must be one of: user, staff, admin',
            'invalid_choice': 'Invalid role. Must be one of: user, staff, admin',
            'null': 'Invalid role. Must be one of: user, staff, admin',
        },
    )
