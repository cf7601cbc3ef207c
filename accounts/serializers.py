# accounts/serializers.py
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import ROLE_CHOICES, UserPrivilege
from .privileges import ALL_PRIVILEGES
from .services import effective_privileges

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    role_display = serializers.CharField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'display_name',
            'role', 'role_display', 'phone_number', 'address', 'date_of_birth',
            'is_active', 'is_locked', 'lock_reason', 'locked_at',
            'must_change_password', 'assigned_classes', 'date_joined', 'last_login',
            'password',
        ]
        read_only_fields = ['is_locked', 'lock_reason', 'locked_at', 'date_joined', 'last_login']

    def validate_assigned_classes(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("assigned_classes must be a list")
        for entry in value:
            if not isinstance(entry, dict) or not entry.get('class_name'):
                raise serializers.ValidationError("Each assignment needs a class_name")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        if not password:
            raise serializers.ValidationError({'password': 'Password is required'})
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class CurrentUserSerializer(UserSerializer):
    privileges = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = [field for field in UserSerializer.Meta.fields if field != 'password'] + ['privileges']

    def get_privileges(self, obj):
        return sorted(effective_privileges(obj))


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(style={'input_type': 'password'})

    def validate(self, attrs):
        if not attrs.get('username') and not attrs.get('email'):
            raise serializers.ValidationError("Username or email is required")
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField()

    def validate_new_password(self, value):
        validate_password(value, self.context['request'].user)
        return value


class PasswordResetRequestSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('username') and not attrs.get('email'):
            raise serializers.ValidationError("Username or email is required")
        return attrs


class UserPrivilegeSerializer(serializers.ModelSerializer):
    assigned_by = serializers.StringRelatedField()
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = UserPrivilege
        fields = ['id', 'privilege', 'assigned_at', 'assigned_by', 'expires_at', 'is_expired']


class GrantPrivilegeSerializer(serializers.Serializer):
    privilege = serializers.ChoiceField(choices=ALL_PRIVILEGES)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class ResetPrivilegesSerializer(serializers.Serializer):
    privileges = serializers.ListField(child=serializers.ChoiceField(choices=ALL_PRIVILEGES))


class LockUserSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class AssignDefaultPrivilegesSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False)
    user_ids = serializers.ListField(child=serializers.IntegerField(), required=False)


class AssignStudentsSerializer(serializers.Serializer):
    student_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
