# accounts/views.py
import logging
import secrets

from axes.utils import reset as reset_axes_lockout
from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.authtoken.models import Token
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import AccountLockedError, DataValidationError
from core.models import ParentAssignment, Student
from core.services.notifications import notify_admins
from core.services.students import assign_children

from .permissions import HasPrivilege
from .serializers import (
    AssignDefaultPrivilegesSerializer,
    AssignStudentsSerializer,
    ChangePasswordSerializer,
    CurrentUserSerializer,
    GrantPrivilegeSerializer,
    LockUserSerializer,
    LoginSerializer,
    PasswordResetRequestSerializer,
    ResetPrivilegesSerializer,
    UserPrivilegeSerializer,
    UserSerializer,
)
from .services import (
    assign_default_privileges,
    grant_privilege,
    reset_privileges,
    revoke_privilege,
)

User = get_user_model()
logger = logging.getLogger(__name__)
security_logger = logging.getLogger('accounts.security')


def _login_response(user, token):
    return {
        'token': token.key,
        'user': CurrentUserSerializer(user).data,
        'requires_password_change': user.must_change_password,
    }


class LoginView(APIView):
    """Token login with username or e-mail; failures are counted by axes."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        username = data.get('username')
        if not username:
            match = User.objects.filter(email__iexact=data['email']).first()
            username = match.username if match else data['email']

        django_request = request._request
        user = authenticate(request=django_request, username=username, password=data['password'])

        if getattr(django_request, 'axes_locked_out', False):
            security_logger.warning(f"Login refused for locked out account {username}")
            return Response(
                {
                    'error': (
                        f"Too many failed login attempts. Try again in "
                        f"{settings.LOGIN_COOLOFF_MINUTES} minutes."
                    )
                },
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )

        if user is None:
            security_logger.info(f"Failed login for {username}")
            return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

        if user.is_locked:
            raise AccountLockedError(
                "This account has been locked. Contact an administrator.",
                details={'reason': user.lock_reason} if user.lock_reason else None,
                user=user,
            )

        token, _ = Token.objects.get_or_create(user=user)
        security_logger.info(f"User {user.username} logged in")
        return Response(_login_response(user, token))


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        Token.objects.filter(user=request.user).delete()
        logger.info(f"User {request.user.username} logged out")
        return Response({'message': 'Logged out'})


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(CurrentUserSerializer(request.user).data)


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.check_password(serializer.validated_data['current_password']):
            raise DataValidationError(
                "Current password is incorrect",
                validation_errors={'current_password': 'Incorrect password'},
            )

        user.set_password(serializer.validated_data['new_password'])
        user.must_change_password = False
        user.save(update_fields=['password', 'must_change_password'])

        # Old tokens stop working after a password change
        Token.objects.filter(user=user).delete()
        token = Token.objects.create(user=user)
        security_logger.info(f"User {user.username} changed their password")
        return Response({'message': 'Password changed', 'token': token.key})


class PasswordResetRequestView(APIView):
    """Passes the request on to the administrators; the response never reveals whether the account exists."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        identifier = serializer.validated_data.get('username') or serializer.validated_data.get('email')

        user = User.objects.filter(Q(username=identifier) | Q(email__iexact=identifier)).first()
        if user is not None:
            notify_admins(
                title="Password Reset Request",
                message=f"{user.display_name} ({user.username}) has asked for a password reset.",
                notification_type='SECURITY',
                link=f"/users/{user.pk}",
            )
            security_logger.info(f"Password reset requested for {user.username}")
        else:
            security_logger.info(f"Password reset requested for unknown account {identifier}")

        return Response({'message': 'If the account exists, an administrator has been notified.'})


class UserViewSet(viewsets.ModelViewSet):
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    privilege_map = {
        'list': 'view_users',
        'retrieve': 'view_users',
        'create': 'add_user',
        'update': 'edit_user',
        'partial_update': 'edit_user',
        'destroy': 'delete_user',
        'lock': 'lock_user',
        'unlock': 'unlock_user',
        'reset_password': 'reset_user_password',
        'privileges': ('assign_privileges', 'remove_privileges'),
        'reset_privileges': 'assign_privileges',
        'assign_default_privileges': 'assign_privileges',
        'assign_students': 'assign_parent_students',
        'assigned_students': ('assign_parent_students', 'view_users'),
        'unassign_student': 'assign_parent_students',
    }
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering_fields = ['username', 'role', 'date_joined']
    filterset_fields = ['role', 'is_active', 'is_locked']

    def get_queryset(self):
        return User.objects.all().order_by('username')

    def perform_create(self, serializer):
        user = serializer.save()
        security_logger.info(f"User {user.username} ({user.role}) created by {self.request.user.username}")

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise DataValidationError("You cannot delete your own account")
        security_logger.info(f"User {instance.username} deleted by {self.request.user.username}")
        instance.delete()

    @action(detail=True, methods=['post'])
    def lock(self, request, pk=None):
        user = self.get_object()
        serializer = LockUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if user.pk == request.user.pk:
            raise DataValidationError("You cannot lock your own account")

        user.lock(serializer.validated_data.get('reason', ''))
        Token.objects.filter(user=user).delete()
        security_logger.warning(f"User {user.username} locked by {request.user.username}: {user.lock_reason}")
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['post'])
    def unlock(self, request, pk=None):
        user = self.get_object()
        user.unlock()
        reset_axes_lockout(username=user.username)
        security_logger.info(f"User {user.username} unlocked by {request.user.username}")
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=['post'], url_path='reset-password')
    def reset_password(self, request, pk=None):
        user = self.get_object()
        temporary_password = request.data.get('password') or secrets.token_urlsafe(9)
        user.set_password(temporary_password)
        user.must_change_password = True
        user.save(update_fields=['password', 'must_change_password'])
        Token.objects.filter(user=user).delete()
        security_logger.info(f"Password of {user.username} reset by {request.user.username}")
        return Response({'temporary_password': temporary_password, 'must_change_password': True})

    @action(detail=True, methods=['get', 'post', 'delete'])
    def privileges(self, request, pk=None):
        user = self.get_object()
        if request.method == 'GET':
            grants = user.privileges.select_related('assigned_by')
            return Response(UserPrivilegeSerializer(grants, many=True).data)

        if request.method == 'POST':
            serializer = GrantPrivilegeSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            grant = grant_privilege(
                user,
                serializer.validated_data['privilege'],
                expires_at=serializer.validated_data.get('expires_at'),
                by=request.user,
            )
            return Response(UserPrivilegeSerializer(grant).data, status=status.HTTP_201_CREATED)

        name = request.data.get('privilege') or request.query_params.get('privilege')
        if not name:
            raise DataValidationError("privilege is required", validation_errors={'privilege': 'required'})
        revoke_privilege(user, name, by=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='reset-privileges')
    def reset_privileges(self, request, pk=None):
        user = self.get_object()
        serializer = ResetPrivilegesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reset_privileges(user, serializer.validated_data['privileges'], by=request.user)
        return Response(UserPrivilegeSerializer(user.privileges.all(), many=True).data)

    @action(detail=False, methods=['post'], url_path='assign-default-privileges')
    def assign_default_privileges(self, request):
        serializer = AssignDefaultPrivilegesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        users = User.objects.all()
        if serializer.validated_data.get('role'):
            users = users.filter(role=serializer.validated_data['role'])
        if serializer.validated_data.get('user_ids'):
            users = users.filter(pk__in=serializer.validated_data['user_ids'])

        count = assign_default_privileges(users, by=request.user)
        return Response({'updated': count})

    def _parent(self):
        parent = self.get_object()
        if parent.role != 'PARENT':
            raise DataValidationError(f"{parent.username} is not a parent account")
        return parent

    @action(detail=True, methods=['post'], url_path='assign-students')
    def assign_students(self, request, pk=None):
        parent = self._parent()
        serializer = AssignStudentsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ids = serializer.validated_data['student_ids']
        students = list(Student.objects.filter(pk__in=ids))
        missing = sorted(set(ids) - {student.pk for student in students})
        if missing:
            raise DataValidationError("Unknown students", validation_errors={'student_ids': missing})

        created = assign_children(parent, students)
        return Response({'assigned': created}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='assigned-students')
    def assigned_students(self, request, pk=None):
        from core.serializers import StudentSummarySerializer

        parent = self._parent()
        students = Student.objects.filter(parent_assignments__parent=parent).order_by('name')
        return Response(StudentSummarySerializer(students, many=True).data)

    @action(detail=True, methods=['delete'], url_path=r'unassign-student/(?P<student_id>\d+)')
    def unassign_student(self, request, pk=None, student_id=None):
        parent = self._parent()
        assignment = get_object_or_404(ParentAssignment, parent=parent, student_id=student_id)
        assignment.delete()
        logger.info(f"Student {student_id} unassigned from parent {parent.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
