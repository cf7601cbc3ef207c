import logging

from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege, is_admin
from accounts.services import has_privilege
from core.exceptions import PermissionDeniedError
from core.filters import MessageFilter
from core.models import Message
from core.serializers import MessageSerializer, RecipientSerializer, SendMessageSerializer
from core.services import messaging

logger = logging.getLogger(__name__)


class MessageViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.DestroyModelMixin,
                     viewsets.GenericViewSet):
    """Inbox and sent messages; sending checks the messaging rules for every recipient"""
    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = MessageFilter
    search_fields = ['subject', 'content']
    ordering_fields = ['created_at', 'priority']
    privilege_map = {
        'list': 'view_messages',
        'retrieve': 'view_messages',
        'unread_count': 'view_messages',
        'recipients': ('send_message', 'reply_message'),
        'create': ('send_message', 'reply_message'),
        'send': ('send_message', 'reply_message'),
        'destroy': 'delete_message',
        'mark_read': ('mark_message_read', 'view_messages'),
        'mark_all_read': ('mark_message_read', 'view_messages'),
    }

    def get_queryset(self):
        user = self.request.user
        queryset = Message.objects.select_related('sender', 'recipient', 'student')
        if is_admin(user) and has_privilege(user, 'export_messages'):
            return queryset
        # Recipients only see a message once it is approved
        return queryset.filter(Q(sender=user) | Q(recipient=user, is_approved=True))

    def create(self, request, *args, **kwargs):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        sent = messaging.send_message(
            request.user,
            data['recipients'],
            data['subject'],
            data['content'],
            message_type=data['message_type'],
            priority=data['priority'],
            student=data.get('student'),
        )
        return Response(MessageSerializer(sent, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def send(self, request):
        return self.create(request)

    def perform_destroy(self, instance):
        user = self.request.user
        if instance.sender_id != user.pk and instance.recipient_id != user.pk and not is_admin(user):
            raise PermissionDeniedError("You can only delete your own messages", user=user)
        instance.delete()

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        message = self.get_object()
        if message.recipient_id != request.user.pk:
            raise PermissionDeniedError("Only the recipient can mark a message as read", user=request.user)
        if not message.is_read:
            message.is_read = True
            message.read_at = timezone.now()
            message.save(update_fields=['is_read', 'read_at'])
        return Response(MessageSerializer(message).data)

    @action(detail=False, methods=['post'], url_path='mark-all-read')
    def mark_all_read(self, request):
        updated = Message.objects.filter(recipient=request.user, is_read=False, is_approved=True).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({'updated': updated})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        count = Message.objects.filter(recipient=request.user, is_read=False, is_approved=True).count()
        return Response({'unread_count': count})

    @action(detail=False, methods=['get'])
    def recipients(self, request):
        users = messaging.eligible_recipients(request.user)
        return Response({
            'roles': messaging.messagable_roles_for(request.user),
            'restrictions': messaging.restrictions_for(request.user.role),
            'recipients': RecipientSerializer(users, many=True).data,
        })

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        if not is_admin(request.user):
            raise PermissionDeniedError("Only administrators approve messages", user=request.user)
        message = messaging.approve_message(self.get_object(), request.user)
        return Response(MessageSerializer(message).data)
