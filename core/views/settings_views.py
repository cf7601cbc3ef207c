import logging

from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.services import has_privilege
from core.exceptions import PermissionDeniedError
from core.models import CLASS_CHOICES, CLASS_STREAMS, CLASS_SUBJECTS, SchoolSettings
from core.serializers import SchoolSettingsSerializer
from core.services.grading import school_grade_system

logger = logging.getLogger(__name__)


class SchoolSettingsView(APIView):
    """Read for everyone signed in; changes need edit_settings"""

    def get(self, request):
        settings_obj = SchoolSettings.get_settings()
        data = SchoolSettingsSerializer(settings_obj).data
        data['grade_system'] = [
            {'grade': grade, **band} for grade, band in school_grade_system()
        ]
        return Response(data)

    def put(self, request):
        return self._update(request, partial=False)

    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, partial):
        if not has_privilege(request.user, 'edit_settings'):
            raise PermissionDeniedError(
                "You cannot change school settings", required_privilege='edit_settings', user=request.user
            )
        serializer = SchoolSettingsSerializer(SchoolSettings.get_settings(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save(updated_by=request.user)
        logger.info(f"School settings updated by {request.user.username}: {sorted(serializer.validated_data)}")
        return Response(serializer.data)


class ClassCatalogueView(APIView):
    def get(self, request):
        return Response([
            {
                'class_name': class_name,
                'streams': CLASS_STREAMS.get(class_name, []),
                'subjects': CLASS_SUBJECTS.get(class_name, []),
            }
            for class_name, _ in CLASS_CHOICES
        ])
