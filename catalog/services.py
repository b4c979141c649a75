import logging

from cores.exceptions import NotFound
from cores.models import AuditLog
from .models import Test

logger = logging.getLogger(__name__)


def get_test(test_id):
    try:
        return Test.objects.prefetch_related('questions__options').get(pk=test_id)
    except (Test.DoesNotExist, ValueError, TypeError):
        raise NotFound("Test not found")


def tests_by_type(test_type):
    return Test.objects.filter(test_type=test_type, is_active=True, is_published=True)


def deactivate_test(test_id, actor=None):
    test = get_test(test_id)
    test.is_active = False
    test.save(update_fields=['is_active', 'updated_at'])
    AuditLog.record(actor, 'DELETE', test, details=f"Deactivated test: {test.title}")
    logger.info("Test %s deactivated", test.pk)
    return test
