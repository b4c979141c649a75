import re
from unittest import mock

from django.test import SimpleTestCase
from rest_framework.test import APITestCase

from candidates.models import Candidate
from .codes import generate_code, generate_unique_code, to_base36
from .models import AuditLog
from .permissions import is_allowed
from .testing import make_candidate, make_user

CODE_PATTERN = re.compile(r"^SES-[0-9A-Z]+-[0-9A-Z]{6}$")


class CodeGenerationTests(SimpleTestCase):

    def test_base36(self):
        self.assertEqual(to_base36(0), "0")
        self.assertEqual(to_base36(35), "Z")
        self.assertEqual(to_base36(36), "10")
        self.assertEqual(to_base36(36 ** 3 + 1), "1001")

    def test_code_shape(self):
        self.assertRegex(generate_code("SES"), CODE_PATTERN)
        self.assertRegex(generate_code("APP", suffix_length=4), r"^APP-[0-9A-Z]+-[0-9A-Z]{4}$")

    def test_codes_differ(self):
        codes = {generate_code("SES") for _ in range(50)}
        self.assertEqual(len(codes), 50)


class UniqueCodeTests(APITestCase):

    def test_retries_past_a_taken_code(self):
        taken = make_candidate().application_number
        with mock.patch('cores.codes.generate_code', side_effect=[taken, "APP-FRESH-0001"]):
            code = generate_unique_code("APP", Candidate, "application_number", suffix_length=4)
        self.assertEqual(code, "APP-FRESH-0001")

    def test_gives_up_after_repeated_collisions(self):
        taken = make_candidate().application_number
        with mock.patch('cores.codes.generate_code', return_value=taken):
            with self.assertRaises(RuntimeError):
                generate_unique_code("APP", Candidate, "application_number", attempts=3)


class CapabilityTableTests(SimpleTestCase):

    def test_writers_manage_tests(self):
        for role in ("admin", "evaluator"):
            self.assertTrue(is_allowed(role, "tests.create"))
        self.assertFalse(is_allowed("supervisor", "tests.create"))
        self.assertFalse(is_allowed("candidate", "tests.create"))

    def test_only_admin_deletes(self):
        self.assertTrue(is_allowed("admin", "candidates.destroy"))
        self.assertFalse(is_allowed("evaluator", "candidates.destroy"))
        self.assertFalse(is_allowed("evaluator", "tests.destroy"))

    def test_candidates_take_tests_but_see_no_analytics(self):
        for operation in ("sessions.start", "sessions.answer", "sessions.submit", "results.list"):
            self.assertTrue(is_allowed("candidate", operation))
        for operation in ("candidates.list", "analytics.dashboard", "reports.candidate", "audit.list"):
            self.assertFalse(is_allowed("candidate", operation))

    def test_unknown_operation_or_role_is_denied(self):
        self.assertFalse(is_allowed("admin", "tests.launch"))
        self.assertFalse(is_allowed("", "tests.list"))
        self.assertFalse(is_allowed(None, "tests.list"))


class ErrorFormatTests(APITestCase):

    def test_not_found_body(self):
        self.client.force_authenticate(make_user("eval@example.com", role="evaluator"))
        response = self.client.get('/api/sessions/987654/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(set(response.data), {"error", "code"})

    def test_unauthenticated_body(self):
        response = self.client.get('/api/tests/')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["code"], "not_authenticated")

    def test_validation_errors_keep_field_keys(self):
        self.client.force_authenticate(make_user("eval@example.com", role="evaluator"))
        response = self.client.post('/api/sessions/', {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn("candidate_id", response.data)


class AuditLogApiTests(APITestCase):

    def setUp(self):
        self.admin = make_user("admin@example.com", role="admin")
        AuditLog.record(self.admin, 'LOGIN', self.admin, details="Login")
        AuditLog.record(self.admin, 'CREATE', self.admin, details="Created")

    def test_admin_lists_newest_first(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/audit-logs/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['items'][0]['action'], 'CREATE')
        self.assertEqual(response.data['items'][0]['actor_email'], "admin@example.com")

    def test_filter_by_action(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/audit-logs/?action=login')

        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['items'][0]['details'], "Login")

    def test_staff_other_than_admin_are_denied(self):
        self.client.force_authenticate(make_user("super@example.com", role="supervisor"))
        self.assertEqual(self.client.get('/api/audit-logs/').status_code, 403)

    def test_anonymous_actor_is_stored_as_null(self):
        entry = AuditLog.record(None, 'RESULT', self.admin, details="system")
        self.assertIsNone(entry.actor)
