import datetime

from django.test import TestCase
from rest_framework.test import APITestCase

from cores.exceptions import NotFound
from cores.models import AuditLog
from cores.testing import make_candidate, make_scenario_test, make_user
from .models import Candidate
from .services import get_candidate


class CandidateModelTests(TestCase):

    def test_application_number_is_generated(self):
        candidate = make_candidate()
        self.assertRegex(candidate.application_number, r"^APP-[0-9A-Z]+-[0-9A-Z]{4}$")

    def test_application_number_is_kept_on_save(self):
        candidate = make_candidate()
        number = candidate.application_number
        candidate.nationality = "Kenyan"
        candidate.save()
        self.assertEqual(candidate.application_number, number)

    def test_lookup(self):
        candidate = make_candidate()
        self.assertEqual(get_candidate(candidate.pk), candidate)
        with self.assertRaises(NotFound):
            get_candidate(55555)


class CandidateApiTests(APITestCase):

    def setUp(self):
        self.admin = make_user("admin@example.com", role="admin")
        self.evaluator = make_user("eval@example.com", role="evaluator")
        self.candidate = make_candidate("cand@example.com")

    def create_payload(self, user, **extra):
        data = {
            "user": user.pk,
            "date_of_birth": datetime.date(2000, 1, 30).isoformat(),
            "gender": "male",
            "primary_phone": "+15550199",
        }
        data.update(extra)
        return data

    def test_evaluator_creates_candidate(self):
        account = make_user("fresh@example.com")
        test = make_scenario_test()
        self.client.force_authenticate(self.evaluator)

        response = self.client.post(
            '/api/candidates/', self.create_payload(account, assigned_tests=[test.pk]), format='json'
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data['email'], "fresh@example.com")
        self.assertEqual(response.data['application_status'], "pending")
        self.assertEqual(response.data['assigned_tests'], [test.pk])
        self.assertTrue(response.data['application_number'].startswith("APP-"))
        self.assertTrue(AuditLog.objects.filter(action='CREATE', target_model='Candidate').exists())

    def test_staff_account_cannot_be_a_candidate(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/candidates/', self.create_payload(self.admin), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('user', response.data)

    def test_one_record_per_account(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/candidates/', self.create_payload(self.candidate.user), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('user', response.data)
        self.assertEqual(Candidate.objects.filter(user=self.candidate.user).count(), 1)

    def test_resubmitting_own_account_on_update_is_accepted(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.put(
            f'/api/candidates/{self.candidate.pk}/', self.create_payload(self.candidate.user), format='json'
        )
        self.assertEqual(response.status_code, 200, response.data)

    def test_list_is_staff_only(self):
        self.client.force_authenticate(self.candidate.user)
        self.assertEqual(self.client.get('/api/candidates/').status_code, 403)

        self.client.force_authenticate(make_user("super@example.com", role="supervisor"))
        response = self.client.get('/api/candidates/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 1)

    def test_list_filters(self):
        make_candidate("second@example.com", application_status=Candidate.ApplicationStatus.TESTED)
        self.client.force_authenticate(self.evaluator)

        response = self.client.get('/api/candidates/?status=tested')
        self.assertEqual(response.data['total'], 1)

        response = self.client.get('/api/candidates/?search=cand@')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['items'][0]['id'], self.candidate.pk)

    def test_candidate_reads_only_own_record(self):
        other = make_candidate("other@example.com")
        self.client.force_authenticate(self.candidate.user)

        response = self.client.get(f'/api/candidates/{self.candidate.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['application_number'], self.candidate.application_number)

        self.assertEqual(self.client.get(f'/api/candidates/{other.pk}/').status_code, 403)

    def test_candidate_cannot_update_self(self):
        self.client.force_authenticate(self.candidate.user)
        response = self.client.patch(
            f'/api/candidates/{self.candidate.pk}/', {"application_status": "selected"}, format='json'
        )
        self.assertEqual(response.status_code, 403)

    def test_status_update_by_evaluator(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.patch(
            f'/api/candidates/{self.candidate.pk}/', {"application_status": "under_review"}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.candidate.refresh_from_db()
        self.assertEqual(self.candidate.application_status, "under_review")

    def test_only_admin_deletes(self):
        self.client.force_authenticate(self.evaluator)
        self.assertEqual(self.client.delete(f'/api/candidates/{self.candidate.pk}/').status_code, 403)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(f'/api/candidates/{self.candidate.pk}/').status_code, 204)
        self.assertFalse(Candidate.objects.filter(pk=self.candidate.pk).exists())

    def test_unknown_candidate(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.get('/api/candidates/424242/')
        self.assertEqual(response.status_code, 404)
        self.assertIn('error', response.data)
