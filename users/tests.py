from rest_framework.test import APITestCase
from rest_framework_simplejwt.settings import api_settings

from cores.models import AuditLog
from cores.testing import DEFAULT_PASSWORD, make_user
from .models import User


class RegistrationTests(APITestCase):

    def payload(self, **overrides):
        data = {
            "email": "new@example.com",
            "first_name": "Nia",
            "last_name": "Okafor",
            "password": "long-enough-1",
        }
        data.update(overrides)
        return data

    def test_register_creates_candidate_account(self):
        response = self.client.post('/api/auth/register/', self.payload(), format='json')

        self.assertEqual(response.status_code, 201, response.data)
        self.assertNotIn('password', response.data)
        user = User.objects.get(email="new@example.com")
        self.assertEqual(user.role, User.Role.CANDIDATE)
        self.assertTrue(user.check_password("long-enough-1"))

    def test_role_cannot_be_chosen(self):
        self.client.post('/api/auth/register/', self.payload(role="admin"), format='json')
        self.assertEqual(User.objects.get(email="new@example.com").role, User.Role.CANDIDATE)

    def test_short_password_rejected(self):
        response = self.client.post('/api/auth/register/', self.payload(password="short"), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.data)

    def test_duplicate_email_rejected(self):
        make_user("new@example.com")
        response = self.client.post('/api/auth/register/', self.payload(), format='json')
        self.assertEqual(response.status_code, 400)


class LoginTests(APITestCase):

    def setUp(self):
        self.user = make_user("eval@example.com", role="evaluator")

    def test_signing_key_is_long_enough_for_hs256(self):
        self.assertGreaterEqual(len(api_settings.SIGNING_KEY.encode()), 32)

    def test_login_by_email(self):
        response = self.client.post('/api/auth/login/', {
            "email": "eval@example.com", "password": DEFAULT_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, 200, response.data)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], "evaluator")
        self.assertTrue(AuditLog.objects.filter(action='LOGIN', actor=self.user).exists())

    def test_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            "email": "eval@example.com", "password": "nope-nope",
        }, format='json')

        self.assertEqual(response.status_code, 401)
        self.assertFalse(AuditLog.objects.filter(action='LOGIN').exists())

    def test_access_token_authenticates(self):
        tokens = self.client.post('/api/auth/login/', {
            "email": "eval@example.com", "password": DEFAULT_PASSWORD,
        }, format='json').data

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['email'], "eval@example.com")

        response = self.client.post('/api/auth/refresh/', {"refresh": tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)


class ProfileTests(APITestCase):

    def test_update_own_profile_but_not_role(self):
        user = make_user("cand@example.com")
        self.client.force_authenticate(user)

        response = self.client.patch('/api/profile/', {"first_name": "Ada", "role": "admin"}, format='json')

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertEqual(user.first_name, "Ada")
        self.assertEqual(user.role, User.Role.CANDIDATE)

    def test_profile_requires_login(self):
        self.assertEqual(self.client.get('/api/profile/').status_code, 401)
