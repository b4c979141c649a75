from django.test import TestCase
from rest_framework.test import APITestCase

from assessments import services as sessions
from cores.exceptions import NotFound
from cores.models import AuditLog
from cores.testing import make_candidate, make_scenario_test, make_user
from .models import Question, Test
from . import services


def reaction_payload(**overrides):
    payload = {
        "title": "Reaction Time",
        "description": "Simple and choice reaction",
        "test_type": "reaction",
        "difficulty": "easy",
        "duration_minutes": 15,
        "passing_score": 60,
        "total_marks": 10,
        "questions": [
            {
                "text": "Which light turned on first?",
                "question_type": "mcq",
                "marks": 6,
                "options": [
                    {"text": "Red", "is_correct": True},
                    {"text": "Green", "is_correct": False},
                ],
            },
            {
                "text": "Describe your strategy",
                "question_type": "theory",
                "marks": 4,
            },
        ],
    }
    payload.update(overrides)
    return payload



class CatalogServiceTests(TestCase):

    def test_get_test_unknown_is_not_found(self):
        with self.assertRaises(NotFound):
            services.get_test(404404)

    def test_deactivate_is_a_soft_delete(self):
        test = make_scenario_test()
        services.deactivate_test(test.pk)

        test.refresh_from_db()
        self.assertFalse(test.is_active)
        self.assertTrue(Test.objects.filter(pk=test.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action='DELETE', target_model='Test').exists())

    def test_by_type_returns_active_published_only(self):
        published = make_scenario_test(is_published=True)
        make_scenario_test(is_published=False)
        make_scenario_test(is_published=True, is_active=False)
        make_scenario_test(is_published=True, test_type=Test.TestType.VISUAL)

        self.assertEqual(list(services.tests_by_type("concentration")), [published])

    def test_question_marks_total(self):
        self.assertEqual(make_scenario_test().question_marks_total, 100)

    def test_correct_option_is_first_flagged(self):
        question = make_scenario_test().questions.last()
        self.assertEqual(question.correct_option().text, "Y")


class CatalogApiTests(APITestCase):

    def setUp(self):
        self.admin = make_user("admin@example.com", role="admin")
        self.evaluator = make_user("eval@example.com", role="evaluator")
        self.candidate = make_candidate()

    def test_evaluator_creates_test_with_questions(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/tests/', reaction_payload(), format='json')

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data['total_questions'], 2)
        self.assertEqual(response.data['created_by'], self.evaluator.pk)
        self.assertTrue(response.data['is_active'])

        test = Test.objects.get(pk=response.data['id'])
        first, second = test.questions.all()
        self.assertEqual((first.order, second.order), (0, 1))
        self.assertEqual(second.question_type, Question.QuestionType.THEORY)
        self.assertEqual(first.correct_option().text, "Red")

    def test_marks_must_add_up_to_total(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/tests/', reaction_payload(total_marks=50), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('total_marks', response.data)

    def test_empty_question_list_counts_as_zero_marks(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/tests/', reaction_payload(questions=[]), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('total_marks', response.data)

    def test_clearing_questions_requires_matching_total(self):
        test = make_scenario_test()
        self.client.force_authenticate(self.evaluator)

        response = self.client.patch(f'/api/tests/{test.pk}/', {'questions': []}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(test.questions.count(), 2)

        response = self.client.patch(f'/api/tests/{test.pk}/', {'questions': [], 'total_marks': 0}, format='json')
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(test.questions.count(), 0)

    def test_test_without_questions_is_accepted(self):
        self.client.force_authenticate(self.evaluator)
        payload = reaction_payload()
        del payload['questions']
        response = self.client.post('/api/tests/', payload, format='json')
        self.assertEqual(response.status_code, 201)

    def test_passing_score_is_a_percentage(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/tests/', reaction_payload(passing_score=120), format='json')
        self.assertEqual(response.status_code, 400)

    def test_candidate_cannot_create(self):
        self.client.force_authenticate(self.candidate.user)
        response = self.client.post('/api/tests/', reaction_payload(), format='json')
        self.assertEqual(response.status_code, 403)

    def test_candidate_view_hides_answer_key(self):
        test = make_scenario_test()
        self.client.force_authenticate(self.candidate.user)
        response = self.client.get(f'/api/tests/{test.pk}/')

        self.assertEqual(response.status_code, 200)
        options = response.data['questions'][0]['options']
        self.assertEqual([o['text'] for o in options], ["A", "B"])
        self.assertNotIn('is_correct', options[0])

    def test_staff_view_includes_answer_key(self):
        test = make_scenario_test()
        self.client.force_authenticate(self.evaluator)
        response = self.client.get(f'/api/tests/{test.pk}/')

        self.assertTrue(response.data['questions'][0]['options'][0]['is_correct'])

    def test_list_hides_inactive_and_paginates(self):
        for _ in range(3):
            make_scenario_test()
        make_scenario_test(is_active=False)
        self.client.force_authenticate(self.candidate.user)

        response = self.client.get('/api/tests/?limit=2')
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(len(response.data['items']), 2)

        response = self.client.get('/api/tests/?page=5&limit=2')
        self.assertEqual(response.data, {'items': [], 'total': 3})

    def test_list_filters_by_type(self):
        make_scenario_test()
        make_scenario_test(test_type=Test.TestType.MEMORY)
        self.client.force_authenticate(self.evaluator)

        response = self.client.get('/api/tests/?test_type=memory')
        self.assertEqual(response.data['total'], 1)

    def test_by_type_endpoint(self):
        make_scenario_test(is_published=True, test_type=Test.TestType.VISUAL)
        self.client.force_authenticate(self.candidate.user)

        response = self.client.get('/api/tests/by-type/visual/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

    def test_only_admin_deletes(self):
        test = make_scenario_test()

        self.client.force_authenticate(self.evaluator)
        self.assertEqual(self.client.delete(f'/api/tests/{test.pk}/').status_code, 403)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(f'/api/tests/{test.pk}/').status_code, 204)
        test.refresh_from_db()
        self.assertFalse(test.is_active)

        # Still retrievable by id after the soft delete
        self.assertEqual(self.client.get(f'/api/tests/{test.pk}/').status_code, 200)

    def test_questions_can_be_replaced_before_any_session(self):
        test = make_scenario_test()
        self.client.force_authenticate(self.evaluator)

        response = self.client.patch(f'/api/tests/{test.pk}/', {
            'total_marks': 10,
            'questions': reaction_payload()['questions'],
        }, format='json')

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(test.questions.count(), 2)
        self.assertEqual(test.questions.first().text, "Which light turned on first?")

    def test_questions_are_frozen_once_sessions_exist(self):
        test = make_scenario_test()
        sessions.create_session(self.candidate.pk, test.pk)
        self.client.force_authenticate(self.evaluator)

        response = self.client.patch(f'/api/tests/{test.pk}/', {
            'total_marks': 10,
            'questions': reaction_payload()['questions'],
        }, format='json')
        self.assertEqual(response.status_code, 409)

        response = self.client.patch(f'/api/tests/{test.pk}/', {'title': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['title'], 'Renamed')

    def test_total_marks_change_is_checked_against_existing_questions(self):
        test = make_scenario_test()
        self.client.force_authenticate(self.evaluator)

        response = self.client.patch(f'/api/tests/{test.pk}/', {'total_marks': 90}, format='json')
        self.assertEqual(response.status_code, 400)
