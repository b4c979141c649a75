from django.test import TestCase
from rest_framework.test import APITestCase

from catalog.models import Question
from cores.exceptions import AlreadyCompleted, InvalidTransition, NotFound
from cores.models import AuditLog
from cores.testing import make_candidate, make_scenario_test, make_test, make_user
from . import services
from .models import Answer, TestSession


class SessionLifecycleTests(TestCase):

    def setUp(self):
        self.candidate = make_candidate()
        self.test = make_scenario_test()

    def test_create_schedules_an_empty_session(self):
        session = services.create_session(self.candidate.pk, self.test.pk)

        self.assertEqual(session.status, TestSession.Status.SCHEDULED)
        self.assertIsNone(session.score)
        self.assertIsNone(session.started_at)
        self.assertEqual(session.answers.count(), 0)
        self.assertRegex(session.session_code, r"^SES-[0-9A-Z]+-[0-9A-Z]{6}$")

    def test_session_codes_are_distinct(self):
        first = services.create_session(self.candidate.pk, self.test.pk)
        second = services.create_session(self.candidate.pk, self.test.pk)
        self.assertNotEqual(first.session_code, second.session_code)

    def test_create_with_unknown_test_is_not_found(self):
        with self.assertRaises(NotFound):
            services.create_session(self.candidate.pk, 999999)

    def test_create_with_unknown_candidate_is_not_found(self):
        with self.assertRaises(NotFound):
            services.create_session(999999, self.test.pk)

    def test_start_moves_to_in_progress(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        session = services.start_session(session.pk)

        self.assertEqual(session.status, TestSession.Status.IN_PROGRESS)
        self.assertIsNotNone(session.started_at)

    def test_start_twice_is_an_invalid_transition(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        services.start_session(session.pk)

        with self.assertRaises(InvalidTransition):
            services.start_session(session.pk)

    def test_start_unknown_session_is_not_found(self):
        with self.assertRaises(NotFound):
            services.start_session(424242)

    def test_submit_twice_raises_already_completed(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        services.start_session(session.pk)
        services.submit_session(session.pk)

        with self.assertRaises(AlreadyCompleted):
            services.submit_session(session.pk)

    def test_already_completed_is_an_invalid_transition(self):
        self.assertTrue(issubclass(AlreadyCompleted, InvalidTransition))

    def test_submit_on_scheduled_session_is_not_blocked(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        session = services.submit_session(session.pk)

        self.assertEqual(session.status, TestSession.Status.COMPLETED)
        self.assertIsNone(session.started_at)
        self.assertEqual(session.score['attempted'], 0)

    def test_completed_session_cannot_be_restarted(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        services.start_session(session.pk)
        services.submit_session(session.pk)

        with self.assertRaises(InvalidTransition):
            services.start_session(session.pk)

    def test_transitions_are_audited(self):
        session = services.create_session(self.candidate.pk, self.test.pk)
        services.start_session(session.pk)
        services.submit_session(session.pk)

        events = AuditLog.objects.filter(action='SESSION', target_object_id=str(session.pk))
        self.assertEqual(events.count(), 3)


class AnswerEvaluationTests(TestCase):

    def setUp(self):
        self.candidate = make_candidate()
        self.test = make_scenario_test()
        self.q1, self.q2 = self.test.questions.all()
        self.session = services.create_session(self.candidate.pk, self.test.pk)

    def test_answer_before_start_is_an_invalid_transition(self):
        with self.assertRaises(InvalidTransition):
            services.submit_answer(self.session.pk, self.q1.pk, "A")

    def test_answer_after_submit_is_an_invalid_transition(self):
        services.start_session(self.session.pk)
        services.submit_session(self.session.pk)

        with self.assertRaises(InvalidTransition):
            services.submit_answer(self.session.pk, self.q1.pk, "A")

    def test_unknown_question_is_not_found(self):
        services.start_session(self.session.pk)
        with self.assertRaises(NotFound):
            services.submit_answer(self.session.pk, 987654, "A")

    def test_question_from_another_test_is_not_found(self):
        other = make_test([(10, [("yes", True), ("no", False)])])
        services.start_session(self.session.pk)

        with self.assertRaises(NotFound):
            services.submit_answer(self.session.pk, other.questions.get().pk, "yes")

    def test_correct_mcq_answer_awards_full_marks(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q1.pk, "A")

        answer = Answer.objects.get(session=self.session, question=self.q1)
        self.assertTrue(answer.is_correct)
        self.assertEqual(answer.score, 50)
        self.assertEqual(answer.selected_answer, "A")

    def test_wrong_mcq_answer_awards_nothing(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q2.pk, "X")

        answer = Answer.objects.get(session=self.session, question=self.q2)
        self.assertFalse(answer.is_correct)
        self.assertEqual(answer.score, 0)

    def test_matching_is_exact(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q1.pk, "a")

        self.assertFalse(Answer.objects.get(session=self.session, question=self.q1).is_correct)

    def test_non_mcq_questions_are_never_scored(self):
        test = make_test([(20, [("anything", True)], Question.QuestionType.THEORY)])
        session = services.create_session(self.candidate.pk, test.pk)
        services.start_session(session.pk)
        services.submit_answer(session.pk, test.questions.get().pk, "anything")

        answer = session.answers.get()
        self.assertFalse(answer.is_correct)
        self.assertEqual(answer.score, 0)

    def test_first_option_flagged_correct_wins(self):
        test = make_test([(10, [("first", True), ("second", True)])])
        question = test.questions.get()

        self.assertEqual(services.evaluate_answer(question, "first"), (True, 10))
        self.assertEqual(services.evaluate_answer(question, "second"), (False, 0))

    def test_question_without_correct_option_scores_zero(self):
        test = make_test([(10, [("p", False), ("q", False)])])
        self.assertEqual(services.evaluate_answer(test.questions.get(), "p"), (False, 0))

    def test_reanswering_replaces_the_previous_answer(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q1.pk, "B")
        services.submit_answer(self.session.pk, self.q1.pk, "A")

        answers = list(self.session.answers.all())
        self.assertEqual(len(answers), 1)
        self.assertEqual(answers[0].selected_answer, "A")
        self.assertTrue(answers[0].is_correct)

    def test_time_taken_is_recorded(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q1.pk, "A", time_taken=17)

        self.assertEqual(Answer.objects.get(session=self.session).time_taken, 17)

    def test_time_taken_defaults_to_zero(self):
        services.start_session(self.session.pk)
        services.submit_answer(self.session.pk, self.q1.pk, "A")

        self.assertEqual(Answer.objects.get(session=self.session).time_taken, 0)


class ScoreComputationTests(TestCase):

    def setUp(self):
        self.candidate = make_candidate()
        self.test = make_scenario_test()
        self.q1, self.q2 = self.test.questions.all()

    def _complete(self, answers):
        session = services.create_session(self.candidate.pk, self.test.pk)
        services.start_session(session.pk)
        for question, answer in answers:
            services.submit_answer(session.pk, question.pk, answer)
        return services.submit_session(session.pk)

    def test_half_right_scores_fifty_percent(self):
        session = self._complete([(self.q1, "A"), (self.q2, "X")])

        self.assertEqual(session.score, {
            'total_questions': 2,
            'attempted': 2,
            'correct': 1,
            'incorrect': 1,
            'total_marks': 100,
            'obtained_marks': 50,
            'percentage': 50.0,
        })

    def test_all_right_scores_full_marks(self):
        session = self._complete([(self.q1, "A"), (self.q2, "Y")])

        self.assertEqual(session.score['obtained_marks'], 100)
        self.assertEqual(session.score['percentage'], 100.0)

    def test_no_answers_scores_zero(self):
        session = self._complete([])

        self.assertEqual(session.score['attempted'], 0)
        self.assertEqual(session.score['total_questions'], 2)
        self.assertEqual(session.score['percentage'], 0)

    def test_partial_attempt_counts(self):
        session = self._complete([(self.q2, "Y")])

        score = session.score
        self.assertEqual(score['attempted'], 1)
        self.assertEqual(score['correct'] + score['incorrect'], score['attempted'])
        self.assertEqual(score['percentage'], 50.0)

    def test_submit_sets_completion_time(self):
        session = self._complete([(self.q1, "A")])

        self.assertEqual(session.status, TestSession.Status.COMPLETED)
        self.assertIsNotNone(session.completed_at)
        self.assertGreaterEqual(session.completed_at, session.started_at)

    def test_zero_total_marks_yields_zero_percentage(self):
        test = make_test([(0, [("A", True)])], total_marks=0)
        session = services.create_session(self.candidate.pk, test.pk)
        services.start_session(session.pk)
        services.submit_answer(session.pk, test.questions.get().pk, "A")
        session = services.submit_session(session.pk)

        self.assertEqual(session.score['percentage'], 0.0)
        self.assertEqual(session.score['correct'], 1)

    def test_percentage_of(self):
        self.assertEqual(services.percentage_of(50, 100), 50.0)
        self.assertAlmostEqual(services.percentage_of(1, 3), 33.333333, places=5)
        self.assertEqual(services.percentage_of(0, 0), 0.0)
        self.assertEqual(services.percentage_of(5, 0), 0.0)


class SessionApiTests(APITestCase):

    def setUp(self):
        self.evaluator = make_user("eval@example.com", role="evaluator")
        self.candidate = make_candidate("cand@example.com")
        self.test = make_scenario_test()
        self.q1, self.q2 = self.test.questions.all()

    def _schedule(self, candidate=None):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/sessions/', {
            'candidate_id': (candidate or self.candidate).pk,
            'test_id': self.test.pk,
        }, format='json')
        self.assertEqual(response.status_code, 201, response.data)
        return response.data['id']

    def test_full_flow_as_candidate(self):
        session_id = self._schedule()
        self.client.force_authenticate(self.candidate.user)

        response = self.client.post(f'/api/sessions/{session_id}/start/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'in_progress')
        self.assertEqual(len(response.data['test']['questions']), 2)
        self.assertNotIn('is_correct', response.data['test']['questions'][0]['options'][0])
        self.assertGreater(response.data['time_remaining_seconds'], 0)

        response = self.client.post(f'/api/sessions/{session_id}/answer/', {
            'question_id': self.q1.pk, 'answer': 'A', 'time_taken': 5,
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['answers']), 1)

        response = self.client.post(f'/api/sessions/{session_id}/submit/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'completed')
        self.assertEqual(response.data['score']['obtained_marks'], 50)

    def test_start_is_also_accepted_as_patch(self):
        session_id = self._schedule()
        response = self.client.patch(f'/api/sessions/{session_id}/start/')
        self.assertEqual(response.status_code, 200)

    def test_second_start_returns_invalid_transition(self):
        session_id = self._schedule()
        self.client.post(f'/api/sessions/{session_id}/start/')

        response = self.client.post(f'/api/sessions/{session_id}/start/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'error': 'Session cannot be started', 'code': 'invalid_transition'})

    def test_second_submit_returns_already_completed(self):
        session_id = self._schedule()
        self.client.post(f'/api/sessions/{session_id}/submit/')

        response = self.client.post(f'/api/sessions/{session_id}/submit/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'already_completed')

    def test_unknown_session_returns_not_found(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.post('/api/sessions/99999/start/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'error': 'Session not found', 'code': 'not_found'})

    def test_answer_payload_is_validated(self):
        session_id = self._schedule()
        self.client.post(f'/api/sessions/{session_id}/start/')

        response = self.client.post(f'/api/sessions/{session_id}/answer/', {'answer': 'A'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('question_id', response.data)

    def test_candidate_cannot_schedule_sessions(self):
        self.client.force_authenticate(self.candidate.user)
        response = self.client.post('/api/sessions/', {
            'candidate_id': self.candidate.pk, 'test_id': self.test.pk,
        }, format='json')

        self.assertEqual(response.status_code, 403)

    def test_candidate_cannot_touch_someone_elses_session(self):
        other = make_candidate("other@example.com")
        session_id = self._schedule(candidate=other)

        self.client.force_authenticate(self.candidate.user)
        self.assertEqual(self.client.post(f'/api/sessions/{session_id}/start/').status_code, 403)
        self.assertEqual(self.client.get(f'/api/sessions/{session_id}/').status_code, 404)

    def test_candidate_lists_only_own_sessions(self):
        other = make_candidate("other@example.com")
        self._schedule()
        self._schedule(candidate=other)

        self.client.force_authenticate(self.candidate.user)
        response = self.client.get('/api/sessions/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 1)

    def test_staff_list_is_paginated(self):
        for _ in range(3):
            self._schedule()

        response = self.client.get('/api/sessions/?page=2&limit=2')
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(len(response.data['items']), 1)

    def test_unauthenticated_requests_are_rejected(self):
        self.assertEqual(self.client.get('/api/sessions/').status_code, 401)
