from django.test import SimpleTestCase, TestCase
from rest_framework.test import APITestCase

from assessments import services as sessions
from cores.exceptions import ConflictError, NotFound
from cores.testing import make_candidate, make_scenario_test, make_user
from .models import Result
from .services import generate_from_session, grade_for, results_for_candidate


def completed_session(candidate, test, answers):
    session = sessions.create_session(candidate.pk, test.pk)
    sessions.start_session(session.pk)
    for question, answer in answers:
        sessions.submit_answer(session.pk, question.pk, answer)
    return sessions.submit_session(session.pk)


class GradeBoundaryTests(SimpleTestCase):

    def test_boundaries_are_closed_below(self):
        self.assertEqual(grade_for(100.0), "A+")
        self.assertEqual(grade_for(90.0), "A+")
        self.assertEqual(grade_for(89.99), "A")
        self.assertEqual(grade_for(80.0), "A")
        self.assertEqual(grade_for(79.99), "B")
        self.assertEqual(grade_for(70.0), "B")
        self.assertEqual(grade_for(60.0), "C")
        self.assertEqual(grade_for(59.99), "D")
        self.assertEqual(grade_for(50.0), "D")
        self.assertEqual(grade_for(49.99), "F")
        self.assertEqual(grade_for(0), "F")


class ResultDerivationTests(TestCase):

    def setUp(self):
        self.candidate = make_candidate()
        self.test = make_scenario_test()
        self.q1, self.q2 = self.test.questions.all()

    def test_half_right_is_a_failing_d(self):
        session = completed_session(self.candidate, self.test, [(self.q1, "A"), (self.q2, "X")])
        result = generate_from_session(session.pk)

        self.assertEqual(result.obtained_marks, 50)
        self.assertEqual(result.total_marks, 100)
        self.assertEqual(result.percentage, 50.0)
        self.assertEqual(result.grade, "D")
        self.assertFalse(result.passed)

    def test_all_right_is_a_passing_a_plus(self):
        session = completed_session(self.candidate, self.test, [(self.q1, "A"), (self.q2, "Y")])
        result = generate_from_session(session.pk)

        self.assertEqual(result.percentage, 100.0)
        self.assertEqual(result.grade, "A+")
        self.assertTrue(result.passed)

    def test_result_copies_references(self):
        session = completed_session(self.candidate, self.test, [(self.q1, "A")])
        result = generate_from_session(session.pk)

        self.assertEqual(result.session_id, session.pk)
        self.assertEqual(result.candidate_id, self.candidate.pk)
        self.assertEqual(result.test_id, self.test.pk)
        self.assertEqual(result.test_type, self.test.test_type)
        self.assertFalse(result.is_verified)

    def test_no_answers_fails_with_f(self):
        session = completed_session(self.candidate, self.test, [])
        result = generate_from_session(session.pk)

        self.assertEqual(result.percentage, 0)
        self.assertEqual(result.grade, "F")
        self.assertFalse(result.passed)

    def test_zero_passing_score_passes_an_empty_attempt(self):
        test = make_scenario_test(passing_score=0)
        session = completed_session(self.candidate, test, [])

        self.assertTrue(generate_from_session(session.pk).passed)

    def test_pass_threshold_is_inclusive(self):
        test = make_scenario_test(passing_score=50)
        q1 = test.questions.first()
        session = completed_session(self.candidate, test, [(q1, "A")])

        self.assertTrue(generate_from_session(session.pk).passed)

    def test_second_generation_is_a_conflict(self):
        session = completed_session(self.candidate, self.test, [(self.q1, "A")])
        generate_from_session(session.pk)

        with self.assertRaises(ConflictError):
            generate_from_session(session.pk)
        self.assertEqual(Result.objects.filter(session=session).count(), 1)

    def test_unknown_session_is_not_found(self):
        with self.assertRaises(NotFound):
            generate_from_session(31337)

    def test_unsubmitted_session_derives_from_zero(self):
        session = sessions.create_session(self.candidate.pk, self.test.pk)
        result = generate_from_session(session.pk)

        self.assertEqual(result.obtained_marks, 0)
        self.assertEqual(result.total_marks, 100)
        self.assertEqual(result.grade, "F")

    def test_results_for_candidate_newest_first(self):
        first = generate_from_session(completed_session(self.candidate, self.test, []).pk)
        second = generate_from_session(completed_session(self.candidate, self.test, [(self.q1, "A")]).pk)

        self.assertEqual(list(results_for_candidate(self.candidate.pk)), [second, first])


class ResultApiTests(APITestCase):

    def setUp(self):
        self.evaluator = make_user("eval@example.com", role="evaluator")
        self.supervisor = make_user("super@example.com", role="supervisor")
        self.candidate = make_candidate("cand@example.com")
        self.test = make_scenario_test()
        q1, q2 = self.test.questions.all()
        self.session = completed_session(self.candidate, self.test, [(q1, "A"), (q2, "Y")])

    def test_generate_then_conflict(self):
        self.client.force_authenticate(self.evaluator)

        response = self.client.post(f'/api/results/generate/{self.session.pk}/')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['grade'], 'A+')
        self.assertTrue(response.data['passed'])
        self.assertEqual(response.data['session_code'], self.session.session_code)

        response = self.client.post(f'/api/results/generate/{self.session.pk}/')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'conflict')

    def test_supervisor_cannot_generate(self):
        self.client.force_authenticate(self.supervisor)
        response = self.client.post(f'/api/results/generate/{self.session.pk}/')
        self.assertEqual(response.status_code, 403)

    def test_candidate_cannot_generate(self):
        self.client.force_authenticate(self.candidate.user)
        response = self.client.post(f'/api/results/generate/{self.session.pk}/')
        self.assertEqual(response.status_code, 403)

    def test_list_and_retrieve(self):
        result = generate_from_session(self.session.pk)
        self.client.force_authenticate(self.supervisor)

        response = self.client.get('/api/results/')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['items'][0]['id'], result.pk)

        response = self.client.get(f'/api/results/{result.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['application_number'], self.candidate.application_number)

    def test_candidate_sees_own_results_only(self):
        generate_from_session(self.session.pk)
        other = make_candidate("other@example.com")
        generate_from_session(completed_session(other, self.test, []).pk)

        self.client.force_authenticate(self.candidate.user)
        response = self.client.get('/api/results/')
        self.assertEqual(response.data['total'], 1)

        response = self.client.get(f'/api/results/candidate/{self.candidate.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(f'/api/results/candidate/{other.pk}/')
        self.assertEqual(response.status_code, 403)

    def test_results_of_unknown_candidate_is_not_found(self):
        self.client.force_authenticate(self.evaluator)
        response = self.client.get('/api/results/candidate/999999/')
        self.assertEqual(response.status_code, 404)
