from django.test import TestCase
from rest_framework.test import APITestCase

from assessments import services as sessions
from catalog.models import Test
from cores.exceptions import NotFound
from cores.testing import make_candidate, make_scenario_test, make_user
from results.services import generate_from_session
from . import services


def graded(candidate, test, answers):
    session = sessions.create_session(candidate.pk, test.pk)
    sessions.start_session(session.pk)
    for question, answer in answers:
        sessions.submit_answer(session.pk, question.pk, answer)
    sessions.submit_session(session.pk)
    return generate_from_session(session.pk)


class DashboardTests(TestCase):

    def test_empty_dashboard_has_zero_pass_rate(self):
        self.assertEqual(services.dashboard(), {
            "total_candidates": 0,
            "total_sessions": 0,
            "completed_sessions": 0,
            "total_results": 0,
            "pass_rate": 0,
        })

    def test_counts_and_pass_rate(self):
        alice = make_candidate("alice@example.com")
        bob = make_candidate("bob@example.com")
        test = make_scenario_test()
        q1, q2 = test.questions.all()

        graded(alice, test, [(q1, "A"), (q2, "Y")])
        graded(bob, test, [(q1, "A")])
        graded(bob, test, [])
        sessions.create_session(alice.pk, test.pk)

        data = services.dashboard()
        self.assertEqual(data["total_candidates"], 2)
        self.assertEqual(data["total_sessions"], 4)
        self.assertEqual(data["completed_sessions"], 3)
        self.assertEqual(data["total_results"], 3)
        self.assertEqual(data["pass_rate"], 33.33)


class TestPerformanceTests(TestCase):

    def setUp(self):
        self.candidate = make_candidate()
        self.concentration = make_scenario_test()
        self.memory = make_scenario_test(title="Digit Span", test_type=Test.TestType.MEMORY)

    def test_no_matching_results_is_zero_filled(self):
        self.assertEqual(services.test_performance(), {"total_attempts": 0, "average_score": 0, "pass_rate": 0})
        self.assertEqual(services.test_performance("visual"), {"total_attempts": 0, "average_score": 0, "pass_rate": 0})

    def test_filters_by_type(self):
        c1, c2 = self.concentration.questions.all()
        graded(self.candidate, self.concentration, [(c1, "A"), (c2, "Y")])
        graded(self.candidate, self.concentration, [(c1, "A")])
        graded(self.candidate, self.memory, [])

        overall = services.test_performance()
        self.assertEqual(overall["total_attempts"], 3)
        self.assertEqual(overall["average_score"], 50.0)
        self.assertEqual(overall["pass_rate"], 33.33)

        concentration = services.test_performance("concentration")
        self.assertEqual(concentration, {"total_attempts": 2, "average_score": 75.0, "pass_rate": 50.0})


class CandidateReportTests(TestCase):

    def test_report_projects_results(self):
        candidate = make_candidate()
        test = make_scenario_test()
        q1, q2 = test.questions.all()
        graded(candidate, test, [(q1, "A"), (q2, "X")])
        graded(candidate, test, [(q1, "A"), (q2, "Y")])

        report = services.candidate_report(candidate.pk)

        self.assertEqual(report["candidate"], {
            "application_number": candidate.application_number,
            "status": "pending",
        })
        self.assertEqual(report["summary"], {"total_tests": 2, "passed_tests": 1, "average_score": 75.0})
        self.assertEqual(report["test_results"], [
            {"test_type": "concentration", "score": 100.0, "passed": True, "grade": "A+"},
            {"test_type": "concentration", "score": 50.0, "passed": False, "grade": "D"},
        ])

    def test_report_without_results(self):
        candidate = make_candidate()
        report = services.candidate_report(candidate.pk)

        self.assertEqual(report["summary"], {"total_tests": 0, "passed_tests": 0, "average_score": 0})
        self.assertEqual(report["test_results"], [])

    def test_unknown_candidate_is_not_found(self):
        with self.assertRaises(NotFound):
            services.candidate_report(123456)


class AnalyticsApiTests(APITestCase):

    def setUp(self):
        self.supervisor = make_user("super@example.com", role="supervisor")
        self.candidate = make_candidate()

    def test_staff_can_read_dashboard(self):
        self.client.force_authenticate(self.supervisor)
        response = self.client.get('/api/analytics/dashboard/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_candidates"], 1)
        self.assertEqual(response.data["pass_rate"], 0)

    def test_test_performance_takes_a_type_filter(self):
        self.client.force_authenticate(self.supervisor)
        response = self.client.get('/api/analytics/test-performance/?test_type=memory')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_attempts"], 0)

    def test_candidate_report_endpoint(self):
        self.client.force_authenticate(self.supervisor)
        response = self.client.get(f'/api/reports/candidate/{self.candidate.pk}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["candidate"]["application_number"], self.candidate.application_number)

        response = self.client.get('/api/reports/candidate/999999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"], "Candidate not found")

    def test_candidates_are_denied(self):
        self.client.force_authenticate(self.candidate.user)

        self.assertEqual(self.client.get('/api/analytics/dashboard/').status_code, 403)
        self.assertEqual(self.client.get('/api/analytics/test-performance/').status_code, 403)
        self.assertEqual(self.client.get(f'/api/reports/candidate/{self.candidate.pk}/').status_code, 403)
