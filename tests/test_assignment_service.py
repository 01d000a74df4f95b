"""
Tests for sticky assignment resolution and impression counting.
"""
import pytest

from survey_ab.core.exceptions import NotFoundError, StorageError
from survey_ab.models.schemas.experiment import Experiment
from survey_ab.repositories.impression_repo import ImpressionRepository
from survey_ab.services.assignment_service import AssignmentService, cookie_name
from survey_ab.services.variant_assigner import VariantAssigner


class FailingImpressionRepository:
    def __init__(self):
        self.calls = 0

    def create_impression(self, survey_name, survey_language):
        self.calls += 1
        raise StorageError("Error logging impression: database is down")


@pytest.fixture
def feedback_assigner():
    return VariantAssigner(
        [Experiment(name="feedback", cookie_prefix="feedback", variants=["A", "B"])]
    )


@pytest.fixture
def impression_repo(db_session):
    return ImpressionRepository(db_session)


@pytest.fixture
def service(feedback_assigner, impression_repo):
    return AssignmentService(
        feedback_assigner, impression_repo, cookie_max_age=900, cookie_secret="test-secret"
    )


def test_cookie_name_includes_prefix_and_language():
    experiment = Experiment(name="employee", cookie_prefix="employeeSurvey", variants=["x"])
    assert cookie_name(experiment, "fr") == "employeeSurveyAssignment-fr"


def test_cold_then_cold_then_warm_scenario(service, feedback_assigner, impression_repo):
    first = service.resolve("feedback", "en", None)
    assert first.variant == "A"
    assert first.is_new_assignment
    assert feedback_assigner.cursor("feedback") == 1
    assert impression_repo.count_impressions("A") == 1

    second = service.resolve("feedback", "en", None)
    assert second.variant == "B"
    assert feedback_assigner.cursor("feedback") == 0
    assert impression_repo.count_impressions("B") == 1

    repeat = service.resolve("feedback", "en", first.cookie_value)
    assert repeat.variant == "A"
    assert not repeat.is_new_assignment
    assert feedback_assigner.cursor("feedback") == 0
    assert impression_repo.count_impressions() == 2


def test_cold_assignment_carries_cookie_instructions(service):
    assignment = service.resolve("feedback", "de", None)
    assert assignment.cookie_name == "feedbackAssignment-de"
    assert assignment.cookie_max_age == 900
    assert assignment.survey_path == "/survey/A/de"


@pytest.mark.parametrize("token", ["", "C", "A; drop table", "customer-feedback-a"])
def test_unknown_or_empty_token_is_treated_as_absent(service, impression_repo, token):
    assignment = service.resolve("feedback", "en", token)
    assert assignment.is_new_assignment
    assert assignment.variant == "A"
    assert impression_repo.count_impressions() == 1


def test_impressions_counted_once_per_cold_request(service, impression_repo):
    cold = [service.resolve("feedback", "en", None) for _ in range(5)]
    for assignment in cold:
        for _ in range(3):
            service.resolve("feedback", "en", assignment.cookie_value)

    assert impression_repo.count_impressions() == 5
    assert impression_repo.count_impressions("A", "en") == 3
    assert impression_repo.count_impressions("B", "en") == 2


def test_impression_failure_does_not_block_assignment(feedback_assigner):
    failing = FailingImpressionRepository()
    service = AssignmentService(
        feedback_assigner, failing, cookie_max_age=900, cookie_secret="test-secret"
    )

    assignment = service.resolve("feedback", "en", None)

    assert assignment.variant == "A"
    assert assignment.is_new_assignment
    assert failing.calls == 1
    # The cursor advance is not rolled back
    assert feedback_assigner.cursor("feedback") == 1


def test_unknown_experiment(service):
    with pytest.raises(NotFoundError):
        service.resolve("nope", "en", None)


def test_cold_assignment_cookie_is_signed(service):
    assignment = service.resolve("feedback", "en", None)
    assert assignment.cookie_value != assignment.variant
    assert service._verified_variant("feedbackAssignment-en", assignment.cookie_value) == "A"


def test_unsigned_variant_name_gets_a_cold_assignment(service, feedback_assigner, impression_repo):
    # "B" is a real variant, but the visitor was never issued it
    assignment = service.resolve("feedback", "en", "B")

    assert assignment.is_new_assignment
    assert assignment.variant == "A"
    assert feedback_assigner.cursor("feedback") == 1
    assert impression_repo.count_impressions("A") == 1


def test_token_from_another_language_is_rejected(service, impression_repo):
    spanish = service.resolve("feedback", "es", None)
    english = service.resolve("feedback", "en", spanish.cookie_value)

    assert english.is_new_assignment
    assert impression_repo.count_impressions() == 2


def test_token_signed_with_another_secret_is_rejected(feedback_assigner, impression_repo):
    other = AssignmentService(
        feedback_assigner, impression_repo, cookie_max_age=900, cookie_secret="other-secret"
    )
    forged = other.sign_variant("feedbackAssignment-en", "B")

    service = AssignmentService(
        feedback_assigner, impression_repo, cookie_max_age=900, cookie_secret="test-secret"
    )
    assert service.resolve("feedback", "en", forged).is_new_assignment


def test_signed_token_for_retired_variant_is_rejected(service, impression_repo):
    stale = service.sign_variant("feedbackAssignment-en", "customer-feedback-z")
    assignment = service.resolve("feedback", "en", stale)

    assert assignment.is_new_assignment
    assert impression_repo.count_impressions() == 1
