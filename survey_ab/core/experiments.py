from typing import List

from survey_ab.models.schemas.experiment import Experiment

# Compiled-in counterbalancing groups. Not runtime-configurable.
EXPERIMENTS: List[Experiment] = [
    Experiment(
        name="feedback",
        cookie_prefix="feedback",
        variants=["customer-feedback-a", "customer-feedback-b"],
    ),
    Experiment(
        name="poll",
        cookie_prefix="poll",
        variants=["new-feature-poll-a", "new-feature-poll-b"],
    ),
    Experiment(
        name="employee",
        cookie_prefix="employeeSurvey",
        variants=["employee-satisfaction-a", "employee-satisfaction-b"],
    ),
]
