# services/assignment_service.py
import logging
from typing import Optional

from itsdangerous import BadData, URLSafeSerializer

from survey_ab.core.exceptions import StorageError
from survey_ab.models.schemas.experiment import AssignmentModel, Experiment
from survey_ab.repositories.impression_repo import ImpressionRepository
from survey_ab.services.variant_assigner import VariantAssigner

logger = logging.getLogger(__name__)


def cookie_name(experiment: Experiment, language: str) -> str:
    return f"{experiment.cookie_prefix}Assignment-{language}"


class AssignmentService:
    def __init__(
        self,
        assigner: VariantAssigner,
        impression_repo: ImpressionRepository,
        cookie_max_age: int,
        cookie_secret: str,
    ):
        self.assigner = assigner
        self.impression_repo = impression_repo
        self.cookie_max_age = cookie_max_age
        self.serializer = URLSafeSerializer(cookie_secret)

    def sticky_cookie_name(self, experiment_name: str, language: str) -> str:
        return cookie_name(self.assigner.get_experiment(experiment_name), language)

    # The cookie name is the salt, so a token only verifies for the
    # experiment and language it was issued for.
    def sign_variant(self, name: str, variant: str) -> str:
        return self.serializer.dumps(variant, salt=name)

    def _verified_variant(self, name: str, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            variant = self.serializer.loads(token, salt=name)
        except BadData:
            logger.info("Rejected sticky cookie %s with a bad signature", name)
            return None
        return variant if isinstance(variant, str) else None

    def resolve(
        self, experiment_name: str, language: str, sticky_token: Optional[str]
    ) -> AssignmentModel:
        """
        Resolves the variant a visitor sees for an experiment.

        1. A correctly signed sticky token naming one of the experiment's
           variants is replayed: no cursor advance, no impression.
        2. Anything else (absent, forged, unknown variant) is a cold request:
           pick the next variant, then log one impression on a best-effort basis.
        """
        experiment = self.assigner.get_experiment(experiment_name)
        name = cookie_name(experiment, language)

        sticky_variant = self._verified_variant(name, sticky_token)
        if sticky_variant and self.assigner.is_known_variant(experiment_name, sticky_variant):
            logger.debug("Sticky assignment %s for %s/%s", sticky_variant, experiment_name, language)
            return AssignmentModel(
                experiment_name=experiment_name,
                language=language,
                variant=sticky_variant,
                is_new_assignment=False,
                cookie_name=name,
                cookie_value=sticky_token,
                cookie_max_age=self.cookie_max_age,
            )

        # The pick is synchronous; the impression write happens after the cursor moved
        variant = self.assigner.pick_next(experiment_name)
        logger.info(
            "Assigned %s to new variant %s",
            experiment_name,
            variant,
            extra={"survey_name": variant, "survey_language": language},
        )

        try:
            self.impression_repo.create_impression(variant, language)
        except StorageError as e:
            # The visitor still gets the survey; this exposure goes uncounted
            logger.warning("Error logging impression: %s", e.message)

        return AssignmentModel(
            experiment_name=experiment_name,
            language=language,
            variant=variant,
            is_new_assignment=True,
            cookie_name=name,
            cookie_value=self.sign_variant(name, variant),
            cookie_max_age=self.cookie_max_age,
        )
