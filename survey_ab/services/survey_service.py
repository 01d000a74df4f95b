# services/survey_service.py
import logging

from sqlalchemy.orm import Session

from survey_ab.models.orm.survey_result import SurveyResultORM
from survey_ab.models.schemas.survey import SurveyResultCreateModel
from survey_ab.repositories.schema_repo import SchemaRepository
from survey_ab.repositories.survey_result_repo import SurveyResultRepository

logger = logging.getLogger(__name__)


class SurveyService:
    def __init__(self, db: Session, schema_repo: SchemaRepository):
        """Initializes the service with repositories it needs."""
        self.result_repo = SurveyResultRepository(db)
        self.schema_repo = schema_repo

    def get_survey_schema(self, survey_name: str, language: str) -> dict:
        return self.schema_repo.load(survey_name, language)

    def save_survey_result(self, result_data: SurveyResultCreateModel) -> SurveyResultORM:
        """
        Persists a completed submission exactly as received.

        A StorageError is not handled here: saving answers is a required
        operation and its failure must reach the caller.
        """
        saved = self.result_repo.create_result(
            survey_name=result_data.survey_name,
            survey_language=result_data.survey_language,
            survey_data=result_data.survey_data,
        )
        logger.info(
            "Successfully saved survey with ID: %s",
            saved.id,
            extra={
                "survey_name": saved.survey_name,
                "survey_language": saved.survey_language,
                "record_id": saved.id,
            },
        )
        return saved
