# repositories/survey_result_repo.py
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_ab.core.exceptions import StorageError
from survey_ab.models.orm.survey_result import SurveyResultORM

logger = logging.getLogger(__name__)


class SurveyResultRepository:
    def __init__(self, db: Session):
        """Initializes the repository with a database session."""
        self.db = db

    def create_result(
        self, survey_name: str, survey_language: str, survey_data: Any
    ) -> SurveyResultORM:
        """
        Appends one completed submission to ``survey_results``.

        Returns:
            The created SurveyResultORM, with its auto-assigned ``id``.

        Raises:
            StorageError: the insert failed; the session has been rolled back.
        """
        db_result = SurveyResultORM(
            survey_name=survey_name,
            survey_language=survey_language,
            survey_data=survey_data,
        )
        try:
            self.db.add(db_result)
            self.db.commit()
            self.db.refresh(db_result)

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error saving survey result: %s", e, exc_info=True)
            raise StorageError("Error saving survey data.") from e

        return db_result

    def list_results(self, survey_name: Optional[str] = None) -> list[SurveyResultORM]:
        """Retrieves stored submissions, oldest first, optionally for one survey."""
        stmt = select(SurveyResultORM).order_by(SurveyResultORM.id)

        if survey_name:
            stmt = stmt.where(SurveyResultORM.survey_name == survey_name)

        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Error reading survey results.") from e
