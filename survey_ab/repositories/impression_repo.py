# repositories/impression_repo.py
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_ab.core.exceptions import StorageError
from survey_ab.models.orm.impression import ImpressionORM

logger = logging.getLogger(__name__)


class ImpressionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_impression(self, survey_name: str, survey_language: str) -> ImpressionORM:
        """
        Records that ``survey_name`` was freshly shown in ``survey_language``.

        Raises StorageError on failure; callers decide whether that is fatal.
        """
        db_impression = ImpressionORM(
            survey_name=survey_name,
            survey_language=survey_language,
        )
        try:
            self.db.add(db_impression)
            self.db.commit()
            self.db.refresh(db_impression)

        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Error logging impression: {e}") from e

        logger.info(
            "Logged impression for: %s in %s",
            survey_name,
            survey_language,
            extra={"record_id": db_impression.id},
        )
        return db_impression

    def count_impressions(
        self, survey_name: Optional[str] = None, survey_language: Optional[str] = None
    ) -> int:
        stmt = select(func.count()).select_from(ImpressionORM)

        if survey_name:
            stmt = stmt.where(ImpressionORM.survey_name == survey_name)

        if survey_language:
            stmt = stmt.where(ImpressionORM.survey_language == survey_language)

        try:
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Error counting impressions.") from e
