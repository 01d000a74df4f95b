from sqlalchemy import Column, DateTime, Integer, String, func

from .base import Base, JSON_TYPE


class SurveyResultORM(Base):
    __tablename__ = "survey_results"

    id = Column(Integer, primary_key=True, autoincrement=True)

    survey_name = Column(String(100), index=True)
    survey_language = Column(String(10))

    # Opaque answer payload, stored exactly as submitted
    survey_data = Column(JSON_TYPE)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
