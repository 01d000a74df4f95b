from sqlalchemy import Column, DateTime, Integer, String, func

from .base import Base


class ImpressionORM(Base):
    """One row per fresh (non-sticky) variant assignment."""

    __tablename__ = "survey_impressions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    survey_name = Column(String(100), index=True)
    survey_language = Column(String(10))

    impression_time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
