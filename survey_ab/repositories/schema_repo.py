# repositories/schema_repo.py
import json
import logging
from pathlib import Path

from survey_ab.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "The requested survey could not be found."


class SchemaRepository:
    """
    Read-only lookup of survey definitions laid out as
    ``<base_dir>/<survey_name>/<language>.json``.

    Documents are authored and deployed out of band; every call re-reads the
    file so a redeployed definition is picked up without a restart.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    @staticmethod
    def _is_plain_segment(value: str) -> bool:
        return bool(value) and value not in (".", "..") and "/" not in value and "\\" not in value

    def _path_for(self, survey_name: str, language: str) -> Path | None:
        if not (self._is_plain_segment(survey_name) and self._is_plain_segment(language)):
            return None
        return self.base_dir / survey_name / f"{language}.json"

    def load(self, survey_name: str, language: str) -> dict:
        """
        Returns the parsed survey definition.

        Raises:
            NotFoundError: no definition exists for (survey_name, language).
        """
        path = self._path_for(survey_name, language)

        if path is None or not path.is_file():
            logger.warning(
                "Survey not found: %s/%s",
                survey_name,
                language,
                extra={"survey_name": survey_name, "survey_language": language},
            )
            raise NotFoundError(NOT_FOUND_MESSAGE)

        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Survey definition %s/%s is unreadable: %s", survey_name, language, e)
            raise NotFoundError(NOT_FOUND_MESSAGE) from e
