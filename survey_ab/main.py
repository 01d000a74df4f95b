import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Path, Request, status
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from survey_ab.core.db import engine, get_db
from survey_ab.core.exceptions import ConfigurationError, NotFoundError, StorageError
from survey_ab.core.experiments import EXPERIMENTS
from survey_ab.core.logging_config import setup_logging
from survey_ab.core.settings import config_settings
from survey_ab.models.orm.base import Base
from survey_ab.models.orm import impression, survey_result  # noqa: F401 (register tables)
from survey_ab.models.schemas.experiment import Experiment
from survey_ab.models.schemas.survey import MessageResponseModel, SurveyResultCreateModel
from survey_ab.repositories.impression_repo import ImpressionRepository
from survey_ab.repositories.schema_repo import SchemaRepository
from survey_ab.services.assignment_service import AssignmentService
from survey_ab.services.survey_service import SurveyService
from survey_ab.services.variant_assigner import VariantAssigner

setup_logging()
logger = logging.getLogger(__name__)

LANGUAGE_PATTERN = r"^[a-z]{2}$"

# One assigner per process: it owns the round-robin cursors.
variant_assigner = VariantAssigner(EXPERIMENTS)


def get_variant_assigner() -> VariantAssigner:
    return variant_assigner


def get_schema_repository() -> SchemaRepository:
    return SchemaRepository(config_settings.SURVEYS_DIR)


def get_assignment_service(
    db: Session = Depends(get_db),
    assigner: VariantAssigner = Depends(get_variant_assigner),
) -> AssignmentService:
    return AssignmentService(
        assigner=assigner,
        impression_repo=ImpressionRepository(db),
        cookie_max_age=config_settings.ASSIGNMENT_COOKIE_MAX_AGE,
        cookie_secret=config_settings.COOKIE_SECRET,
    )


def get_survey_service(
    db: Session = Depends(get_db),
    schema_repo: SchemaRepository = Depends(get_schema_repository),
) -> SurveyService:
    return SurveyService(db, schema_repo)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Provisions the tables before serving; the process stops if that fails."""
    logger.info("Starting %s", config_settings.APP_NAME)
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Error creating database tables")
        raise
    logger.info("Database tables are ready")
    yield
    logger.info("Shutting down %s", config_settings.APP_NAME)


# 1. Create the FastAPI application instance
app = FastAPI(
    title="Survey counterbalancing service",
    description="Round-robin survey variant assignment with sticky cookies and impression logging.",
    version="0.1.0",
    lifespan=lifespan,
)


# 2. Error taxonomy -> HTTP status codes, always as {"message": ...}
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": exc.message}
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"message": exc.message}
    )


@app.get("/health", summary="Health check")
def health():
    return {"status": "healthy", "service": config_settings.APP_NAME}


# 3. Experiment entry points: /<experiment> and /<experiment>/<language>
def _redirect_to_variant(
    experiment_name: str,
    language: str,
    request: Request,
    assignment_service: AssignmentService,
) -> RedirectResponse:
    cookie = assignment_service.sticky_cookie_name(experiment_name, language)
    assignment = assignment_service.resolve(
        experiment_name, language, request.cookies.get(cookie)
    )

    response = RedirectResponse(assignment.survey_path, status_code=status.HTTP_302_FOUND)
    if assignment.is_new_assignment:
        response.set_cookie(
            key=assignment.cookie_name,
            value=assignment.cookie_value,
            max_age=assignment.cookie_max_age,
            httponly=True,
            path="/",
        )
    return response


def _experiment_router(experiment: Experiment) -> APIRouter:
    router = APIRouter(tags=["assignment"])

    @router.get(
        f"/{experiment.name}",
        status_code=status.HTTP_302_FOUND,
        summary=f"Assign a {experiment.name} variant",
    )
    def assign_default_language(
        request: Request,
        assignment_service: AssignmentService = Depends(get_assignment_service),
    ):
        return _redirect_to_variant(
            experiment.name, config_settings.DEFAULT_LANGUAGE, request, assignment_service
        )

    @router.get(
        f"/{experiment.name}/{{language}}",
        status_code=status.HTTP_302_FOUND,
        summary=f"Assign a {experiment.name} variant for a language",
    )
    def assign_language(
        request: Request,
        language: str = Path(..., pattern=LANGUAGE_PATTERN, description="Two-letter language code."),
        assignment_service: AssignmentService = Depends(get_assignment_service),
    ):
        return _redirect_to_variant(experiment.name, language, request, assignment_service)

    return router


for _experiment in EXPERIMENTS:
    app.include_router(_experiment_router(_experiment))


# 4. Survey page, definition and submission
@app.get("/survey/{survey_name}/{language}", summary="Survey page")
def get_survey_page(survey_name: str, language: str):
    # The page reads the survey name and language from its own URL
    return FileResponse(config_settings.PUBLIC_DIR / "index.html", media_type="text/html")


@app.get("/api/surveys/{survey_name}/{language}", summary="Get a survey definition")
def get_survey_definition(
    survey_name: str,
    language: str,
    survey_service: SurveyService = Depends(get_survey_service),
):
    return survey_service.get_survey_schema(survey_name, language)


@app.post(
    "/api/save-survey",
    response_model=MessageResponseModel,
    status_code=status.HTTP_201_CREATED,
    summary="Save a completed survey",
)
def save_survey(
    result_data: SurveyResultCreateModel,
    survey_service: SurveyService = Depends(get_survey_service),
):
    survey_service.save_survey_result(result_data)
    return MessageResponseModel(message="Survey data saved successfully!")


# Static assets last, so they never shadow the routes above
app.mount(
    "/",
    StaticFiles(directory=config_settings.PUBLIC_DIR, check_dir=False),
    name="public",
)


if __name__ == "__main__":
    uvicorn.run(
        "survey_ab.main:app", host=config_settings.APP_HOST, port=config_settings.APP_PORT
    )
