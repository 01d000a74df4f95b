from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Experiment(BaseModel):
    """A named group of interchangeable survey variants, assigned round robin."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="URL segment, e.g. 'feedback'.")
    cookie_prefix: str = Field(
        ..., description="Sticky cookie is named '<cookie_prefix>Assignment-<language>'."
    )
    variants: List[str] = Field(
        default_factory=list, description="Ordered survey names served by this experiment."
    )


# --- User Assignment ---


class AssignmentModel(BaseModel):
    """Outcome of resolving a visitor's variant for one experiment and language."""

    experiment_name: str
    language: str
    variant: str = Field(..., description="The survey name the visitor was assigned.")
    is_new_assignment: bool = Field(
        ..., description="True on the cold path; the caller must set the sticky cookie."
    )
    cookie_name: str
    cookie_value: str = Field(..., description="Signed token carrying the variant.")
    cookie_max_age: int = Field(..., description="Cookie lifetime in seconds.")

    @property
    def survey_path(self) -> str:
        return f"/survey/{self.variant}/{self.language}"
