import pydantic as p

from .base import BaseSettings


class GradingSettings(BaseSettings):
    """Knobs for grade aggregation and course closure."""

    # the store caps mutations per transaction; one bulk group is one transaction
    bulk_group_size: int = p.Field(default=400, ge=1, le=500)
    # a final grade further than this from the automatic grade is a manual override
    override_tolerance: float = p.Field(default=0.01, ge=0)
    # closing may narrow the grade scale, never widen it past 0..100
    min_grade: float = p.Field(default=0.0, ge=0, le=100)
    max_grade: float = p.Field(default=100.0, ge=0, le=100)

    @p.model_validator(mode="after")
    def check_range(self) -> "GradingSettings":
        if self.min_grade >= self.max_grade:
            raise ValueError("min_grade must be below max_grade")
        return self
