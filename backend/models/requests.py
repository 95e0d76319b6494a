from pydantic import BaseModel, Field


class DiscoverRequest(BaseModel):
    course_title: str = Field(..., min_length=1, max_length=300, description="Course title")
    course_level: str = Field("", max_length=100, description="e.g. introductory, advanced, graduate")
    outcomes: list[str] = Field(default_factory=list, max_length=50, description="Learning outcome statements")
    topics: list[str] = Field(default_factory=list, max_length=50)
    location: str = Field("", max_length=200, description="Institution location, origin for distance")
    search_location: str = Field("", max_length=200, description="Overrides location for the provider search")
    target_count: int = Field(10, ge=1, le=100, description="Number of ranked companies wanted")
