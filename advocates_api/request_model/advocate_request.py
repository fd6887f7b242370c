# advocate_request.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from advocates_api.search.query_builder import QueryDescription, ALL


class AdvocateSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    search_term: Optional[str] = Field(default="", alias="searchTerm", description="Free-text search term")
    selected_city: Optional[str] = Field(default=ALL, alias="selectedCity", description="Exact city filter, 'All' for none")
    selected_specialty: Optional[str] = Field(default=ALL, alias="selectedSpecialty", description="Specialty filter, 'All' for none")

    @field_validator("search_term", "selected_city", "selected_specialty", mode="before")
    @classmethod
    def strip_text(cls, value):
        if value is None:
            return value
        return str(value).strip()

    def to_query_description(self) -> QueryDescription:
        return QueryDescription(
            search_term=self.search_term or "",
            selected_city=self.selected_city or ALL,
            selected_specialty=self.selected_specialty or ALL,
        )
