# advocate_model.py
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class Advocate(BaseModel):
    """A read-only directory record. Serialized with the camelCase keys the frontend consumes."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    city: str
    degree: str
    specialties: List[str] = []
    years_of_experience: int = Field(default=0, ge=0, alias="yearsOfExperience")
    phone_number: str = Field(alias="phoneNumber")


class PaginatedAdvocateResponse(BaseModel):
    data: List[Advocate]
    total: int
    page: int
    per_page: int
    total_pages: int


class FilterOptionsResponse(BaseModel):
    cities: List[str]
    specialties: List[str]


class ErrorResponse(BaseModel):
    error: str
