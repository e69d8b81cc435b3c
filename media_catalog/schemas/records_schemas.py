from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordType = Literal['Movie', 'TV Show']


def latest_year() -> int:
    return datetime.now(timezone.utc).year + 5


class MovieShowCreate(BaseModel):
    """Candidate record sent on create and update, as JSON or form fields."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra='ignore'
    )

    title: str = Field(min_length=1)
    type: RecordType
    director: str = Field(min_length=1)
    budget: Optional[str] = None
    location: Optional[str] = None
    duration: str = Field(min_length=1)
    year: int = Field(ge=1800)
    genre: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=10, allow_inf_nan=False)
    description: Optional[str] = None
    poster: str = ''

    @field_validator('year')
    @classmethod
    def year_not_too_far(cls, value: int) -> int:
        if value > latest_year():
            raise ValueError("Year cannot be too far in the future")
        return value

    @field_validator('rating', mode='before')
    @classmethod
    def blank_rating_clears(cls, value: Any) -> Any:
        # Form posts send '' for an emptied rating input
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('poster', mode='before')
    @classmethod
    def missing_poster_is_empty(cls, value: Any) -> Any:
        return '' if value is None else value


class RecordQuery(BaseModel):
    page: int = 1
    limit: int = 10
    search: str = ''
    type: Optional[str] = None
    sort_by: str = '-createdAt'


class MovieShowResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    type: RecordType
    director: str
    budget: Optional[str] = None
    location: Optional[str] = None
    duration: str
    year: int
    genre: Optional[str] = None
    rating: Optional[float] = None
    description: Optional[str] = None
    poster: str = ''
    owner: str
    created_at: datetime = Field(alias='createdAt')
    updated_at: datetime = Field(alias='updatedAt')


class RecordPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[MovieShowResponse]
    page: int
    pages: int
    total: int
    has_more: bool = Field(alias='hasMore')


class DeleteResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str


class ValidationErrorResponse(BaseModel):
    detail: str
    errors: Dict[str, str]
