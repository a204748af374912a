from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ViewType(str, Enum):
    OCEAN = "ocean"
    MOUNTAIN = "mountain"
    URBAN = "urban"
    FOREST = "forest"
    LAKE = "lake"
    RIVER = "river"
    DESERT = "desert"
    VALLEY = "valley"
    OTHER = "other"


class SortKey(str, Enum):
    DISTANCE = "distance"
    RATING = "rating"
    RECENT = "recent"


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Rating(BaseModel):
    view_rating: int = Field(..., ge=1, le=5)
    comfort_rating: int = Field(..., ge=1, le=5)


class BenchRecord(BaseModel):
    """
    A bench as stored in the data store. Instances are treated as read-only
    by the ranker.
    """

    id: str
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    accessibility_notes: Optional[str] = Field(None, max_length=500)
    user_id: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    view_type: ViewType
    created_at: datetime
    ratings: List[Rating] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Naive and aware datetimes can't be compared when sorting by recency
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class SearchQuery(BaseModel):
    query: Optional[str] = None
    view_type: Optional[ViewType] = None
    min_rating: Optional[float] = Field(None, ge=0, le=5)
    max_distance_km: Optional[float] = Field(None, ge=0)
    sort_by: SortKey = SortKey.DISTANCE
    origin: Optional[Coordinates] = None


class RankedResult(BenchRecord):
    average_rating: float
    distance_km: Optional[float] = None
    ratings_count: int


class SearchRequest(BaseModel):
    query: Optional[str] = None
    view_type: Optional[ViewType] = None
    min_rating: Optional[float] = Field(None, ge=0, le=5)
    max_distance_km: Optional[float] = Field(None, ge=0)
    sort_by: SortKey = SortKey.DISTANCE
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_location_pair(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self

    def to_search_query(self) -> SearchQuery:
        origin = None
        if self.latitude is not None:
            origin = Coordinates(latitude=self.latitude, longitude=self.longitude)
        return SearchQuery(
            query=self.query,
            view_type=self.view_type,
            min_rating=self.min_rating,
            max_distance_km=self.max_distance_km,
            sort_by=self.sort_by,
            origin=origin,
        )


class SearchResponse(BaseModel):
    results: List[RankedResult]
    total: int
