"""Domain Value Objects"""
import math
from datetime import date, datetime, time, timedelta
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field, validator

T = TypeVar("T")

ONE_HOUR = timedelta(hours=1)


class TimeSlot(BaseModel):
    """Value Object for a same-day wall-clock range [start_time, end_time)"""
    start_time: time
    end_time: time

    @validator('end_time')
    def end_after_start(cls, v, values):
        if 'start_time' in values and v <= values['start_time']:
            raise ValueError('End time must be after start time')
        return v

    def hours(self) -> int:
        """Billable hours, counted on the hour component only"""
        return self.end_time.hour - self.start_time.hour

    def probes(self, on: date) -> List[datetime]:
        """Hour-aligned probe points from start, while the probe is before end"""
        end = datetime.combine(on, self.end_time)
        probe = datetime.combine(on, self.start_time)
        points = []
        while probe < end:
            points.append(probe)
            probe = probe + ONE_HOUR
        return points

    def overlaps_hour(self, on: date, probe: datetime) -> bool:
        """True if this slot intersects the hour [probe, probe + 1h)"""
        start = datetime.combine(on, self.start_time)
        end = datetime.combine(on, self.end_time)
        return start < probe + ONE_HOUR and end > probe

    class Config:
        frozen = True


class PageRequest(BaseModel):
    """Value Object for pagination parameters"""
    page: int = Field(ge=0, default=0)
    size: int = Field(ge=1, default=10)

    @property
    def offset(self) -> int:
        return self.page * self.size

    class Config:
        frozen = True


class Page(BaseModel, Generic[T]):
    """One page of results plus the totals needed by clients"""
    content: List[T]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 1

    @property
    def is_last(self) -> bool:
        return self.page + 1 >= self.total_pages

    def is_empty(self) -> bool:
        return not self.content

    @staticmethod
    def of(items: List[T], page_request: PageRequest) -> "Page[T]":
        """Slice an already ordered list into the requested page"""
        start = page_request.offset
        return Page(
            content=items[start:start + page_request.size],
            page=page_request.page,
            size=page_request.size,
            total_elements=len(items)
        )
