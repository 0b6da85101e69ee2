import math
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import settings

T = TypeVar("T")

class CamelModel(BaseModel):
    """Accepts both camelCase (wire) and snake_case (Python) field names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PageRequest(CamelModel):
    current: int = Field(1, ge=1)
    page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1)
    sort_field: Optional[str] = None
    sort_order: Optional[str] = None  # "ascend" / "descend"

    @property
    def offset(self) -> int:
        return (self.current - 1) * self.page_size

@dataclass
class Page(Generic[T]):
    records: List[T] = field(default_factory=list)
    total: int = 0
    size: int = 0
    current: int = 1

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    def map(self, fn) -> "Page":
        return Page([fn(r) for r in self.records], self.total, self.size, self.current)
