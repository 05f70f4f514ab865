# follicle_backend/app/models/catalog.py
from __future__ import annotations

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, conint, field_validator

from follicle_backend.app.schemas import FrequencyUnit, ProductCategory


class Frequency(BaseModel):
    interval: conint(ge=1) = 1
    unit: FrequencyUnit = FrequencyUnit.WEEK

    model_config = ConfigDict(extra="allow")


class Product(BaseModel):
    id: str
    category: ProductCategory
    name: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None
    # order matters: earlier = higher concentration
    ingredients_normalized: List[str] = Field(default_factory=list)
    ingredient_refs: List[str] = Field(default_factory=list)

    # catalog documents carry plenty of display-only keys
    model_config = ConfigDict(extra="allow")

    @field_validator("ingredients_normalized", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> List[str]:
        if v is None:
            return []
        return [str(i).lower() for i in v]


class RoutineStep(BaseModel):
    order: int = 0
    step_name: str                      # a ProductCategory label, or free text
    product_id: Optional[str] = None
    frequency: Frequency = Field(default_factory=Frequency)
    description: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class Routine(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = False
    deleted_at: Optional[str] = None
    frequency: Optional[Frequency] = None
    steps: List[RoutineStep] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @property
    def is_listed(self) -> bool:
        return self.is_public and not self.deleted_at


__all__ = ["Frequency", "Product", "RoutineStep", "Routine"]
