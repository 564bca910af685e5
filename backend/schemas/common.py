# backend/schemas/common.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Body of create/rename requests for categories and tags
class NamedInput(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


# Compact views used when an entity is nested inside another one
class CategoryRef(ORMBase):
    id: int
    name: str


class TagRef(ORMBase):
    id: int
    name: str


class ProductRef(ORMBase):
    id: int
    name: str
    price: float
    stock: int
    category_id: Optional[int] = None
