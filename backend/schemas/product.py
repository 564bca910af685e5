# backend/schemas/product.py
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import List, Optional

from schemas.common import CategoryRef, ORMBase, TagRef

# Largest value a NUMERIC(10, 2) price column holds
MAX_PRICE = 99999999.99


def _tag_ids_field():
    # Accept both snake_case and the camelCase key older clients send
    return Field(
        default=None,
        validation_alias=AliasChoices("tag_ids", "tagIds"),
        description="Complete desired tag id list, not a delta",
    )


class _ProductFieldRules(BaseModel):
    @field_validator("name", check_fields=False)
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("price", check_fields=False)
    @classmethod
    def price_two_places(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else round(v, 2)


# Shared scalar attributes, all required
class ProductBase(_ProductFieldRules):
    name: str = Field(..., max_length=200, description="Product name")
    price: float = Field(..., ge=0, le=MAX_PRICE)
    stock: int = Field(..., ge=0)
    category_id: int


# POST body: scalars plus the initial tag set
class ProductCreate(ProductBase):
    tag_ids: Optional[List[int]] = _tag_ids_field()


# PUT body: full scalar replacement, tags optional
class ProductReplace(ProductBase):
    tag_ids: Optional[List[int]] = _tag_ids_field()


# PATCH body: every field optional, unset fields keep their value
class ProductPatch(_ProductFieldRules):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, ge=0, le=MAX_PRICE)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    tag_ids: Optional[List[int]] = _tag_ids_field()


class ProductOut(ORMBase):
    id: int
    name: str
    price: float
    stock: int
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    tags: List[TagRef] = []


class ProductUpdateOut(BaseModel):
    product: ProductOut
    tags_before: List[int]
    tags_after: List[int]
    changed_fields: List[str]


class ProductDeleteOut(BaseModel):
    detail: str
