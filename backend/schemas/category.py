# backend/schemas/category.py
from pydantic import BaseModel
from typing import List

from schemas.common import NamedInput, ORMBase, ProductRef


class CategoryCreate(NamedInput):
    pass


class CategoryUpdate(NamedInput):
    pass


class CategoryOut(ORMBase):
    id: int
    name: str
    products: List[ProductRef] = []


class CategoryDeleteOut(BaseModel):
    detail: str
    policy: str
    affected_products: List[int] = []
