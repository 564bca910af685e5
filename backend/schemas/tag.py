# backend/schemas/tag.py
from typing import List

from schemas.common import NamedInput, ORMBase, ProductRef


class TagCreate(NamedInput):
    pass


class TagUpdate(NamedInput):
    pass


class TagOut(ORMBase):
    id: int
    name: str
    products: List[ProductRef] = []
