# backend/services/outcomes.py
"""Results returned by the catalog services.

Failures form a closed set. Services return them instead of raising, and
the routers decide how each one is reported to the client.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple, Union

from models.product import Product


# ---- FAILURES ----
@dataclass(frozen=True)
class NotFound:
    resource: str
    id: int


@dataclass(frozen=True)
class InvalidReference:
    # Request field holding the bad ids, e.g. "category_id" or "tag_ids"
    field: str
    ids: Tuple[int, ...]


@dataclass(frozen=True)
class NoEffectiveChange:
    resource: str
    id: int


@dataclass(frozen=True)
class CategoryInUse:
    category_id: int
    product_ids: Tuple[int, ...]


@dataclass(frozen=True)
class StoreFailure:
    operation: str
    detail: str


Failure = Union[NotFound, InvalidReference, NoEffectiveChange, CategoryInUse, StoreFailure]
FAILURES = (NotFound, InvalidReference, NoEffectiveChange, CategoryInUse, StoreFailure)


def is_failure(outcome) -> bool:
    return isinstance(outcome, FAILURES)


# ---- SUCCESSES ----
@dataclass
class ProductCreated:
    product: Product
    tags: FrozenSet[int] = frozenset()


@dataclass
class ProductUpdated:
    product: Product
    tags_before: FrozenSet[int] = frozenset()
    tags_after: FrozenSet[int] = frozenset()
    changed_fields: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProductDeleted:
    product_id: int
    name: str


@dataclass(frozen=True)
class CategoryDeleted:
    category_id: int
    name: str
    policy: str
    affected_products: Tuple[int, ...] = ()
