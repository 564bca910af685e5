# backend/utils/errors.py
from fastapi import HTTPException

from services.outcomes import (
    CategoryInUse,
    InvalidReference,
    NoEffectiveChange,
    NotFound,
    StoreFailure,
)


def http_error_for(outcome) -> HTTPException:
    """Map a service failure onto the HTTP error reported to the client."""
    if isinstance(outcome, NotFound):
        return HTTPException(
            status_code=404,
            detail=f"No {outcome.resource} found with id {outcome.id}",
        )
    if isinstance(outcome, InvalidReference):
        ids = ", ".join(str(i) for i in outcome.ids)
        return HTTPException(
            status_code=400,
            detail={"message": f"Unknown {outcome.field}: {ids}", "field": outcome.field, "ids": list(outcome.ids)},
        )
    if isinstance(outcome, NoEffectiveChange):
        return HTTPException(
            status_code=400,
            detail=f"Request describes no change to {outcome.resource} {outcome.id}",
        )
    if isinstance(outcome, CategoryInUse):
        return HTTPException(
            status_code=409,
            detail={
                "message": f"Category {outcome.category_id} still has products",
                "product_ids": list(outcome.product_ids),
            },
        )
    if isinstance(outcome, StoreFailure):
        return HTTPException(status_code=500, detail=f"Database error during {outcome.operation}")
    raise TypeError(f"Not a failure outcome: {outcome!r}")
