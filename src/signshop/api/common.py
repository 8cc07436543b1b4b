"""
Helpers shared by the API routers.
"""
from dataclasses import asdict, is_dataclass

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder

from ..services.plans import PlanLimitError
from ..services.store import Page


def call_service(fn, *args, **kwargs):
    """Run a service call, mapping its errors onto HTTP responses."""
    try:
        return fn(*args, **kwargs)
    except PlanLimitError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        status = 404 if "not found" in str(e) else 400
        raise HTTPException(status_code=status, detail=str(e))


def page_response(page: Page, encode=None) -> dict:
    encode = encode or (lambda row: row)
    return {
        "data": [jsonable_encoder(encode(row)) for row in page.data],
        "count": page.count,
        "total_pages": page.total_pages,
    }


def found(record, kind: str, record_id: str) -> dict:
    """404 for a missing record, otherwise its dict form."""
    if record is None:
        raise HTTPException(status_code=404, detail=f"{kind} '{record_id}' not found")
    return asdict(record) if is_dataclass(record) else record
