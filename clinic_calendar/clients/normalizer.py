"""Normalization of backend list responses.

List endpoints do not agree on their envelope: most return ``elements`` but
some return ``data`` (or ``items``), and the page count is spelled either
``totalPages`` or ``totalPage``. Everything is mapped onto ``Page`` here so
nothing past the client sees the raw shape.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from clinic_calendar.models.pagination import Page
from clinic_calendar.utils.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ITEM_KEYS = ("elements", "data", "items")
TOTAL_PAGES_KEYS = ("totalPages", "totalPage")


def normalize_page(payload: Any, model: type[ModelT]) -> Page[ModelT]:
    """Convert a raw list response into a ``Page`` of validated models.

    Items that fail validation (an unknown status, an event ending before it
    starts) are logged and dropped rather than failing the whole page.

    Args:
        payload: Decoded JSON body of a list endpoint
        model: Model each item is validated against

    Returns:
        Page with the items that validated
    """
    if isinstance(payload, list):
        raw_items: Any = payload
        payload = {}
    elif isinstance(payload, dict):
        raw_items = next((payload[key] for key in ITEM_KEYS if key in payload), [])
    else:
        logger.warning(f"Unexpected {model.__name__} list payload type: {type(payload).__name__}")
        return Page[model].empty()

    if not isinstance(raw_items, list):
        logger.warning(f"{model.__name__} list payload items are not a list")
        raw_items = []

    items = [item for item in (_validate_item(raw, model) for raw in raw_items) if item is not None]

    total_pages = next((payload[key] for key in TOTAL_PAGES_KEYS if payload.get(key)), 0)
    return Page[model](
        items=items,
        total_count=payload.get("totalCount") or len(raw_items),
        total_pages=total_pages,
        page=payload.get("page") or 1,
    )


def _validate_item(raw: Any, model: type[ModelT]) -> ModelT | None:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        item_id = raw.get("id") if isinstance(raw, dict) else None
        logger.warning(f"Dropping invalid {model.__name__} {item_id}: {e.errors(include_url=False)}")
        return None
