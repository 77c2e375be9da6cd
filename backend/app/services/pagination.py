from ..config import DEFAULT_PAGE_LIMIT, MAX_PAGE, MAX_PAGE_LIMIT
from ..utils.validation import validate_integer_field


def parse_page_params(page: str | int | None, limit: str | int | None) -> tuple[int, int]:
    """Validate page/limit, applying defaults and the configured upper bounds."""
    page_num = validate_integer_field(page, "page", min_value=1, max_value=MAX_PAGE, required=False)
    limit_num = validate_integer_field(limit, "limit", min_value=1, max_value=MAX_PAGE_LIMIT, required=False)
    return page_num or 1, limit_num or DEFAULT_PAGE_LIMIT


def page_window(page: int, limit: int) -> tuple[int, int]:
    """Return (start_index, end_index) of the page; the window is [start, start + limit)."""
    return (page - 1) * limit, page * limit


def build_pagination(page: int, limit: int, total: int) -> dict:
    """
    Describe neighbouring pages.

    ``next`` is present only when records remain past this page and ``prev``
    only when this page does not start at the first record.
    """
    start_index, end_index = page_window(page, limit)
    pagination: dict = {}

    if end_index < total:
        pagination["next"] = {"page": page + 1, "limit": limit}

    if start_index > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}

    return pagination
