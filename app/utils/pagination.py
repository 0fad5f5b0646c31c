# app/utils/pagination.py
import math


def normalize_page(page: int | None) -> int:
    """Pages are 1-based; anything below 1 means the first page."""
    return page if page and page > 0 else 1


def parse_page(raw: str | None) -> int:
    """
    Lenient parse of a ?page= query value coming from a browser link.
    Non-numeric values fall back to the first page.
    """
    try:
        return normalize_page(int(raw)) if raw is not None else 1
    except ValueError:
        return 1


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


def page_offset(page: int, page_size: int) -> int:
    return (normalize_page(page) - 1) * page_size
