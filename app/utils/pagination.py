"""
Page/page-size normalisation shared by the database listings and the
in-memory payment listing.
"""
import math
from typing import Optional, Tuple

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100


def normalize_page(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
    """Clamp page to >= 1 and page_size to 1..MAX_PAGE_SIZE (missing/zero -> default)."""
    page = max(1, page or 1)
    page_size = min(MAX_PAGE_SIZE, max(1, page_size or DEFAULT_PAGE_SIZE))
    return page, page_size


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0
