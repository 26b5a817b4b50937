import math
from dataclasses import dataclass
from typing import List

from django.conf import settings

# Keeps skip = (page - 1) * limit inside a 64-bit integer
MAX_PAGE_NUMBER = 100000


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def parse_page_params(query_params):
    """
    Read page/limit from query params. Bad values fall back to the defaults and
    limit never exceeds MAX_PAGE_SIZE.
    """
    page = min(_positive_int(query_params.get('page'), 1), MAX_PAGE_NUMBER)
    limit = _positive_int(query_params.get('limit'), settings.DEFAULT_PAGE_SIZE)
    return page, min(limit, settings.MAX_PAGE_SIZE)


@dataclass
class Page:
    items: List[dict]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self):
        return math.ceil(self.total / self.limit) if self.limit else 0

    def as_dict(self):
        return {
            "items": self.items,
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }
