from __future__ import annotations

from rest_framework.pagination import PageNumberPagination


class DefaultPagination(PageNumberPagination):
    """Page-number pagination shared by every list endpoint.

    Pages hold ``PAGE_SIZE`` items (20); clients may ask for up to 100
    with ``?page_size=N``. Larger requests are clamped, not rejected.
    """

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
