"""Pagination utilities."""

MAX_PAGE_LIMIT = 100
DEFAULT_PAGE_LIMIT = 20


def page_offset(page: int, limit: int) -> int:
    """
    Number of items to skip to reach a 1-indexed page.

    Example:
        >>> page_offset(page=3, limit=20)
        40
    """
    return (max(page, 1) - 1) * limit


def page_count(total: int, limit: int) -> int:
    """
    Number of pages needed to show total items.

    Example:
        >>> page_count(total=45, limit=20)
        3
    """
    return (total + limit - 1) // limit if limit else 0
