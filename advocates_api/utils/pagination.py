from typing import List, Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE = 6


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    if total <= 0:
        return 0
    return (total + page_size - 1) // page_size


def page_offset(page: int, page_size: int = PAGE_SIZE) -> int:
    return (page - 1) * page_size


def page_slice(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> List[T]:
    if page < 1 or page > page_count(len(items), page_size):
        return []
    start = page_offset(page, page_size)
    return list(items[start:start + page_size])


def page_numbers(total: int, page_size: int = PAGE_SIZE) -> List[int]:
    """Every selectable page, 1..page_count."""
    return list(range(1, page_count(total, page_size) + 1))


def expected_page_length(total: int, page: int, page_size: int = PAGE_SIZE) -> int:
    return min(page_size, max(0, total - page_offset(page, page_size)))


def paginate(items: Sequence[T], page: int, page_size: int = PAGE_SIZE):
    total_items = len(items)

    return {
        "total_items": total_items,
        "total_pages": page_count(total_items, page_size),
        "current_page": page,
        "page_size": page_size,
        "items": page_slice(items, page, page_size),
    }
