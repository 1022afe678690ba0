# storecast/services/content_query.py
"""
In-memory filter / sort / group / paginate over fetched content rows.

Everything here is pure: views re-run the pipeline on every request with
the current filter, sort and page.
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, timezone
from math import ceil
from typing import Literal, Sequence

from storecast.core.timeutils import parse_instant, utcnow
from storecast.schemas.content import ContentRead
from storecast.services.content_status import ContentStatus, classify_status

SortField = Literal["created_at", "title", "file_size", "type"]
SortDirection = Literal["asc", "desc"]
GroupMode = Literal["location", "company"]
ViewMode = Literal["grid", "list"]

PAGE_SIZES: dict[str, int] = {"grid": 12, "list": 10}

UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_COMPANY = "Unknown Company"

GroupedContent = dict[str, dict[str, dict[str, list[ContentRead]]]]


@dataclass(frozen=True)
class ContentFilter:
    """
    Optional constraints, combined with AND. Empty values mean "no constraint".

    `created_after` / `created_before` given as plain dates cover the whole
    day on both ends.
    """

    search: str | None = None
    type: str | None = None
    status: ContentStatus | str | None = None
    created_after: date | datetime | None = None
    created_before: date | datetime | None = None
    client_email: str | None = None
    company: str | None = None

    def is_empty(self) -> bool:
        return not any(
            (
                self.search,
                self.type,
                self.status,
                self.created_after,
                self.created_before,
                self.client_email,
                self.company,
            )
        )


@dataclass(frozen=True)
class ContentSort:
    field: SortField = "created_at"
    direction: SortDirection = "desc"


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def _lower_bound(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return parse_instant(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _upper_bound_exclusive(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return parse_instant(value) + timedelta(microseconds=1)
    return datetime.combine(value + timedelta(days=1), time.min, tzinfo=timezone.utc)


def _matches(item: ContentRead, criteria: ContentFilter, now: datetime) -> bool:
    store = item.store

    if criteria.search:
        needle = criteria.search.strip().lower()
        if needle and not (
            _contains(item.title, needle)
            or _contains(store.name if store else None, needle)
            or _contains(store.brand_company if store else None, needle)
        ):
            return False

    if criteria.type and item.type != criteria.type:
        return False

    if criteria.status:
        wanted = ContentStatus(criteria.status)
        if classify_status(item.start_date, item.end_date, now) != wanted:
            return False

    created = parse_instant(item.created_at)
    if criteria.created_after and (created is None or created < _lower_bound(criteria.created_after)):
        return False
    if criteria.created_before and (
        created is None or created >= _upper_bound_exclusive(criteria.created_before)
    ):
        return False

    if criteria.client_email and not _contains(item.owner_email, criteria.client_email.strip().lower()):
        return False

    if criteria.company and not _contains(
        store.brand_company if store else None, criteria.company.strip().lower()
    ):
        return False

    return True


def filter_content(
    items: Sequence[ContentRead],
    criteria: ContentFilter,
    now: datetime | None = None,
) -> list[ContentRead]:
    """Keep items matching every active constraint, preserving input order."""
    if criteria.is_empty():
        return list(items)
    reference = now or utcnow()
    return [item for item in items if _matches(item, criteria, reference)]


def _sort_key(item: ContentRead, field_name: SortField):
    if field_name == "created_at":
        created = parse_instant(item.created_at)
        return created.timestamp() if created else float("-inf")
    if field_name == "file_size":
        return item.file_size or 0
    value = getattr(item, field_name) or ""
    return str(value).lower()


def sort_content(items: Sequence[ContentRead], sort: ContentSort) -> list[ContentRead]:
    """
    Stable sort: ties keep their input order in both directions.
    """
    return sorted(
        items,
        key=lambda item: _sort_key(item, sort.field),
        reverse=sort.direction == "desc",
    )


def location_of(item: ContentRead) -> str:
    """Text before the first comma of the store address."""
    address = item.store.address if item.store else None
    if not address:
        return UNKNOWN_LOCATION
    return address.split(",", 1)[0].strip() or UNKNOWN_LOCATION


def company_of(item: ContentRead) -> str:
    company = item.store.brand_company if item.store else None
    return (company or "").strip() or UNKNOWN_COMPANY


def group_content(
    items: Sequence[ContentRead],
    mode: GroupMode = "location",
    sort: ContentSort = ContentSort(),
) -> GroupedContent:
    """
    Nest items as location -> company -> type (mode="location") or
    company -> location -> type (mode="company").

    Every item lands in exactly one leaf; leaves follow the active sort.
    """
    grouped: GroupedContent = {}
    for item in sort_content(items, sort):
        location = location_of(item)
        company = company_of(item)
        primary, secondary = (location, company) if mode == "location" else (company, location)
        grouped.setdefault(primary, {}).setdefault(secondary, {}).setdefault(item.type, []).append(item)
    return grouped


@dataclass(frozen=True)
class Page:
    items: list[ContentRead]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def paginate(items: Sequence[ContentRead], page: int = 1, view: ViewMode = "grid") -> Page:
    page_size = PAGE_SIZES[view]
    total_items = len(items)
    total_pages = max(1, ceil(total_items / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )


@dataclass(frozen=True)
class ContentBrowserState:
    """
    Filter / sort / view / page of a content browser.

    Changing the filter sends the browser back to page 1.
    """

    filter: ContentFilter = field(default_factory=ContentFilter)
    sort: ContentSort = field(default_factory=ContentSort)
    view: ViewMode = "grid"
    page: int = 1

    def with_filter(self, new_filter: ContentFilter) -> "ContentBrowserState":
        if new_filter == self.filter:
            return self
        return replace(self, filter=new_filter, page=1)

    def with_sort(self, new_sort: ContentSort) -> "ContentBrowserState":
        return replace(self, sort=new_sort)

    def with_view(self, view: ViewMode) -> "ContentBrowserState":
        return replace(self, view=view)

    def with_page(self, page: int) -> "ContentBrowserState":
        return replace(self, page=page)

    def apply(self, items: Sequence[ContentRead], now: datetime | None = None) -> Page:
        """Run filter -> sort -> paginate."""
        visible = sort_content(filter_content(items, self.filter, now), self.sort)
        return paginate(visible, self.page, self.view)


def annotate_status(
    items: Sequence[ContentRead],
    now: datetime | None = None,
) -> list[ContentRead]:
    """Copies of `items` with `status` filled in for display."""
    reference = now or utcnow()
    return [
        item.model_copy(
            update={"status": classify_status(item.start_date, item.end_date, reference).value}
        )
        for item in items
    ]
