from .exceptions import InvalidArgumentError
from .stores import CountStore


def estimate_from_counts(counts: CountStore, has_more_pages: bool, page_size: int) -> int:
    """
    Estimates the total number of records from the pages fetched so far.

    While more pages exist the estimate is the known records plus one average
    page, but never less than one full page past the highest known page.
    Once the end has been reached it is the exact sum of the page counts.
    """
    if page_size <= 0:
        raise InvalidArgumentError("page_size", page_size, "positive")

    known_records = counts.total()
    max_known_page = counts.max_page()

    if has_more_pages and max_known_page is not None:
        avg_per_page = known_records // (max_known_page + 1)
        return max(known_records + avg_per_page, (max_known_page + 2) * page_size)

    return known_records
