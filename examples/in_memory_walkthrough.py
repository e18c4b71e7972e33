"""
Example walking a table page by page against a cursor-only backend.

The backend below never reports a total, so the table shows an estimate that
grows while more pages exist and becomes exact once the last page is seen.
"""

import logging

from gridpager import InMemoryTableSource, ServerTable, TableOptions, TableRequest, TableResponse

logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s %(message)s")

employees = [
    {"id": i, "name": f"Employee {i:03d}", "department": dept}
    for i, dept in enumerate(["Engineering", "Sales", "HR"] * 15)
]
backend = InMemoryTableSource(employees)


def cursor_only(request: TableRequest) -> TableResponse:
    """Hides the totals, as DynamoDB would."""
    response = backend(request)
    return response.model_copy(update={"total_records": 0, "total_filtered_records": 0})


table = ServerTable(cursor_only, TableOptions(default_page_size=10, debug=True))


@table.on_filter
def show_filter(args):
    print(f"filter changed: term={args.search_term!r} page_size={args.page_size}")


table.first_page()
while True:
    print(f"page {table.current_page + 1}: ~{table.total_records} records, has_next={table.has_next}")
    if table.next_page() is None:
        break

print(f"exact total: {table.total_records}")

# Jump back: the token for page 2 was recorded on the way forward
table.load_page(1)
print(f"back on page {table.current_page + 1}, first row: {table.last_response.data[0]}")

# A new page size invalidates every token
table.set_page_size(20)
print(f"page size {table.page_size}: ~{table.total_records} records")
