from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TableOptions(BaseModel):
    """
    Configuration options for a server-driven table.

    Instances are immutable and compare/hash by value, so they can be
    shared between tables or used as cache keys.

    Attributes:
        default_page_size: Page size used until the user picks another one
        search_debounce_ms: Delay the UI waits after the last keystroke before searching
        debug: Emit per-request DEBUG log records
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    default_page_size: int = Field(default=10, gt=0)
    search_debounce_ms: int = Field(default=300, ge=0)
    debug: bool = False

    def clone(self, **changes: object) -> "TableOptions":
        """Returns an equal copy, optionally with some fields changed (re-validated)."""
        return self.model_validate({**self.model_dump(), **changes})
