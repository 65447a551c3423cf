from pydantic import BaseModel, model_validator

from ehrcore.core.config import DEFAULT_MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE


class PageRequest(BaseModel):
    """
    Normalised limit/offset for search and list.

    - limit <= 0      -> default page size
    - limit > maximum -> clamped to the maximum
    - offset < 0      -> 0
    """

    limit: int = 0
    offset: int = 0
    default_size: int = DEFAULT_PAGE_SIZE
    max_size: int = DEFAULT_MAX_PAGE_SIZE

    @model_validator(mode="after")
    def normalise(self) -> "PageRequest":
        if self.limit <= 0:
            self.limit = self.default_size
        self.limit = min(self.limit, self.max_size)
        self.offset = max(self.offset, 0)
        return self
