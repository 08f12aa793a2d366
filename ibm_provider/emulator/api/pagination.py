from fastapi import Query


class CursorPaginationParams:
    def __init__(
        self,
        limit: int = Query(default=50, ge=1, le=100, description="Number of items to return"),
        start: str | None = Query(default=None, description="Opaque cursor of the page to return"),
    ) -> None:
        self.limit = limit
        self.start = start
