from typing import Tuple


class Page:
    """Offset/limit arithmetic for ``page``/``per_page`` query parameters."""

    def __init__(self, default_size: int = 10, max_size: int = 100):
        self.default_size = default_size
        self.max_size = max_size

    def normalize(self, page: int, per_page: int) -> Tuple[int, int]:
        if page is None or page < 1:
            page = 1
        if per_page is None or per_page < 1:
            per_page = self.default_size
        return page, min(per_page, self.max_size)

    def offset(self, page: int, per_page: int) -> int:
        return max(0, (page - 1) * per_page)
