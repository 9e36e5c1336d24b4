import time
from typing import Optional

from storefront.core.errors import DeadlineExceededError


class Deadline:
    """A point in monotonic time after which a unit of work must give up."""

    def __init__(self, expires_at: float):
        self.expires_at = expires_at

    @classmethod
    def after(cls, timeout: Optional[float]) -> Optional['Deadline']:
        if timeout is None:
            return None
        return cls(time.monotonic() + timeout)

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, step: str = '') -> None:
        if self.expired():
            raise DeadlineExceededError(message=f'deadline exceeded{" during " + step if step else ""}')


def check_deadline(deadline: Optional[Deadline], step: str = '') -> None:
    if deadline is not None:
        deadline.check(step)
