"""
Durable store contract for Posts Service.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..posts.models import Post


class PostStore(ABC):
    """Table of posts with a secondary index on (username, createdAt).

    Implementations raise ``StoreWriteError`` / ``StoreReadError`` on failure.
    """

    @abstractmethod
    async def put(self, post: Post) -> None:
        """Persist a new post atomically; an existing id is rejected."""

    @abstractmethod
    async def get_by_key(self, post_id: str) -> Optional[Post]:
        """Point lookup by primary key; ``None`` when absent."""

    @abstractmethod
    async def scan_all(self) -> List[Post]:
        """Every post, in no particular order."""

    @abstractmethod
    async def query_by_partition(self, username: str) -> List[Post]:
        """Posts owned by ``username``, in no guaranteed order."""

    async def start(self) -> None:
        """Open connections. No-op by default."""

    async def stop(self) -> None:
        """Release connections. No-op by default."""

    async def health_check(self) -> bool:
        return True
