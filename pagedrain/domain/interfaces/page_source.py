"""Interface for paginated data sources.

The drainer itself only needs a `page_fetch(offset, limit)` callable; this
ABC is the port that concrete sources (files, databases, APIs) implement
so they can be handed over as `source.fetch_page`.
"""

import abc
from typing import Any, List, Optional

from pagedrain.domain.models.common import Offset, PageSize


class PageSource(abc.ABC):
    """Abstract Base Class for offset/limit paginated sources."""

    @abc.abstractmethod
    async def fetch_page(self, offset: Offset, limit: PageSize) -> Optional[List[Any]]:
        """Fetches up to `limit` items starting at `offset`.

        Args:
            offset: Number of items already consumed from the source.
            limit: Maximum number of items to return.

        Returns:
            The next page of items. An empty list (or None) signals that the
            source is exhausted.
        """
        pass
