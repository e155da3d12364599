"""JSON-lines file exposed as an offset/limit paginated source.

Each non-blank line is one JSON record; `offset` counts records, not lines.
The file is re-read on every page fetch, so the source holds no state
between calls.
"""

import asyncio
import itertools
import json
import logging
from pathlib import Path
from typing import Any, Iterator, List, Tuple, Union

from pagedrain.domain.interfaces.page_source import PageSource
from pagedrain.domain.models.common import Offset, PageSize

logger = logging.getLogger(__name__)


class JsonLinesPageSource(PageSource):
    """Concrete PageSource reading records from a .jsonl file."""

    def __init__(self, path: Union[str, Path], encoding: str = 'utf-8'):
        self.path = Path(path)
        self.encoding = encoding

    async def fetch_page(self, offset: Offset, limit: PageSize) -> List[Any]:
        """Returns up to `limit` records starting at record `offset`.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If a line in the requested page is not valid JSON.
        """
        if offset < 0 or limit < 1:
            raise ValueError(f"Invalid page request offset={offset} limit={limit}")
        return await asyncio.to_thread(self._read_page, offset, limit)

    def _read_page(self, offset: int, limit: int) -> List[Any]:
        with open(self.path, 'r', encoding=self.encoding) as f:
            page = [
                self._decode(line_no, line)
                for line_no, line in itertools.islice(self._records(f), offset, offset + limit)
            ]
        logger.debug(f"Read {len(page)} records from {self.path} at offset {offset}")
        return page

    @staticmethod
    def _records(lines) -> Iterator[Tuple[int, str]]:
        for line_no, line in enumerate(lines, start=1):
            if line.strip():
                yield line_no, line

    def _decode(self, line_no: int, line: str) -> Any:
        try:
            return json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"{self.path}:{line_no}: invalid JSON record ({e.msg})") from e
