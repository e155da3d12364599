import json
from pathlib import Path
from typing import Any, List

import pytest

from pagedrain.core.batch_processor import process_in_batches
from pagedrain.domain.models.batch import DrainOptions
from pagedrain.infrastructure.sources.jsonl_source import JsonLinesPageSource


@pytest.mark.asyncio
async def test_pages_skip_blank_lines(jsonl_file: Path):
    source = JsonLinesPageSource(jsonl_file)

    assert await source.fetch_page(0, 3) == [{"id": 0}, {"id": 1}, {"id": 2}]
    assert await source.fetch_page(3, 3) == [{"id": 3}, {"id": 4}, {"id": 5}]
    assert await source.fetch_page(6, 3) == [{"id": 6}]
    assert await source.fetch_page(7, 3) == []

@pytest.mark.asyncio
async def test_malformed_line_names_line_number(tmp_path: Path):
    path = tmp_path / "broken.jsonl"
    path.write_text('{"id": 1}\n{"id": 2}\n{not json}\n', encoding="utf-8")
    source = JsonLinesPageSource(path)

    assert await source.fetch_page(0, 2) == [{"id": 1}, {"id": 2}]
    with pytest.raises(ValueError, match=r"broken\.jsonl:3: invalid JSON"):
        await source.fetch_page(2, 2)

@pytest.mark.asyncio
async def test_missing_file_raises(tmp_path: Path):
    source = JsonLinesPageSource(tmp_path / "absent.jsonl")
    with pytest.raises(FileNotFoundError):
        await source.fetch_page(0, 10)

@pytest.mark.asyncio
@pytest.mark.parametrize("offset, limit", [(-1, 5), (0, 0)])
async def test_rejects_invalid_page_request(jsonl_file: Path, offset: int, limit: int):
    with pytest.raises(ValueError):
        await JsonLinesPageSource(jsonl_file).fetch_page(offset, limit)

@pytest.mark.asyncio
async def test_drains_whole_file(tmp_path: Path):
    path = tmp_path / "big.jsonl"
    path.write_text("".join(json.dumps({"n": i}) + "\n" for i in range(25)), encoding="utf-8")
    seen: List[Any] = []

    async def handler(items: List[Any]) -> None:
        seen.extend(item["n"] for item in items)

    result = await process_in_batches(
        JsonLinesPageSource(path).fetch_page, handler, DrainOptions(batch_size=10)
    )

    assert sorted(seen) == list(range(25))
    assert result.pages_processed == 3
    assert result.fetch_calls == 4
