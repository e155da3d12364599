import json
from pathlib import Path

import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from pagedrain.domain.interfaces.job_queue import JobQueue
from pagedrain.domain.interfaces.user_interface import UserInterface
from pagedrain.infrastructure.config.settings import clear_test_config


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def mock_job_queue():
    """JobQueue double whose enqueue_job returns job-1, job-2, ..."""
    mock = MagicMock(spec=JobQueue)
    counter = {"n": 0}

    def _enqueue(queue_name, job_name, payload):
        counter["n"] += 1
        return f"job-{counter['n']}"

    mock.enqueue_job.side_effect = _enqueue
    return mock

@pytest.fixture
def jsonl_file(tmp_path: Path) -> Path:
    """Seven records (ids 0..6) with a blank line in the middle."""
    path = tmp_path / "records.jsonl"
    lines = [json.dumps({"id": i}) for i in range(7)]
    lines.insert(4, "")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path

@pytest.fixture(autouse=True)
def reset_test_config():
    """Drop any set_config_for_testing overrides after each test."""
    yield
    clear_test_config()
