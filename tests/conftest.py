import pytest
import tempfile


@pytest.fixture(autouse=True)
def isolated_workspace(monkeypatch):
    """Isolate the output root for each test."""
    with tempfile.TemporaryDirectory() as temp_dir:
        monkeypatch.setenv("NH_OUTPUT_ROOT", temp_dir)
        yield temp_dir
