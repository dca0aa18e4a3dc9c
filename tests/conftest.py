import pytest

from pipeline.artifact_store import ArtifactStore


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(str(tmp_path / "temp"))
