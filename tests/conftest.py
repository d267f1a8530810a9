import pytest

from swellcast.surf_model import storage
from swellcast.surf_model.config import FEATURE_FIELDS


def _conditions(value=1.0, **overrides):
    record = {field: float(value) for field in FEATURE_FIELDS if field != 'seaLevel'}
    record.update(overrides)
    return record


def _sample(value=1.0, wave_size='small', quality='clean', time='2025-01-01T00:00', **overrides):
    record = _conditions(value, **overrides)
    record['time'] = time
    record['rating_waveSize'] = wave_size
    record['rating_quality'] = quality
    return record


@pytest.fixture
def make_conditions():
    """Factory for a conditions record with every required field set to value."""
    return _conditions


@pytest.fixture
def make_sample():
    """Factory for a stored-shape rating sample."""
    return _sample


@pytest.fixture
def ratings_dir(tmp_path, monkeypatch):
    """Point the rating store at a temporary directory."""
    path = tmp_path / 'ratings'
    monkeypatch.setattr(storage, 'RATINGS_DIR', str(path))
    return path
