import importlib
import pathlib
import sys
from datetime import datetime, timezone

import pytest

# Ensure project root on sys.path for `import gradestore`
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture()
def db_tmpdir(tmp_path, monkeypatch):
    data_dir = tmp_path / "var"
    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "gradestore.db"

    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.setenv("SQLITE_PATH", str(db_path))

    import gradestore.core.config as config

    importlib.reload(config)
    return tmp_path


@pytest.fixture()
def store(db_tmpdir):
    from gradestore.core.store import provision

    with provision() as s:
        yield s


@pytest.fixture()
def make_exercise():
    from gradestore.core.models import Exercise

    def _make(exercise_id: int = 1, points=(10, 20, 30), name: str = "Ex"):
        due = datetime(2025, 3, 1, 23, 59, tzinfo=timezone.utc)
        ex = Exercise(exercise_id, f"{name} {exercise_id}", due)
        for i, p in enumerate(points, start=1):
            ex.add_question(f"Q{i}", f"question {i}", p)
        return ex

    return _make
