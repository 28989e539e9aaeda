import os

import pytest

# Use in-memory sqlite for tests; must be set before settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")


@pytest.fixture
def client():
    from fastapi.testclient import TestClient  # noqa: WPS433
    from motiontrack.core.config import settings  # noqa: WPS433
    from motiontrack.engine.clock import ManualClock  # noqa: WPS433
    from motiontrack.main import app, build_tracker  # noqa: WPS433

    saved = (app.state.tracker, app.state.sensor, app.state.feed)
    clock = ManualClock()
    app.state.tracker, app.state.sensor, app.state.feed = build_tracker(settings, clock=clock)
    app.state.clock = clock
    try:
        yield TestClient(app)
    finally:
        app.state.tracker, app.state.sensor, app.state.feed = saved
