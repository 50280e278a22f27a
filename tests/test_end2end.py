from datetime import datetime, timedelta, timezone
import uuid
from urllib.parse import parse_qs, urlparse

import pytest

from aeinfo.core.security import create_access_token
from aeinfo.main import build_platform
from aeinfo.schemas.info import Info
from aeinfo.services.module_service import register_version
from aeinfo.services.taskqueue_service import add_task, complete_task, lease_tasks

URL = "/_ah/aeinfo/"


def _auth(role="admin", email="admin@example.com"):
    token = create_access_token({"sub": email, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def platform(file_session_factory):
    return build_platform(file_session_factory)


@pytest.fixture()
def db(file_session_factory):
    session = file_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.mark.order(1)
def test_anonymous_request_redirects_to_login(client, platform):
    res = client(platform).get(URL, follow_redirects=False)

    assert res.status_code == 307
    location = urlparse(res.headers["location"])
    assert location.path == "/accounts/login"
    assert parse_qs(location.query)["continue"] == ["http://testserver/_ah/aeinfo/"]


@pytest.mark.order(2)
def test_regular_user_is_forbidden(client, platform):
    res = client(platform).get(URL, headers=_auth(role="user", email="user@example.com"))
    assert res.status_code == 403
    assert res.text == "Forbidden"


@pytest.mark.order(3)
def test_fresh_instance_report(client, platform):
    res = client(platform).get(URL, headers=_auth())
    assert res.status_code == 200

    body = res.json()
    assert body["modules"] == []
    assert body["memcache"]["hits"] == 0
    assert body["taskqueue"]["name"] == "default"
    assert body["taskqueue"]["tasks"] == 0
    assert body["caller"]["email"] == "admin@example.com"
    assert body["ram"]["current"] > 0
    assert body["goVersion"].startswith("python")


@pytest.mark.order(4)
def test_report_reflects_platform_state(client, platform, db):
    register_version(db, "default", "v1")
    register_version(db, "default", "v2")
    register_version(db, "worker", "w7")

    now = datetime.utcnow()
    first_eta = (now - timedelta(minutes=3)).replace(microsecond=0)
    add_task(db, "default", payload="resize", eta=first_eta)
    add_task(db, "default", payload="resize", eta=now - timedelta(minutes=1))
    add_task(db, "default", payload="notify", eta=now - timedelta(minutes=2))
    add_task(db, "default", payload="later", eta=now + timedelta(hours=2))
    finished = add_task(db, "default", task_name=f"TASK_{uuid.uuid4().hex[:8]}", eta=now - timedelta(minutes=5))
    complete_task(db, finished.task_name)
    lease_tasks(db, "default", limit=1)

    platform.cache.set("user:42", b"{\"name\": \"ada\"}")
    platform.cache.get("user:42")
    platform.cache.get("user:43")
    platform.cache.get("user:44")

    before = datetime.now(timezone.utc)
    res = client(platform).get(URL, headers=_auth())
    after = datetime.now(timezone.utc)
    assert res.status_code == 200

    info = Info.model_validate_json(res.text)
    assert {m.name: sorted(m.versions) for m in info.modules} == {
        "default": ["v1", "v2"],
        "worker": ["w7"],
    }
    assert info.memcache.hits == 1
    assert info.memcache.misses == 2
    assert info.memcache.byte_hits == 15
    assert info.memcache.items == 1
    assert info.taskqueue.tasks == 3
    assert info.taskqueue.in_flight == 1
    assert info.taskqueue.executed_1_minute == 1
    assert info.taskqueue.oldest_eta == (now - timedelta(minutes=2)).replace(tzinfo=timezone.utc)
    assert info.taskqueue.enforced_rate == pytest.approx(5.0)
    assert before <= info.server_time <= after
