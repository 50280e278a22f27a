import asyncio
import os
from datetime import datetime, timezone
from types import SimpleNamespace
from urllib.parse import quote

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOGIN_URL", "https://login.example.com/accounts/login")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from aeinfo.database.connection import Base
from aeinfo.dependencies.platform import get_platform
from aeinfo.main import app
from aeinfo.models import module_version, task  # noqa: F401
from aeinfo.schemas.info import CPU, RAM, CacheStats, QueueStats, RuntimeStats
from aeinfo.schemas.user import CurrentUser
from aeinfo.services.platform import Platform

TEST_DB_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def create_test_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def connection():
    connection = engine.connect()
    trans = connection.begin()
    try:
        yield connection
    finally:
        trans.rollback()
        connection.close()


@pytest.fixture()
def db(connection):
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def session_factory(connection):
    return lambda: TestingSessionLocal(bind=connection)


@pytest.fixture()
def file_session_factory(tmp_path):
    """Sessions on their own connections, safe to use from several threads at once."""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'aeinfo.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    file_engine.dispose()


# ---------- Fake platform ----------

class FakeEnvironment:
    def __init__(self, dev=False):
        self.dev = dev

    def app_id(self): return "s~test-app"
    def datacenter(self): return "us2"
    def default_version_hostname(self): return "test-app.appspot.com"
    def instance_id(self): return "00c61b117c"
    def is_dev_app_server(self): return self.dev
    def module_name(self): return "default"
    def server_software(self): return "Google App Engine/1.9.0"
    def version_id(self): return "v2.389201"
    def runtime_version(self): return "python3.12.4"
    def now(self): return datetime.now(timezone.utc)


class FakeIdentity:
    def __init__(self, user=None, login_error=None):
        self.user = user
        self.login_error = login_error

    def current_user(self, request):
        return self.user

    def login_url(self, dest):
        if self.login_error:
            raise self.login_error
        return "https://login.example.com/?continue=" + quote(dest, safe="")


class _Recorder:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def _answer(self, result):
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return result


class FakeCache(_Recorder):
    async def stats(self):
        return await self._answer(self.result)


class FakeQueue(_Recorder):
    async def queue_stats(self, names):
        self.names = list(names)
        return await self._answer(self.result)


class FakeRuntime(_Recorder):
    async def stats(self):
        return await self._answer(self.result)


class FakeModules(_Recorder):
    def __init__(self, modules=None, error=None, versions_error=None, delay=0.0):
        super().__init__(result=modules or {}, error=error, delay=delay)
        self.versions_error = versions_error

    async def list_modules(self):
        return await self._answer(list(self.result))

    async def versions(self, module):
        if self.versions_error:
            raise self.versions_error
        return list(self.result[module])


@pytest.fixture()
def fakes():
    return SimpleNamespace(
        Environment=FakeEnvironment,
        Identity=FakeIdentity,
        Cache=FakeCache,
        Queue=FakeQueue,
        Runtime=FakeRuntime,
        Modules=FakeModules,
    )


ADMIN = CurrentUser(email="admin@example.com", is_admin=True)
USER = CurrentUser(email="user@example.com", is_admin=False)


@pytest.fixture()
def make_platform():
    """
    Platform of fakes returning fixed values; pass providers to replace any of them.
    """
    def _make(**overrides):
        providers = dict(
            environment=FakeEnvironment(),
            identity=FakeIdentity(user=ADMIN),
            cache=FakeCache(CacheStats(hits=10, misses=2, byte_hits=640, items=4, bytes=2048, oldest=37)),
            taskqueue=FakeQueue([QueueStats(name="default", tasks=3, executed_1_minute=7, in_flight=1, enforced_rate=5.0)]),
            modules=FakeModules({"default": ["v1", "v2"]}),
            runtime=FakeRuntime(RuntimeStats(
                cpu=CPU(total=1520.25, rate_1m=12.5, rate_10m=9.75),
                ram=RAM(current=48.5, average_1m=47.25, average_10m=45.125),
            )),
        )
        providers.update(overrides)
        return Platform(**providers)
    return _make


@pytest.fixture()
def client():
    def _client(platform):
        app.dependency_overrides[get_platform] = lambda: platform
        return TestClient(app)
    yield _client
    app.dependency_overrides.clear()
