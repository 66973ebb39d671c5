import itertools
import sys
import threading
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Гарантируем, что корень проекта (с пакетом cc) в sys.path,
# независимо от того, откуда запущен pytest.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from cc.errors import ValidationError  # noqa: E402
from cc.main import create_app  # noqa: E402
from cc.repository import Mapping, MappingStore  # noqa: E402


class FakeStore:
    """Хранилище в памяти с тем же контрактом, что и MappingStore."""

    def __init__(self):
        self.path = ":memory:"
        self.data = {}
        self._lock = threading.Lock()
        self._counter = itertools.count()
        self.error = None

    def init(self):
        pass

    def put(self, url):
        if self.error:
            raise self.error
        if not url:
            raise ValidationError("url is empty")
        with self._lock:
            code = f"c{next(self._counter):05d}"
            self.data[code] = url
        return code

    def get(self, code):
        if self.error:
            raise self.error
        return self.data.get(code)

    def list(self):
        return [Mapping(code, url) for code, url in self.data.items()]


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "cc.db"


@pytest.fixture
def store(db_path):
    store = MappingStore(db_path)
    store.init()
    return store


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as client:
        yield client


@pytest.fixture
def fake_client(fake_store):
    with TestClient(create_app(fake_store)) as client:
        yield client
