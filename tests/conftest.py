"""Shared fixtures for the annotator test suite."""

import pytest
from fastapi.testclient import TestClient

from pointcloud_annotator.app import create_app
from pointcloud_annotator.config import Settings
from pointcloud_annotator.errors import InfrastructureError
from pointcloud_annotator.store import MemoryAnnotationStore
from pointcloud_annotator.store.base import AnnotationStore


class BrokenStore(AnnotationStore):
    """Store whose backend is always unreachable."""

    name = "broken"

    def put(self, item):
        raise InfrastructureError("put", "connection refused")

    def scan(self):
        raise InfrastructureError("scan", "connection refused")

    def delete(self, annotation_id):
        raise InfrastructureError("delete", "connection refused")


@pytest.fixture
def settings(tmp_path):
    return Settings(store="memory", data_dir=tmp_path)


@pytest.fixture
def store():
    return MemoryAnnotationStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def test_client(app):
    return TestClient(app)


@pytest.fixture
def broken_client(settings):
    return TestClient(create_app(settings, store=BrokenStore()))
