import sys
from pathlib import Path

# 프로젝트 루트 경로를 sys.path에 추가 (…/<project-root>)
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient
from search_api.app.main import app
from search_api.app.adapters.indexers.alias_resolver import IndexAliasResolver
from search_api.app.domain.known_fields import KnownFieldsOptions, KnownFieldsProvider
from search_api.tests.fakes import FakeOpenSearch, fake_helpers

@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def known_fields():
    return KnownFieldsProvider(KnownFieldsOptions(
        global_fields=["authorName", "categoryName", "articleYear", "price", "publishDate", "contentTypeAlias"],
    ))


@pytest.fixture
def alias_resolver():
    return IndexAliasResolver("test")


@pytest.fixture
def fake_opensearch(monkeypatch):
    """helpers.bulk / helpers.scan 까지 인메모리로 바꾼 OpenSearch."""
    monkeypatch.setattr(
        "search_api.app.adapters.indexers.opensearch_indexer.helpers", fake_helpers
    )
    return FakeOpenSearch()
