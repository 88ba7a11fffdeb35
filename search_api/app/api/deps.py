from __future__ import annotations

from fastapi import Depends, Request
from opensearchpy import OpenSearch

from search_api.app.adapters.indexers.alias_resolver import IndexAliasResolver
from search_api.app.adapters.indexers.opensearch_index_manager import OpenSearchIndexManager
from search_api.app.adapters.indexers.opensearch_indexer import OpenSearchIndexer
from search_api.app.adapters.opensearch_client import create_client
from search_api.app.adapters.searchers.opensearch_searcher import OpenSearchSearcher
from search_api.app.domain.known_fields import KnownFieldsProvider
from search_api.app.domain.services.index_service import IndexService
from search_api.app.domain.services.search_service import SearchService
from search_api.app.platform.config import Settings, settings
from search_api.app.platform.exceptions import ResourceNotFound


# ---- 클라이언트 ----
def get_opensearch(request: Request) -> OpenSearch:
    """
    앱 시작 시 main.py의 lifespan에서 만들어 넣어둔 OpenSearch 클라이언트를 꺼낸다.
    없으면(테스트 등) 즉석 생성.
    """
    if hasattr(request.app.state, "opensearch"):
        return request.app.state.opensearch
    return create_client(settings)


# ---- 조립 ----
def build_index_service(client: OpenSearch, cfg: Settings = settings) -> IndexService:
    """
    설정의 서버 역할을 boolean 으로 바꿔 indexer/index manager 에 넘긴다.
    """
    resolver = IndexAliasResolver(cfg.SEARCH_ENVIRONMENT)
    known_fields = KnownFieldsProvider(cfg.known_fields_options())
    return IndexService(
        indexer=OpenSearchIndexer(client, resolver, known_fields, manage_indexes=cfg.manage_indexes),
        index_manager=OpenSearchIndexManager(client, resolver, known_fields, manage_indexes=cfg.manage_indexes),
    )


def build_search_service(client: OpenSearch, cfg: Settings = settings) -> SearchService:
    searcher = OpenSearchSearcher(
        client,
        IndexAliasResolver(cfg.SEARCH_ENVIRONMENT),
        expand_facet_values=cfg.EXPAND_FACET_VALUES,
        max_facet_values=cfg.MAX_FACET_VALUES,
    )
    return SearchService(searcher)


def get_index_service(os: OpenSearch = Depends(get_opensearch)) -> IndexService:
    return build_index_service(os)


def get_search_service(os: OpenSearch = Depends(get_opensearch)) -> SearchService:
    return build_search_service(os)


def resolve_index_alias(index_alias: str | None) -> str:
    """
    요청 alias 가 설정된 인덱스인지 확인한다(대소문자 무시). 없으면 기본 인덱스.
    """
    if not index_alias:
        return settings.DEFAULT_INDEX_ALIAS
    for configured in settings.INDEX_ALIASES:
        if configured.lower() == index_alias.lower():
            return configured
    raise ResourceNotFound("index", f"unknown index alias: {index_alias}")
