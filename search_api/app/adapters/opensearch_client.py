"""
OpenSearch 클라이언트 생성.

앱 시작 시(lifespan) 한 번만 만들어 app.state 에 두고 공유한다.
"""

from __future__ import annotations

from urllib.parse import urlparse

from opensearchpy import OpenSearch

from search_api.app.platform.config import Settings


def create_client(settings: Settings) -> OpenSearch:
    u = urlparse(settings.OPENSEARCH_HOST)
    scheme = u.scheme or "http"
    default_port = 443 if scheme == "https" else 9200
    http_auth = None
    if settings.OPENSEARCH_USER:
        http_auth = (settings.OPENSEARCH_USER, settings.OPENSEARCH_PASSWORD)
    return OpenSearch(
        hosts=[{"host": u.hostname, "port": u.port or default_port, "scheme": scheme}],
        http_auth=http_auth,
        use_ssl=scheme == "https",
        verify_certs=settings.OPENSEARCH_VERIFY_CERTS,
        ssl_show_warn=settings.OPENSEARCH_VERIFY_CERTS,
    )
