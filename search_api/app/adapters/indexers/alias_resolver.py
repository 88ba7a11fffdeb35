"""
논리 인덱스 alias → 물리 인덱스 이름.
"""

from __future__ import annotations


class IndexAliasResolver:

    def __init__(self, environment: str | None = None) -> None:
        self.environment = environment or None

    def resolve(self, index_alias: str) -> str:
        """
        환경이 설정돼 있으면 {alias}_{environment}, 아니면 alias 그대로.
        OpenSearch 인덱스 이름 규칙에 맞춰 소문자로 바꾼다.
        """
        name = index_alias if self.environment is None else f"{index_alias}_{self.environment}"
        return name.lower()
