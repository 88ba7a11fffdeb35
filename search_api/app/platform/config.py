from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from search_api.app.domain.known_fields import KnownFieldsOptions
from search_api.app.platform.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "content-search-api"
    DEBUG: bool = False

    # 로깅
    LOG_LEVEL: str = "INFO"
    LOG_AS_JSON: bool = True
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "/var/log/app"

    # OpenSearch 접속
    OPENSEARCH_HOST: str = "http://opensearch:9200"
    OPENSEARCH_USER: str | None = None
    OPENSEARCH_PASSWORD: str | None = None
    OPENSEARCH_VERIFY_CERTS: bool = False

    # 물리 인덱스 이름 = {alias}_{SEARCH_ENVIRONMENT} (소문자)
    SEARCH_ENVIRONMENT: str | None = None

    # subscriber 서버는 스키마/문서를 변경하지 않는다
    SERVER_ROLE: Literal["single", "primary", "subscriber", "unknown"] = "single"

    INDEX_ALIASES: list[str] = Field(default_factory=lambda: ["umb_publishedcontent"])
    DEFAULT_INDEX_ALIAS: str = "umb_publishedcontent"
    ENSURE_INDEXES_ON_STARTUP: bool = True

    # allow-list
    KNOWN_FIELDS_GLOBAL: list[str] = Field(default_factory=list)
    # 기본값은 기사/도서 목록 API 가 filter/facet/sort 하는 필드
    KNOWN_FIELDS_BY_INDEX: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "umb_publishedcontent": [
                "contentTypeAlias", "authorName", "categoryName", "articleYear", "publishYear",
            ]
        }
    )
    KNOWN_FIELDS_INCLUDE_NAME: bool = True

    # 검색
    EXPAND_FACET_VALUES: bool = True
    MAX_FACET_VALUES: int = Field(100, gt=0)

    API_KEY: str | None = None

    @field_validator("OPENSEARCH_HOST")
    @classmethod
    def _validate_host(cls, v: str) -> str:
        u = urlparse(v)
        if not u.scheme or not u.hostname:
            raise ValueError(f"OPENSEARCH_HOST must be an absolute URL: {v!r}")
        return v

    @model_validator(mode="after")
    def _validate_credentials(self) -> "Settings":
        if bool(self.OPENSEARCH_USER) != bool(self.OPENSEARCH_PASSWORD):
            raise ValueError("OPENSEARCH_USER and OPENSEARCH_PASSWORD must be set together")
        return self

    @property
    def manage_indexes(self) -> bool:
        return self.SERVER_ROLE != "subscriber"

    def known_fields_options(self) -> KnownFieldsOptions:
        return KnownFieldsOptions(
            global_fields=self.KNOWN_FIELDS_GLOBAL,
            by_index_alias=self.KNOWN_FIELDS_BY_INDEX,
            include_name_field=self.KNOWN_FIELDS_INCLUDE_NAME,
        )


def load_settings(**overrides) -> Settings:
    """설정 검증 실패는 시작 시점의 치명적 오류로 취급한다."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e


settings = load_settings()
