"""
Configuration settings for the attribute pattern benchmark.

Uses Pydantic Settings to load environment variables (or a `.env` file) for
the four logical stores, the document/query templates, the index definitions
and the numeric knobs driving the loader and the equality benchmark.

Templates are MongoDB Extended JSON strings so example values can carry BSON
types (`{"$numberLong": "1"}`, `{"$date": "2020-01-01T00:00:00Z"}`); index
definitions are JSON arrays of key documents.
"""
from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URI = "mongodb://localhost:27017"

DEFAULT_DOCUMENT_TEMPLATE = """{
  "sku": "ABC-123",
  "category": "tools",
  "price": 9.99,
  "stock": 10,
  "active": true,
  "updated": {"$date": "2020-01-01T00:00:00Z"},
  "attributes": {
    "color": "red",
    "size": "large",
    "material": "steel",
    "weight": 1,
    "voltage": 110,
    "brand": "acme",
    "finish": "matte",
    "warranty": 2
  }
}"""

DEFAULT_QUERY_TEMPLATE = """{
  "category": "tools",
  "attributes": {
    "color": "red",
    "size": "large",
    "material": "steel",
    "weight": 1,
    "voltage": 110,
    "brand": "acme",
    "finish": "matte",
    "warranty": 2
  }
}"""

DEFAULT_STRING_CATALOG = (
    "red, green, blue, black, white, large, medium, small, steel, wood, "
    "plastic, acme, globex, initech, matte, glossy, tools, garden, kitchen"
)


def _index_list(*specs: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [dict(spec) for spec in specs]


class Settings(BaseSettings):
    # Connections, one per logical store
    classic_attr_uri: str = Field(DEFAULT_URI, alias="CLASSIC_ATTR_URI")
    enhanced_attr_uri: str = Field(DEFAULT_URI, alias="ENHANCED_ATTR_URI")
    classic_subdoc_uri: str = Field(DEFAULT_URI, alias="CLASSIC_SUBDOC_URI")
    wildcard_subdoc_uri: str = Field(DEFAULT_URI, alias="WILDCARD_SUBDOC_URI")
    max_pool_size: int = Field(50, alias="MAX_POOL_SIZE", ge=1)

    # Databases
    classic_attr_db: str = Field("classicAttr", alias="CLASSIC_ATTR_DB")
    enhanced_attr_db: str = Field("enhancedAttr", alias="ENHANCED_ATTR_DB")
    classic_subdoc_db: str = Field("classicSubdoc", alias="CLASSIC_SUBDOC_DB")
    wildcard_subdoc_db: str = Field("wildcardSubdoc", alias="WILDCARD_SUBDOC_DB")

    # Base collections
    classic_attr_coll: str = Field("docs", alias="CLASSIC_ATTR_COLL")
    enhanced_attr_coll: str = Field("docs", alias="ENHANCED_ATTR_COLL")
    classic_subdoc_coll: str = Field("docs", alias="CLASSIC_SUBDOC_COLL")
    wildcard_subdoc_coll: str = Field("docs", alias="WILDCARD_SUBDOC_COLL")

    # Results collections
    classic_attr_results_coll: str = Field("results", alias="CLASSIC_ATTR_RESULTS_COLL")
    enhanced_attr_results_coll: str = Field("results", alias="ENHANCED_ATTR_RESULTS_COLL")
    classic_subdoc_results_coll: str = Field("results", alias="CLASSIC_SUBDOC_RESULTS_COLL")
    wildcard_subdoc_results_coll: str = Field("results", alias="WILDCARD_SUBDOC_RESULTS_COLL")

    # Index definitions (JSON arrays of key documents)
    classic_attr_idx: List[Dict[str, Any]] = Field(
        default_factory=lambda: _index_list({"attributes.k": 1, "attributes.v": 1}),
        alias="CLASSIC_ATTR_IDX",
    )
    enhanced_attr_idx: List[Dict[str, Any]] = Field(
        default_factory=lambda: _index_list({"attributes": 1}),
        alias="ENHANCED_ATTR_IDX",
    )
    classic_subdoc_idx: List[Dict[str, Any]] = Field(
        default_factory=list,
        alias="CLASSIC_SUBDOC_IDX",
    )
    wildcard_subdoc_idx: List[Dict[str, Any]] = Field(
        default_factory=lambda: _index_list({"attributes.$**": 1}),
        alias="WILDCARD_SUBDOC_IDX",
    )

    # Templates (Extended JSON)
    document_template: str = Field(DEFAULT_DOCUMENT_TEMPLATE, alias="DOCUMENT_TEMPLATE")
    query_template: str = Field(DEFAULT_QUERY_TEMPLATE, alias="EQUALITY_QUERY_TEMPLATE")

    # Loader
    batch_size: int = Field(1_000, alias="INSERT_BATCH_SIZE", ge=0)
    batch_count: int = Field(10, alias="INSERT_BATCH_COUNT", ge=0)
    load_parallel_count: int = Field(4, alias="LOAD_PARALLEL_COUNT", ge=1)

    # Equality benchmark
    test_count: int = Field(100, alias="EQUALITY_TEST_COUNT", ge=0)
    parallel_count: int = Field(8, alias="EQUALITY_PARALLEL_COUNT", ge=1)
    attributes_to_query: int = Field(2, alias="ATTRIBUTES_TO_QUERY", ge=1)

    # Value generation
    max_int: int = Field(1_000, alias="MAX_INT", gt=0)
    min_date: datetime = Field(datetime(2015, 1, 1, tzinfo=timezone.utc), alias="MINIMUM_DATE")
    max_date: datetime = Field(datetime(2020, 1, 1, tzinfo=timezone.utc), alias="MAXIMUM_DATE")
    string_catalog: str = Field(DEFAULT_STRING_CATALOG, alias="STRING_CATALOG")
    random_seed: Optional[int] = Field(None, alias="RANDOM_SEED")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    results_dir: str = Field("results", alias="RESULTS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("min_date", "max_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if self.max_date < self.min_date:
            raise ValueError("MAXIMUM_DATE must not be earlier than MINIMUM_DATE")
        if not self.string_catalog_values:
            raise ValueError("STRING_CATALOG must list at least one value")
        return self

    @property
    def string_catalog_values(self) -> List[str]:
        """Comma-separated catalog, trimmed, blanks dropped."""
        return [item.strip() for item in self.string_catalog.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
