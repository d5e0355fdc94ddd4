"""Configuration for Schema Intel.

Every analysis entry point takes an optional config and falls back to
`DEFAULT_CONFIG`, the built-in defaults. `SchemaIntelConfig()` reads
SCHEMA_INTEL_* environment variables or a .env file and is only built by the
CLI. The caps below are what guarantee termination on adversarial
input, so they are validated as positive.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SNAPSHOT_DIR = Path.home() / ".schema-intel" / "snapshots"


class SchemaIntelConfig(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_INTEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Schema parser
    max_import_depth: int = Field(
        default=4,
        ge=0,
        description="How many import/re-export hops to follow from the schema entry file",
    )
    max_source_files: int = Field(
        default=200,
        gt=0,
        description="Maximum number of schema source files parsed per invocation",
    )

    # Document inference
    max_sample_documents: int = Field(
        default=500,
        gt=0,
        description="Sampled documents beyond this count are ignored",
    )
    max_flatten_depth: int = Field(
        default=32,
        gt=0,
        description="Nesting depth at which document flattening stops descending",
    )

    # Index coverage
    chain_window_lines: int = Field(
        default=10,
        gt=0,
        description="Lines a query chain may span, counted from its entry point",
    )
    max_chain_calls: int = Field(
        default=32,
        gt=0,
        description="Maximum chained calls examined per query",
    )

    # Workspace discovery
    max_query_files: int = Field(default=200, gt=0)
    max_schema_candidates: int = Field(default=10, gt=0)

    # Snapshots and CLI
    snapshot_dir: Path = Field(
        default=DEFAULT_SNAPSHOT_DIR,
        description="Directory holding one JSON file per saved snapshot",
    )
    log_level: str = Field(default="INFO", description="Log level for the CLI")


# Built-in defaults for library calls that pass no config. Constructed
# without reading the environment or a .env file; the CLI loads settings.
DEFAULT_CONFIG = SchemaIntelConfig.model_construct()
