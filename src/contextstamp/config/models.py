"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CONTEXTSTAMP__SECTION__KEY)
3. Repo YAML (.contextstamp/config.yaml)
4. Global YAML (~/.config/contextstamp/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CONTEXTSTAMP__<SECTION>__<KEY>=<VALUE>

Examples:
    CONTEXTSTAMP__LOGGING__LEVEL=DEBUG
    CONTEXTSTAMP__SNAPSHOTS__TTL_SEC=600
    CONTEXTSTAMP__TOKENS__CHARS_PER_TOKEN=3.5
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from contextstamp.config.constants import (
    BUNDLE_FILENAME,
    DEFAULT_DEPTH,
    DEFAULT_SNAPSHOT_TTL_SEC,
    INDEX_FILENAME,
    PORT_MAX,
    PORT_MIN,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
Profile = Literal["llm-chat", "llm-safe", "ci-strict"]
CodeMode = Literal["header", "full", "none"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CONTEXTSTAMP__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every folder reconciliation.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """MCP server configuration.

    Env vars:
        CONTEXTSTAMP__SERVER__TRANSPORT: stdio (default) or http
        CONTEXTSTAMP__SERVER__HOST: Bind address for http transport
        CONTEXTSTAMP__SERVER__PORT: Port for http transport
    """

    transport: Literal["stdio", "http"] = Field(
        default="stdio",
        description="MCP transport. stdio is what desktop agents launch.",
    )
    host: str = Field(
        default="127.0.0.1",
        description="Bind address for http transport.",
    )
    port: int = Field(
        default=7655,
        description="Port for http transport.",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (PORT_MIN <= v <= PORT_MAX):
            raise ValueError(f"Port must be {PORT_MIN}-{PORT_MAX}, got {v}")
        return v


class SnapshotsConfig(BaseModel):
    """Snapshot registry and context file layout.

    Env vars:
        CONTEXTSTAMP__SNAPSHOTS__TTL_SEC: Seconds before a snapshot expires
        CONTEXTSTAMP__SNAPSHOTS__INDEX_FILENAME: Index file name in a context dir
        CONTEXTSTAMP__SNAPSHOTS__BUNDLE_FILENAME: Bundle file name in each folder
        CONTEXTSTAMP__SNAPSHOTS__PIN: Copy context files on refresh (true/false)
    """

    ttl_sec: float = Field(
        default=DEFAULT_SNAPSHOT_TTL_SEC,
        gt=0,
        description="Snapshots older than this are dropped on the next lookup.",
    )
    index_filename: str = Field(
        default=INDEX_FILENAME,
        description="Index file written by the generator at the context root.",
    )
    bundle_filename: str = Field(
        default=BUNDLE_FILENAME,
        description="Bundle array file written by the generator in each folder.",
    )
    pin: bool = Field(
        default=True,
        description="Copy context files into the snapshot store on refresh so the "
        "snapshot keeps its content when the generator rewrites the project files.",
    )
    store_dir: str | None = Field(
        default=None,
        description="Where pinned snapshots are kept. Defaults to .contextstamp/snapshots "
        "under the project root.",
    )


class TokensConfig(BaseModel):
    """Token estimate heuristics.

    Both values are approximations with no accuracy guarantee; they only
    feed relative deltas.

    Env vars:
        CONTEXTSTAMP__TOKENS__CHARS_PER_TOKEN: Serialized chars per token
    """

    chars_per_token: float = Field(
        default=4.0,
        gt=0,
        description="Serialized JSON characters per estimated token.",
    )
    fallback_weights: dict[str, float] = Field(
        default_factory=lambda: {"gpt4oMini": 0.6, "claude": 0.5},
        description="Per-model weights applied to bundle token deltas when an "
        "Index lacks aggregate token estimates.",
    )


class DefaultsConfig(BaseModel):
    """Default analysis parameters recorded on refreshed snapshots."""

    profile: Profile = "llm-chat"
    mode: CodeMode = "header"
    depth: int = Field(default=DEFAULT_DEPTH, ge=1)


class ContextStampConfig(BaseModel):
    """Root configuration for contextstamp.

    All settings can be configured via:
    1. Environment variables: CONTEXTSTAMP__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    snapshots: SnapshotsConfig = Field(default_factory=SnapshotsConfig)
    tokens: TokensConfig = Field(default_factory=TokensConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
