"""Configuration models using Pydantic for validation."""

from pathlib import Path
from typing import List, Optional

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Transport-level request headers that say nothing about an operation.
# Content-Type is recorded in ``consumes`` instead of as a parameter.
DEFAULT_IGNORED_HEADERS: List[str] = [
    "host",
    "connection",
    "content-length",
    "content-type",
    "transfer-encoding",
    "accept-encoding",
    "keep-alive",
    "upgrade",
    "te",
    "trailer",
]


class LoggingConfig(BaseModel):
    """Configuration for logging.

    The host application normally owns logging setup, so nothing is
    configured unless ``configure`` is enabled.
    """

    configure: bool = Field(
        default=False,
        description="Configure structlog and stdlib logging on instrumentation",
    )
    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    format: str = Field(
        default="text",
        description="Log format: json or text",
    )
    file: Optional[Path] = Field(
        default=None,
        description="Log file path (rotated daily, 7 days kept); console only when unset",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid format: {v}. Must be one of {valid_formats}")
        return v_lower


class GeneratorConfig(BaseSettings):
    """
    Spec generator settings.

    Settings can be configured via environment variables with the prefix
    OASGEN_, nested fields separated by a double underscore.
    For example: OASGEN_API_SPEC_PATH=spec, OASGEN_LOGGING__LEVEL=DEBUG

    Attributes:
        api_docs_path: Path segment of the Swagger UI endpoint
        api_spec_path: Path segment of the JSON spec endpoint
        base_url_path: Prefix applied to both endpoints (e.g. "/service")
        write_interval: Seconds between persisted spec snapshots
        spec_output_path: JSON file the spec is persisted to and hydrated from
        predefined_spec_path: JSON/YAML file merged over the inferred spec
        package_info_path: pyproject.toml or package.json providing ``info``
        ignored_headers: Request headers never recorded as parameters
        logging: Logging configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="OASGEN_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    api_docs_path: str = "api-docs"
    api_spec_path: str = "api-spec"
    base_url_path: str = ""
    write_interval: float = Field(default=10.0, gt=0)
    spec_output_path: Optional[Path] = None
    predefined_spec_path: Optional[Path] = None
    package_info_path: Path = Path("pyproject.toml")
    ignored_headers: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_HEADERS))
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("api_docs_path", "api_spec_path")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Endpoint names are stored without surrounding slashes."""
        v = v.strip("/")
        if not v:
            raise ValueError("Endpoint path must not be empty")
        return v

    @field_validator("base_url_path")
    @classmethod
    def validate_base_url_path(cls, v: str) -> str:
        """Base URL is either empty or has a leading and no trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @property
    def spec_url(self) -> str:
        return f"{self.base_url_path}/{self.api_spec_path}"

    @property
    def docs_url(self) -> str:
        return f"{self.base_url_path}/{self.api_docs_path}"

    @classmethod
    def from_yaml(cls, path: Path) -> "GeneratorConfig":
        """
        Load settings from a YAML file.

        Environment variables are still read for fields the file leaves out.

        Args:
            path: Path to YAML configuration file

        Returns:
            GeneratorConfig with validated settings

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is invalid
            pydantic.ValidationError: If configuration is invalid

        Example:
            >>> config = GeneratorConfig.from_yaml(Path("oasgen.yaml"))
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        logger.debug("config_loaded", path=str(path))
        return cls(**(data or {}))
