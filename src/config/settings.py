"""
Centralized configuration using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use get_settings() to access the singleton settings instance.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions import ConfigurationError
from src.schemas.detection import ModelTarget


DEFAULT_ENDPOINT_TEMPLATE = 'https://serverless.roboflow.com/{id}'


class ModelTargetConfig(BaseModel):
    """One entry of MODEL_TARGETS. Missing fields fall back to the global defaults."""

    id: str
    credential: str | None = None
    endpoint_template: str | None = None


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables.
    Example:
        ROBOFLOW_API_KEY=xxx MODEL_TARGETS='[{"id": "waste-detection/1"}]' uvicorn src.main:app
    """

    model_config = SettingsConfigDict(
        env_prefix='', case_sensitive=False, extra='ignore', populate_by_name=True
    )

    # ==========================================================================
    # Upstream Models
    # ==========================================================================
    targets_config: list[ModelTargetConfig] = Field(
        default_factory=list,
        alias='MODEL_TARGETS',
        description='JSON list of {id, credential?, endpoint_template?} upstream models',
    )

    roboflow_api_key: str = Field(
        default='', description='Default credential for targets that do not set one'
    )

    endpoint_template: str = Field(
        default=DEFAULT_ENDPOINT_TEMPLATE,
        description='Default upstream URL pattern, {id} is replaced by the target id',
    )

    upstream_timeout: float | None = Field(
        default=None, description='Upstream request timeout in seconds (unset: httpx default)'
    )

    # ==========================================================================
    # Request Limits
    # ==========================================================================
    max_file_size_mb: int = Field(default=10, description='Maximum image size in MB')

    slow_request_threshold_ms: int = Field(
        default=2000, description='Log requests slower than this threshold'
    )

    jpeg_quality: int = Field(
        default=80, ge=1, le=100, description='JPEG quality used when re-encoding uploads'
    )

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_title: str = Field(
        default='Multi-Model Detection API', description='API title for OpenAPI docs'
    )

    api_description: str = Field(
        default='Fans a captured image out to hosted detection models and merges the results',
        description='API description for OpenAPI docs',
    )

    api_version: str = Field(default='1.0.0', description='API version')

    cors_origins: list[str] = Field(default=['*'], description='Allowed CORS origins')

    log_level: str = Field(default='INFO', description='Root logging level')

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def max_file_size_bytes(self) -> int:
        """Maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    def resolve_targets(self) -> list[ModelTarget]:
        """
        Resolve MODEL_TARGETS into immutable ModelTarget entries.

        Returns:
            Targets in configured order

        Raises:
            ConfigurationError: On empty ids, missing credentials or duplicate ids
        """
        targets: list[ModelTarget] = []
        seen: set[str] = set()

        for entry in self.targets_config:
            if not entry.id:
                raise ConfigurationError('Model target with empty id')
            if entry.id in seen:
                raise ConfigurationError(f"Duplicate model target id '{entry.id}'")

            credential = entry.credential or self.roboflow_api_key
            if not credential:
                raise ConfigurationError(
                    f"No credential for model target '{entry.id}'. "
                    'Set it in MODEL_TARGETS or via ROBOFLOW_API_KEY.'
                )

            template = entry.endpoint_template or self.endpoint_template
            if '{id}' not in template:
                raise ConfigurationError(
                    f"Endpoint template for '{entry.id}' has no {{id}} placeholder: {template}"
                )

            seen.add(entry.id)
            targets.append(
                ModelTarget(id=entry.id, credential=credential, endpoint_template=template)
            )

        return targets


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance (singleton pattern).

    Returns:
        Settings: Application settings
    """
    return Settings()
