"""
Configuration management for the portfolio admin application.

This module uses pydantic-settings to manage all configuration aspects including:
- Key-value storage (memory or Redis)
- Vector store and embedding providers
- Admin authentication and sessions
- YouTube Data API access
- Logging, metrics and the web server

Configuration is loaded from environment variables, .env files, or mounted secrets.
"""
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "insecure-development-secret"


class LogLevel(str, Enum):
    """Log levels supported by the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class KVBackend(str, Enum):
    """Key-value storage backends."""
    MEMORY = "memory"
    REDIS = "redis"


class KVConfig(BaseModel):
    """Configuration for the key-value store holding content, videos and chat logs."""
    backend: KVBackend = KVBackend.MEMORY
    redis_url: Optional[str] = None
    redis_password: Optional[SecretStr] = None
    key_prefix: str = ""
    cleanup_interval_seconds: int = 60

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Only redis:// and rediss:// URLs are accepted."""
        if v is None:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("redis", "rediss", "unix"):
            raise ValueError(f"Invalid Redis URL: {v}")
        return v

    @model_validator(mode="after")
    def validate_backend(self) -> "KVConfig":
        """The Redis backend needs a URL."""
        if self.backend == KVBackend.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when using the Redis backend")
        return self


class VectorDBType(str, Enum):
    """Types of vector stores supported."""
    MEMORY = "memory"
    KV = "kv"


class VectorDBConfig(BaseModel):
    """Configuration for the vector store."""
    db_type: VectorDBType = VectorDBType.MEMORY
    collection_name: str = "portfolio"
    dimension: int = 1536  # text-embedding-3-small
    distance_metric: str = "cosine"  # cosine, euclidean, dot
    batch_size: int = 1000
    max_results: int = 10000

    @field_validator("distance_metric")
    @classmethod
    def validate_distance_metric(cls, v: str) -> str:
        if v not in ("cosine", "euclidean", "dot"):
            raise ValueError(f"Unsupported distance metric: {v}")
        return v


class EmbeddingProvider(str, Enum):
    """Embedding providers supported."""
    OPENAI = "openai"
    DUMMY = "dummy"


class EmbeddingConfig(BaseModel):
    """Configuration for embedding generation."""
    provider: EmbeddingProvider = EmbeddingProvider.DUMMY
    model_name: str = "text-embedding-3-small"
    openai_api_key: Optional[SecretStr] = None
    dimensions: int = 1536
    batch_size: int = 16
    chunk_words: int = 512
    chunk_overlap: int = 50

    @model_validator(mode="after")
    def validate_provider(self) -> "EmbeddingConfig":
        """Validate that required credentials are provided for the chosen provider."""
        if self.provider == EmbeddingProvider.OPENAI and not self.openai_api_key:
            raise ValueError("OpenAI API key is required when using OpenAI embeddings")
        if self.chunk_overlap >= self.chunk_words:
            raise ValueError("chunk_overlap must be smaller than chunk_words")
        return self


class AuthConfig(BaseModel):
    """Configuration for admin authentication and the session cookie."""
    admin_email: str = "admin@example.com"
    admin_name: str = "Admin"
    # bcrypt hash, generate with `python -m portfolio.main hash-password`
    admin_password_hash: Optional[SecretStr] = None
    secret_key: SecretStr = SecretStr(DEFAULT_SECRET_KEY)
    session_cookie: str = "portfolio.session"
    session_max_age_seconds: int = 30 * 24 * 60 * 60
    https_only: bool = False


class YouTubeConfig(BaseModel):
    """Configuration for the YouTube Data API."""
    api_key: Optional[SecretStr] = None
    api_base_url: str = "https://www.googleapis.com/youtube/v3"
    timeout_seconds: float = 15.0
    retry_attempts: int = 3


class ContentConfig(BaseModel):
    """Content and analytics tuning."""
    blog_revalidate_seconds: int = 60
    words_per_minute: int = 200
    chat_log_ttl_days: int = 90
    top_questions_limit: int = 10


class MetricsConfig(BaseModel):
    """Configuration for logging and metrics."""
    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = True
    prometheus_enabled: bool = False
    prometheus_port: int = 8000


class WebConfig(BaseModel):
    """Configuration for the web server."""
    host: str = "0.0.0.0"
    port: int = 3000


class Settings(BaseSettings):
    """Main settings class for the portfolio admin application."""
    # Application metadata
    app_name: str = "portfolio-admin"
    version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False)

    # Component configurations
    kv: KVConfig = Field(default_factory=KVConfig)
    vector_db: VectorDBConfig = Field(default_factory=VectorDBConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Refuse to run production with the development session secret."""
        if (
            self.environment == Environment.PRODUCTION
            and self.auth.secret_key.get_secret_value() == DEFAULT_SECRET_KEY
        ):
            raise ValueError("AUTH__SECRET_KEY must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


class DeploymentEnv(BaseSettings):
    """Hosting platform variables, read without a prefix."""
    vercel_url: Optional[str] = None
    vercel_env: Optional[str] = None

    model_config = SettingsConfigDict(extra="ignore")


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    return Settings()
