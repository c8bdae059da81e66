"""Configuration management using Pydantic Settings."""

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)
from sqlalchemy.engine import URL


class DatabaseSettings(BaseModel):
    """Relational database connection configuration."""

    url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL. Overrides host/port/user/password/name when set",
    )
    driver: str = Field(
        default="postgresql+psycopg2",
        description="SQLAlchemy dialect+driver used to build the URL",
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    user: str = Field(default="postgres", description="Database user")
    password: SecretStr = Field(
        default=SecretStr("postgres"),
        description="Database password",
    )
    name: str = Field(default="todolist", description="Database name")
    echo: bool = Field(default=False, description="Log every SQL statement")
    pool_size: int = Field(default=5, description="Connection pool size")
    pool_pre_ping: bool = Field(
        default=True,
        description="Check connections for liveness before handing them out",
    )
    create_tables: bool = Field(
        default=True,
        description="Create missing tables on application startup",
    )

    def get_url(self) -> str:
        """Get the SQLAlchemy URL, built from the individual fields unless url is set."""
        if self.url:
            return self.url
        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.name,
        ).render_as_string(hide_password=False)


class AuthSettings(BaseModel):
    """Token signing and password hashing configuration."""

    jwt_secret_key: SecretStr = Field(
        ...,
        description="Symmetric secret for JWT signing (required, no fallback)",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_issuer: str = Field(default="todo-list-api", description="JWT iss claim")
    access_token_expire_minutes: int = Field(
        default=15, description="Access token lifetime in minutes"
    )
    refresh_token_expire_days: int = Field(
        default=7, description="Refresh token lifetime in days"
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor (log2 rounds)",
    )


class RateLimitSettings(BaseModel):
    """Per-client token bucket admission control."""

    enabled: bool = Field(default=True, description="Enable rate limiting")
    backend: str = Field(
        default="memory",
        description="Bucket state backend: memory (single process) or redis (shared)",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL for the redis backend",
    )
    capacity: int = Field(
        default=100,
        description="Token bucket capacity (burst size per client)",
    )
    refill_rate: float = Field(
        default=10.0,
        description="Token bucket refill rate (requests per second per client)",
    )
    memory_max_size: int = Field(
        default=10_000,
        description="Max number of client buckets kept by the memory backend",
    )


class CorsSettings(BaseModel):
    """CORS configuration."""

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_methods: list[str] = Field(default_factory=lambda: ["*"])
    allow_headers: list[str] = Field(default_factory=lambda: ["*"])
    allow_credentials: bool = False


class SecurityHeadersSettings(BaseModel):
    """Security response headers configuration."""

    enabled: bool = Field(default=True, description="Add security headers")
    hsts: bool = Field(
        default=False,
        description="Add Strict-Transport-Security (only behind TLS)",
    )
    hsts_max_age: int = Field(default=60 * 60 * 24 * 365)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TODO_API_",
        env_nested_delimiter="__",
        json_file=".env.json",
        json_file_encoding="utf-8",
        yaml_file=".env.yaml",
        yaml_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            JsonConfigSettingsSource(settings_cls),
            YamlConfigSettingsSource(settings_cls),
        )

    # Application
    app_name: str = "todo-api"
    version: str = "0.1.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    expose_error_details: bool = Field(
        default=False,
        description="Include underlying error causes in error responses (development only)",
    )

    # Server
    server_host: str = Field(default="0.0.0.0", description="Bind address")  # noqa: S104
    server_port: int = Field(default=8080, description="Bind port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format_json: bool = Field(
        default=True,
        description="Use JSON logging format (False for human-readable logs in development)",
    )
    log_exclude_loggers: str = Field(
        default="sqlalchemy.engine,uvicorn.access",
        description="Comma-separated list of logger names to cap at WARNING",
    )

    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings,
        description="Database connection configuration",
    )
    auth: AuthSettings = Field(
        ...,
        description="JWT and password hashing configuration",
    )
    rate_limit: RateLimitSettings = Field(
        default_factory=RateLimitSettings,
        description="Rate limiting configuration",
    )
    cors: CorsSettings = Field(
        default_factory=CorsSettings,
        description="CORS configuration",
    )
    security_headers: SecurityHeadersSettings = Field(
        default_factory=SecurityHeadersSettings,
        description="Security headers configuration",
    )


settings = Settings()
