"""Configuration management for txn-mirror."""

from dataclasses import dataclass, field
from pathlib import Path

from txn_mirror.exceptions import ConfigurationError

PLAID_ENVIRONMENTS: dict[str, str] = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


@dataclass
class ProviderConfig:
    """Upstream provider credentials and transport settings."""

    client_id: str = ""
    secret: str = ""
    environment: str = "sandbox"
    base_url: str | None = None
    access_token: str | None = None
    timeout_seconds: float = 30.0
    page_size: int | None = None

    @property
    def url(self) -> str:
        """Get the API base URL for the configured environment."""
        if self.base_url:
            return self.base_url.rstrip("/")
        try:
            return PLAID_ENVIRONMENTS[self.environment.lower()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown environment {self.environment!r}; "
                f"expected one of {sorted(PLAID_ENVIRONMENTS)}"
            ) from None

    def validate(self) -> None:
        """Raise ConfigurationError if credentials are missing."""
        missing = [name for name in ("client_id", "secret") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing provider credentials: {', '.join(missing)}")
        if self.page_size is not None and not 1 <= self.page_size <= 500:
            raise ConfigurationError(f"page_size must be between 1 and 500, got {self.page_size}")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "txn_mirror"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class StoreConfig:
    """Record store configuration.

    ``backend`` is one of ``memory``, ``json`` or ``postgres``.
    """

    backend: str = "json"
    path: Path = field(default_factory=lambda: Path("transactions.json"))
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    item_key: str = "default"


@dataclass
class MirrorConfig:
    """Main configuration for txn-mirror."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = "INFO"
    log_format: str = "standard"
    max_pages: int = 1000

    @classmethod
    def from_env(cls) -> "MirrorConfig":
        """Create config from environment variables."""
        import os

        page_size = os.getenv("SYNC_PAGE_SIZE")
        provider = ProviderConfig(
            client_id=os.getenv("PLAID_CLIENT_ID", ""),
            secret=os.getenv("PLAID_SECRET", ""),
            environment=os.getenv("PLAID_ENV", "sandbox"),
            base_url=os.getenv("PLAID_BASE_URL") or None,
            access_token=os.getenv("PLAID_ACCESS_TOKEN") or None,
            timeout_seconds=float(os.getenv("PLAID_TIMEOUT", "30")),
            page_size=int(page_size) if page_size else None,
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "txn_mirror"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        store = StoreConfig(
            backend=os.getenv("STORE_BACKEND", "json"),
            path=Path(os.getenv("STORE_PATH", "transactions.json")),
            postgres=postgres,
            item_key=os.getenv("ITEM_KEY", "default"),
        )

        return cls(
            provider=provider,
            store=store,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            max_pages=int(os.getenv("SYNC_MAX_PAGES", "1000")),
        )
