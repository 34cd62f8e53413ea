"""Configuration management for propfolio."""

from dataclasses import dataclass, field
from pathlib import Path

from propfolio.exceptions import ConfigurationError

BACKENDS = ("memory", "json", "postgres")
BACKUP_FREQUENCIES = ("Daily", "Weekly", "Monthly", "Never")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "propfolio"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class StorageConfig:
    """Where portfolio records and local preferences live."""

    backend: str = "memory"
    data_dir: Path = field(default_factory=lambda: Path("data"))
    local_storage_file: str = "local_storage.json"

    @property
    def properties_path(self) -> Path:
        """Path of the JSON file used by the ``json`` backend."""
        return self.data_dir / "properties.json"

    @property
    def local_storage_path(self) -> Path:
        """Path of the durable key/value file."""
        return self.data_dir / self.local_storage_file


@dataclass
class ThemeConfig:
    """Fallback theme selection used when nothing valid is persisted."""

    default_palette: str = "corporate"
    default_dark_mode: bool = False


@dataclass
class ReconciliationConfig:
    """Placeholder reconciliation settings."""

    enabled: bool = True
    placeholder_prefix: str = "demo-"


@dataclass
class BackupConfig:
    """Backup reminder and export settings."""

    frequency: str = "Weekly"
    output_dir: Path = field(default_factory=lambda: Path("backups"))


@dataclass
class PropfolioConfig:
    """Main configuration for propfolio."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.storage.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend {self.storage.backend!r}; expected one of {BACKENDS}"
            )
        if self.backup.frequency not in BACKUP_FREQUENCIES:
            raise ConfigurationError(
                f"Unknown backup frequency {self.backup.frequency!r}; "
                f"expected one of {BACKUP_FREQUENCIES}"
            )

    @classmethod
    def from_env(cls) -> "PropfolioConfig":
        """Create config from environment variables."""
        import os

        storage = StorageConfig(
            backend=os.getenv("PROPFOLIO_BACKEND", "memory"),
            data_dir=Path(os.getenv("PROPFOLIO_DATA_DIR", "data")),
        )

        try:
            port = int(os.getenv("POSTGRES_PORT", "5432"))
        except ValueError as e:
            raise ConfigurationError(f"POSTGRES_PORT must be an integer: {e}") from e

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=os.getenv("POSTGRES_DB", "propfolio"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        theme = ThemeConfig(
            default_palette=os.getenv("PROPFOLIO_THEME", "corporate"),
            default_dark_mode=os.getenv("PROPFOLIO_DARK_MODE", "false").lower() == "true",
        )

        reconciliation = ReconciliationConfig(
            enabled=os.getenv("PROPFOLIO_RECONCILE", "true").lower() == "true",
            placeholder_prefix=os.getenv("PROPFOLIO_PLACEHOLDER_PREFIX", "demo-"),
        )

        backup = BackupConfig(
            frequency=os.getenv("PROPFOLIO_BACKUP_FREQUENCY", "Weekly"),
            output_dir=Path(os.getenv("PROPFOLIO_BACKUP_DIR", "backups")),
        )

        return cls(
            storage=storage,
            postgres=postgres,
            theme=theme,
            reconciliation=reconciliation,
            backup=backup,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
