"""Project path configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathsConfig(BaseSettings):
    """
    Project path configuration.
    All paths are computed from project_root.
    """
    model_config = SettingsConfigDict(
        env_prefix='PATHS_',
        case_sensitive=False
    )

    # Project root directory (computed)
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def raw_data_dir(self) -> Path:
        """Narrative exports (CSV, one row per event)"""
        return self.data_dir / "raw"

    @property
    def processed_data_dir(self) -> Path:
        """Feature matrices and topic model outputs"""
        return self.data_dir / "processed"

    def ensure_directories(self) -> None:
        """Create data directories if they don't exist."""
        for directory in (self.raw_data_dir, self.processed_data_dir):
            directory.mkdir(parents=True, exist_ok=True)
