from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ImportConfig(BaseModel):
    skip_transaction: bool = False
    ignore_errors: bool = False
    input_file: str | None = None
    encoding: str = "utf-8"


class ImportJobConfig(ImportConfig):
    file: str
    sheet: str | None = None
    table: str | None = None
    types: dict[str, str] = Field(default_factory=dict)

    @field_validator("table")
    @classmethod
    def validate_table(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("table must not be blank")
        return value


class AppConfig(BaseModel):
    data_dir: str = "./DATA"
    stop_on_error: bool = False
    log_level: str = "INFO"
    logs_dir: str = "./logs"


class DatabaseConfig(BaseModel):
    connect_timeout_seconds: int = 15

    @field_validator("connect_timeout_seconds")
    @classmethod
    def validate_connect_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        return value


class ConfigModel(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    imports: dict[str, ImportJobConfig]


class RuntimeConfig(BaseModel):
    config_path: Path
    env_path: Path
    app: AppConfig
    database: DatabaseConfig
    imports: dict[str, ImportJobConfig]
    db_url: str

    @property
    def data_dir_path(self) -> Path:
        path = Path(self.app.data_dir)
        return path if path.is_absolute() else self.config_path.parent / path

    @property
    def logs_dir_path(self) -> Path:
        path = Path(self.app.logs_dir)
        return path if path.is_absolute() else self.config_path.parent / path

    def job(self, name: str) -> ImportJobConfig:
        try:
            return self.imports[name]
        except KeyError:
            known = ", ".join(sorted(self.imports)) or "<none>"
            raise ValueError(f"Unknown import job '{name}' (configured: {known})") from None
