from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from tableimport.config.models import ConfigModel, RuntimeConfig

DB_URL_ENV_KEY = "TABLEIMPORT_DB_URL"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("config.yml must be a mapping at the root")
    return payload


def _read_db_url() -> str:
    url = os.getenv(DB_URL_ENV_KEY)
    if not url:
        raise ValueError(f"Missing required env var in .env: {DB_URL_ENV_KEY}")
    return url


def load_runtime_config(config_path: str | Path, env_path: str | Path = ".env") -> RuntimeConfig:
    config_file = Path(config_path).resolve()
    dotenv_file = Path(env_path).resolve()

    if not dotenv_file.exists():
        raise FileNotFoundError(f".env file not found: {dotenv_file}")

    load_dotenv(dotenv_path=dotenv_file, override=False)

    raw_cfg = _read_yaml(config_file)
    model = ConfigModel.model_validate(raw_cfg)

    for job_name, job_cfg in model.imports.items():
        if job_cfg.table is None:
            job_cfg.table = job_name

    return RuntimeConfig(
        config_path=config_file,
        env_path=dotenv_file,
        app=model.app,
        database=model.database,
        imports=model.imports,
        db_url=_read_db_url(),
    )
