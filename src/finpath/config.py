"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, rejecting unparseable values."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}.") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "FinPath"
    SUPPORTED_CURRENCIES = ("GBP", "EUR", "USD", "CUSTOM")

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("FINPATH_DEV_MODE", default=True)
        self.CURRENCY = os.getenv("FINPATH_CURRENCY", "GBP").strip().upper()
        self.CUSTOM_FX_RATE = _env_float("FINPATH_FX_RATE", 1.0)
        self.DEFAULT_EXTRA_PAYMENT = _env_float("FINPATH_DEFAULT_EXTRA_PAYMENT", 0.0)
        if self.CURRENCY not in self.SUPPORTED_CURRENCIES:
            raise ValueError(
                f"FINPATH_CURRENCY must be one of {', '.join(self.SUPPORTED_CURRENCIES)}."
            )
        if self.CUSTOM_FX_RATE <= 0:
            raise ValueError("FINPATH_FX_RATE must be positive.")
        if self.DEFAULT_EXTRA_PAYMENT < 0:
            raise ValueError("FINPATH_DEFAULT_EXTRA_PAYMENT cannot be negative.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where logs and chart exports live."""

        data_root = os.getenv("FINPATH_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Read-only install locations fall back to the user's home directory.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()


class DevConfig(BaseConfig):
    """Development configuration."""

    DEBUG = True
    TESTING = False
