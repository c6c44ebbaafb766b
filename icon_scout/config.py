# === FILE: icon_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации IconScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

CHROME_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)

DEFAULT_MIRROR_URL = "https://cdn.jsdelivr.net/gh/walkxcode/dashboard-icons/png/{name}.png"
DEFAULT_AGGREGATOR_URL = "https://www.google.com/s2/favicons?domain={host}&sz={size}"


class ResolverConfig(BaseModel):
    """Настройки одного запуска поиска иконки."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(30.0, gt=0, description="Общий таймаут одного запроса (секунд).")
    connect_timeout: float = Field(10.0, gt=0, description="Таймаут установки соединения.")
    connect_retries: int = Field(2, ge=0, description="Повторы при connection refused.")
    retry_delay: float = Field(1.0, ge=0, description="Пауза перед повтором соединения (секунд).")
    max_html_lines: int = Field(1000, ge=1, description="Сколько строк HTML просматривать.")
    min_icon_size: int = Field(128, ge=1, description="Минимальная сторона растровой иконки.")
    icon_size: int = Field(128, ge=1, description="Размер итогового PNG при конвертации.")
    aggregator_size: int = Field(256, ge=1, description="Запрашиваемый размер у агрегатора.")
    referer: str = Field("https://google.com", min_length=1, description="Заголовок Referer.")
    user_agent: str = Field(CHROME_USER_AGENT, min_length=1, description="Браузерный User-Agent.")
    mirror_url: Optional[str] = Field(
        DEFAULT_MIRROR_URL, description="Шаблон зеркала иконок с {name}; null отключает."
    )
    aggregator_url: Optional[str] = Field(
        DEFAULT_AGGREGATOR_URL, description="Шаблон агрегатора с {host} и {size}; null отключает."
    )
    providers: Tuple[str, ...] = Field(
        ("google", "microsoft", "amazon", "apple"),
        description="Платформы, для которых зеркало именуется provider-subservice.",
    )
    well_known_paths: Tuple[str, ...] = Field(
        (
            "apple-touch-icon-precomposed.png",
            "apple-touch-icon.png",
            "favicon.png",
            "favicon.jpg",
            "favicon.ico",
            "favicon.svg",
        ),
        description="Стандартные пути иконок относительно корня сайта.",
    )
    allowed_extensions: Tuple[str, ...] = Field(
        ("png", "jpg", "jpeg", "gif", "ico", "svg", "webp", "avif"),
        min_length=1,
        description="Допустимые расширения файла иконки.",
    )

    @field_validator("well_known_paths", mode="after")
    def _strip_leading_slash(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(p.lstrip("/") for p in v if p.strip("/"))

    @field_validator("allowed_extensions", "providers", mode="after")
    def _lower(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(x.strip().lstrip(".").lower() for x in v if x.strip())

    @model_validator(mode="after")
    def _check_templates(self) -> ResolverConfig:
        if self.mirror_url and "{name}" not in self.mirror_url:
            raise ValueError("mirror_url must contain the {name} placeholder")
        if self.aggregator_url and "{host}" not in self.aggregator_url:
            raise ValueError("aggregator_url must contain the {host} placeholder")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> ResolverConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ResolverConfig.
    Без пути берёт configs/default.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл: FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return ResolverConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return ResolverConfig(**data)


__all__ = ["ResolverConfig", "load_config", "ValidationError", "CHROME_USER_AGENT"]
