# === FILE: docs_mirror/config.py ===
"""
Модуль для загрузки и валидации конфигурации docs-mirror.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

DEFAULT_SITEMAP_URL = "https://docs.aws.amazon.com/sitemap_index.xml"
DEFAULT_HOST = "docs.aws.amazon.com"

DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/116.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:102.0) Gecko/20100101 Firefox/102.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/15.5 Safari/605.1.15",
)

# SDK and language-binding reference trees that are never mirrored
DEFAULT_EXCLUDED_SEGMENTS: tuple[str, ...] = (
    "AWSJavaSDK",
    "AWSJavaScriptSDK",
    "CDI-SDK",
    "aws-sdk-php",
    "chime-sdk",
    "database-encryption-sdk",
    "embedded-csdk",
    "encryption-sdk",
    "pythonsdk",
    "sdk-for-android",
    "sdk-for-cpp",
    "sdk-for-go",
    "sdk-for-ios",
    "sdk-for-java",
    "sdk-for-javascript",
    "sdk-for-kotlin",
    "sdk-for-net",
    "sdk-for-php",
    "sdk-for-php1",
    "sdk-for-ruby",
    "sdk-for-rust",
    "sdk-for-sapabap",
    "sdk-for-swift",
    "sdk-for-unity",
    "sdkfornet",
    "sdkfornet1",
    "sdkref",
    "xray-sdk-for-java",
)

DEFAULT_LOCALE_PATTERN = r"[a-z]{2}_[a-z]{2}"


class MirrorConfig(BaseModel):
    """Конфигурация для одного запуска зеркалирования."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    sitemap_url: HttpUrl = Field(DEFAULT_SITEMAP_URL, description="Корневой sitemap (index или urlset).")
    host: str = Field(DEFAULT_HOST, min_length=1, description="Единственный допустимый хост документации.")
    base_dir: Path = Field(Path("aws_html"), description="Корень дерева с сохранёнными страницами.")
    index_filename: str = Field("index.html", min_length=1, description="Имя файла для URL, оканчивающихся на '/'.")
    workers: int = Field(10, ge=1, description="Число параллельных загрузчиков.")
    max_docs: int = Field(0, ge=0, description="Лимит URL из одного urlset (0 = без лимита).")
    rate_limit: bool = Field(False, description="Пауза после каждой страницы в каждом воркере.")
    rate_limit_delay: float = Field(2.0, ge=0, description="Длительность паузы между запросами (секунд).")
    max_attempts: int = Field(5, ge=1, description="Максимум попыток на один URL.")
    backoff: float = Field(3.0, ge=0, description="Пауза перед повтором после 403 или временной ошибки.")
    backoff_factor: float = Field(1.0, ge=1.0, description="Множитель паузы для каждого следующего повтора.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agents: tuple[str, ...] = Field(DEFAULT_USER_AGENTS, min_length=1, description="Пул заголовков User-Agent.")
    excluded_segments: tuple[str, ...] = Field(
        DEFAULT_EXCLUDED_SEGMENTS, description="Первые сегменты пути, которые не скачиваются."
    )
    locale_pattern: str = Field(DEFAULT_LOCALE_PATTERN, description="Регулярка для локализованных сегментов.")

    @field_validator("host", mode="before")
    def _lower_host(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("locale_pattern")
    def _check_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid locale_pattern: {exc}") from exc
        return v

    @field_validator("user_agents")
    def _check_user_agents(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if any(not ua.strip() for ua in v):
            raise ValueError("user_agents must not contain empty strings")
        return v


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


def load_config(path: Union[str, Path, None] = None) -> MirrorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MirrorConfig.
    Без пути используется configs/default.yaml, а если его нет, то значения по умолчанию.
    При отсутствии явно указанного файла бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return MirrorConfig()
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

    try:
        return MirrorConfig(**data)
    except ValidationError:
        raise


__all__ = ["MirrorConfig", "load_config", "DEFAULT_SITEMAP_URL", "DEFAULT_HOST"]
