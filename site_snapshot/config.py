"""
Модуль для загрузки и валидации конфигурации SiteSnapshot.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

#: Таймауты по умолчанию (секунд) для каждого режима загрузки.
DEFAULT_TIMEOUTS: dict[str, float] = {"raw": 10.0, "rendered": 30.0}

FetchMode = Literal["raw", "rendered"]


class CrawlConfig(BaseModel):
    """Конфигурация одного обхода сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Стартовый URL обхода.")
    output_dir: Path = Field(Path("snapshots-baseline"), description="Каталог для снимков и manifest.json.")
    mode: FetchMode = Field("rendered", description="raw – HTTP GET без JS, rendered – headless-браузер.")
    timeout: Optional[float] = Field(
        None, gt=0, description="Таймаут на одну загрузку (секунд); по умолчанию зависит от режима."
    )
    user_agent: str = Field("SiteCrawler/1.0", min_length=1, description="Заголовок User-Agent.")
    viewport_width: int = Field(1280, ge=1, description="Ширина окна браузера.")
    viewport_height: int = Field(720, ge=1, description="Высота окна браузера.")
    browser_channel: Optional[str] = Field(
        None, description="Канал Chromium для Playwright (например, msedge или chrome)."
    )
    pretty_html: bool = Field(False, description="Форматировать сохранённый HTML для удобного diff.")

    @property
    def fetch_timeout(self) -> float:
        """Фактический таймаут загрузки с учётом режима."""
        return self.timeout if self.timeout is not None else DEFAULT_TIMEOUTS[self.mode]


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


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """
    Читает YAML или JSON и возвращает сырые данные без валидации.
    При отсутствии файла бросает FileNotFoundError.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlConfig:
    """
    Собирает CrawlConfig из файла (если указан) и явных переопределений.
    Значения None в overrides не затирают значения из файла.
    """
    data: dict[str, Any] = read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlConfig(**data)


__all__ = ["CrawlConfig", "DEFAULT_TIMEOUTS", "FetchMode", "load_config", "read_config_file"]
