# === FILE: site_checker/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteChecker.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from site_checker.utils import read_ignore_list, remove_duplicates

# Сообщения Tidy, которые не считаются ошибками.
DEFAULT_IGNORE_ERRORS: List[str] = [
    '<table> lacks "summary" attribute',
    '<img> lacks "alt" attribute',
    '<form> proprietary attribute "novalidate"',
    '<input> attribute "type" has invalid value "email"',
    '<input> attribute "tabindex" has invalid value "-1"',
    '<input> proprietary attribute "border"',
    "trimming empty <p>",
    '<iframe> proprietary attribute "allowfullscreen"',
]

ExternalPolicy = Literal["fatal", "warn", "ignore"]


class CheckerConfig(BaseModel):
    """Конфигурация для одного запуска проверки сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    site_uri: HttpUrl = Field(..., description="Корневой URL сайта.")
    site_dir: Optional[Path] = Field(None, description="Локальная папка сайта для отчёта о лишних файлах.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SiteChecker/1.0", min_length=1, description="Заголовок User-Agent.")
    max_redirects: int = Field(10, ge=0, description="Максимальная длина цепочки редиректов.")
    external_links: ExternalPolicy = Field(
        "fatal", description="Что делать с мёртвыми внешними ссылками: fatal, warn или ignore."
    )
    ignore_errors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_ERRORS),
        description="Точные тексты сообщений, которые не считаются ошибками.",
    )
    ignore_file: Optional[Path] = Field(None, description="Файл с дополнительными сообщениями (по одному на строку).")
    tidy: bool = Field(False, description="Проверять HTML внешней программой tidy.")
    tidy_command: str = Field("tidy", min_length=1, description="Исполняемый файл tidy.")
    schemas: Dict[str, Path] = Field(default_factory=dict, description="Доп. схемы: корневой элемент -> XSD.")
    follow_sitemap: bool = Field(True, description="Проверять URL из <loc> в sitemap.")
    orphan_exclude: List[str] = Field(default_factory=list, description="Glob-шаблоны, исключаемые из отчёта.")

    @field_validator("site_dir", "ignore_file", mode="before")
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v

    @model_validator(mode="after")
    def _check_paths_exist(self) -> CheckerConfig:
        if self.site_dir is not None and not self.site_dir.is_dir():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.site_dir))
        if self.ignore_file is not None and not self.ignore_file.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.ignore_file))
        missing = [str(p) for p in self.schemas.values() if not p.is_file()]
        if missing:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), missing[0])
        return self

    def ignore_list(self) -> List[str]:
        """Сообщения из ignore_errors и ignore_file вместе."""
        entries = list(self.ignore_errors)
        if self.ignore_file is not None:
            entries.extend(read_ignore_list(self.ignore_file))
        return remove_duplicates(entries)


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


def _read_file(path_obj: Path) -> dict[str, Any]:
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CheckerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CheckerConfig.

    Значения из overrides (кроме None) перекрывают значения из файла.
    Без файла конфига и без overrides бросает FileNotFoundError.
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
        elif overrides:
            data = {}
        else:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
        data = _read_file(path_obj)

    data.update(overrides)
    return CheckerConfig(**data)
