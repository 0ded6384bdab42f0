"""
Miner 설정: config.yml 로드, 환경변수 오버라이드, 디렉토리 검증.

우선순위: 환경변수(MINER_*) > config.yml > 기본값.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formula_miner.common.errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: str = os.getenv("MINER_CONFIG_PATH", "config.yml")
DEFAULT_FALLBACK_LICENSE: str = "pseudo"
DEFAULT_PACKAGE_MANAGER: str = "brew"


class CoreRepoSettings(BaseModel):
    """formula 코퍼스(homebrew-core 등) 저장소 설정."""
    url: str = ""
    branch: str = "main"
    dir: str = ""
    # True 이면 실행 시 url/branch 를 dir 로 clone
    clone: bool = False


class ReaderSettings(BaseModel):
    """Concurrent reader 설정."""
    max_workers: int = 8
    # False 이면 head URL 만 repo URL 로 사용
    derive_repo: bool = True
    fallback_license: str = DEFAULT_FALLBACK_LICENSE
    # 의존성 블록에서 허용할 짝 없는 `end` 개수
    end_tolerance: int = Field(default=0, ge=0)

    @field_validator("max_workers")
    @classmethod
    def check_workers(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("invalid number of workers")
        return v


class Settings(BaseSettings):
    """전체 설정."""
    output_dir: str = ""
    package_manager: str = DEFAULT_PACKAGE_MANAGER
    core_repo: CoreRepoSettings = CoreRepoSettings()
    reader: ReaderSettings = ReaderSettings()

    model_config = SettingsConfigDict(
        env_prefix="MINER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # yaml 값은 init kwargs 로 들어오므로 환경변수를 앞에 둔다
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def describe(self) -> str:
        """실행 로그용 한 줄 요약."""
        return (
            f"output_dir={self.output_dir} core_repo={self.core_repo.dir} "
            f"(clone={self.core_repo.clone}, {self.core_repo.url}@{self.core_repo.branch}) "
            f"workers={self.reader.max_workers} derive_repo={self.reader.derive_repo} "
            f"fallback_license={self.reader.fallback_license}"
        )


@lru_cache(maxsize=8)
def load_config_file(path: str) -> Dict[str, Any]:
    """YAML 설정 파일 로드 (경로별 캐시)."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}", key="config")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping", key="config")
    return data


def load_settings(path: str | None = None, **overrides: Any) -> Settings:
    """
    설정 파일을 읽어 Settings 생성.

    Args:
        path: config.yml 경로 (None 이면 DEFAULT_CONFIG_PATH)
        **overrides: 최상위 키 오버라이드 (CLI 인자 등)

    Raises:
        ConfigError: 파일이 없거나 값이 유효하지 않을 때
    """
    data = load_config_file(path or DEFAULT_CONFIG_PATH)
    try:
        settings = Settings(**data)
    except ValidationError as exc:
        raise _config_error(exc) from exc
    return apply_overrides(settings, **overrides)


def _config_error(exc: ValidationError, prefix: str = "") -> ConfigError:
    first = exc.errors()[0]
    message = str(first.get("msg", exc)).removeprefix("Value error, ")
    loc = ([prefix] if prefix else []) + [str(p) for p in first.get("loc", ())]
    return ConfigError(message, key=".".join(loc))


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """
    CLI 오버라이드를 환경변수/YAML 결과 위에 덮어쓴다.

    중첩 설정(reader, core_repo)은 dict 로 받아 기존 값과 합친 뒤 다시 검증한다.

    Raises:
        ConfigError: 합친 값이 유효하지 않을 때
    """
    update: Dict[str, Any] = {}
    for key, value in overrides.items():
        current = getattr(settings, key)
        if isinstance(current, BaseModel) and isinstance(value, dict):
            try:
                update[key] = type(current).model_validate({**current.model_dump(), **value})
            except ValidationError as exc:
                raise _config_error(exc, prefix=key) from exc
        else:
            update[key] = value
    if not update:
        return settings
    return settings.model_copy(update=update)


def _ensure_dir(path: Path, key: str) -> None:
    if path.exists() and not path.is_dir():
        raise ConfigError(f"{path} is not a directory", key=key)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"cannot create {path}: {exc}", key=key) from exc


def _check_empty_dir(path: Path, key: str) -> None:
    if not path.is_dir():
        raise ConfigError(f"{path} is not a directory", key=key)
    if any(path.iterdir()):
        raise ConfigError(f"{path} is not empty", key=key)


def validate_settings(settings: Settings) -> None:
    """
    파일시스템 조건 검증. 필요한 디렉토리는 생성한다.

    - output_dir: 비어 있지 않은 경로, 없으면 생성, 빈 디렉토리여야 함
    - core_repo.dir: clone 이면 없을 때 생성 후 빈 디렉토리여야 하고,
      clone 이 아니면 내용이 있는 디렉토리여야 함
    """
    if not settings.output_dir:
        raise ConfigError("the output directory is empty", key="output_dir")
    output_dir = Path(settings.output_dir)
    _ensure_dir(output_dir, "output_dir")
    _check_empty_dir(output_dir, "output_dir")

    core = settings.core_repo
    if not core.dir:
        raise ConfigError("the core repository directory is empty", key="core_repo.dir")
    core_dir = Path(core.dir)

    if core.clone:
        if not core.url:
            raise ConfigError("the core repository URL is empty", key="core_repo.url")
        if not core.branch:
            raise ConfigError("the core repository branch is empty", key="core_repo.branch")
        _ensure_dir(core_dir, "core_repo.dir")
        _check_empty_dir(core_dir, "core_repo.dir")
    else:
        if not core_dir.is_dir():
            raise ConfigError(f"{core_dir} is not a directory", key="core_repo.dir")
        if not any(core_dir.iterdir()):
            raise ConfigError(f"{core_dir} is empty", key="core_repo.dir")

    if settings.reader.max_workers <= 0:
        raise ConfigError("invalid number of workers", key="reader.max_workers")

    logger.info("Configuration validated: %s", settings.describe())
