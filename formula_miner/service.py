"""
Formula miner 서비스: 설정 검증 -> 코퍼스 준비 -> 읽기 -> TSV 출력.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from formula_miner.common.config import Settings, load_settings, validate_settings
from formula_miner.corpus import ensure_corpus
from formula_miner.reader import FormulaReader
from formula_miner.writer import write_formulae

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MiningResult:
    formula_count: int
    dependency_count: int
    output_path: Path


class MinerService:
    """설정 하나로 전체 마이닝을 실행하는 서비스."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def run(self) -> MiningResult:
        """
        전체 파이프라인 실행.

        Raises:
            ConfigError: 설정/디렉토리 검증 실패
            CorpusError: 코퍼스 clone/읽기 실패
            FormulaParseError: formula 파일 추출 실패 (fail-fast)
            DanglingDependencyError: 맵에 없는 의존성 대상
        """
        logger.info("Starting formula mining: %s", self.settings.describe())
        validate_settings(self.settings)

        root = ensure_corpus(self.settings.core_repo)
        formulae = FormulaReader(root, self.settings.reader).read()
        written = write_formulae(
            formulae,
            Path(self.settings.output_dir),
            package_manager=self.settings.package_manager,
        )

        return MiningResult(
            formula_count=written.packages,
            dependency_count=written.dependencies,
            output_path=written.path,
        )


def mine(config_path: Optional[str] = None, **overrides: Any) -> MiningResult:
    """편의 함수: 설정 파일을 읽어 마이닝 실행."""
    return MinerService(load_settings(config_path, **overrides)).run()


__all__ = ["MinerService", "MiningResult", "mine"]
