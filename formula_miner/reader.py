"""
Concurrent Formula Reader.

코퍼스의 모든 formula 파일을 워커 풀로 추출해 이름 -> Formula 맵을 만든다.
파일 하나라도 실패하면 전체 읽기가 실패하고 부분 결과는 반환하지 않는다.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from formula_miner.common.config import ReaderSettings
from formula_miner.common.parallel import run_fail_fast
from formula_miner.corpus import list_formula_files
from formula_miner.extractors.formula import build_fields, extract_from_file
from formula_miner.models.formula import Formula

logger = logging.getLogger(__name__)


class FormulaReader:
    """코퍼스 루트 하나에 대한 병렬 리더."""

    def __init__(self, root: Path, settings: Optional[ReaderSettings] = None):
        self.root = Path(root)
        self.settings = settings or ReaderSettings()
        self._fields = build_fields(self.settings.end_tolerance)
        self._formulae: Dict[str, Formula] = {}
        self._lock = threading.Lock()

    def _add(self, formula: Formula) -> None:
        with self._lock:
            if formula.name in self._formulae:
                logger.warning("Duplicate formula name %s, keeping the last one", formula.name)
            self._formulae[formula.name] = formula

    def _process(self, path: Path) -> None:
        source = extract_from_file(path, self._fields)
        self._add(Formula.from_source(
            source,
            fallback_license=self.settings.fallback_license,
            derive_repo=self.settings.derive_repo,
        ))

    def read(self) -> Dict[str, Formula]:
        """
        모든 파일을 읽어 Formula 맵 반환.

        Raises:
            CorpusError: 디렉토리/파일을 읽을 수 없을 때
            FormulaParseError: 어떤 파일이든 추출에 실패했을 때
        """
        files = list_formula_files(self.root)
        logger.info(
            "Reading %d formula files from %s with %d workers",
            len(files), self.root, self.settings.max_workers,
        )

        self._formulae = {}
        try:
            run_fail_fast(
                files,
                self._process,
                max_workers=self.settings.max_workers,
                thread_name_prefix="formula-reader",
            )
        except Exception:
            self._formulae = {}
            raise

        formulae, self._formulae = self._formulae, {}
        logger.info("Read %d formulae", len(formulae))
        return formulae


def read_formulae(root: Path, settings: Optional[ReaderSettings] = None) -> Dict[str, Formula]:
    """편의 함수: FormulaReader(root, settings).read()"""
    return FormulaReader(root, settings).read()
