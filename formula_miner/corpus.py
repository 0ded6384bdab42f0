"""
Formula 코퍼스 준비와 파일 목록.

코퍼스 레이아웃:
    <root>/Formula/**/*   (첫 글자 디렉토리로 중첩)
    <root>/Aliases/*      (다른 formula 를 가리키는 alias)
"""
from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List

from formula_miner.common.config import CoreRepoSettings
from formula_miner.common.errors import CloneError, CorpusError

logger = logging.getLogger(__name__)

FORMULA_DIR = "Formula"
ALIASES_DIR = "Aliases"


def clone_repository(url: str, branch: str, directory: Path) -> None:
    """git 으로 단일 브랜치 shallow clone."""
    git = shutil.which("git")
    if git is None:
        raise CloneError("git executable not found", path=str(directory))

    command = [git, "clone", "--depth", "1", "--single-branch", "--branch", branch, url, str(directory)]
    logger.info("Cloning %s (%s) into %s", url, branch, directory)
    try:
        subprocess.run(command, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as exc:
        raise CloneError(
            f"failed to clone {url}",
            path=str(directory),
            stderr=(exc.stderr or "").strip(),
        ) from exc


def ensure_corpus(core_repo: CoreRepoSettings) -> Path:
    """clone 설정이면 코퍼스를 받아오고, 코퍼스 루트 경로를 반환."""
    directory = Path(core_repo.dir)
    if core_repo.clone:
        clone_repository(core_repo.url, core_repo.branch, directory)
    else:
        logger.info("Using existing corpus at %s", directory)
    return directory


def list_formula_files(root: Path) -> List[Path]:
    """
    Formula/ 아래 모든 파일과 Aliases/ 바로 아래 파일 목록 (정렬됨).

    Raises:
        CorpusError: Formula/ 디렉토리가 없을 때
    """
    formula_dir = Path(root) / FORMULA_DIR
    if not formula_dir.is_dir():
        raise CorpusError(f"{formula_dir} is not a directory", path=str(formula_dir))

    files = [path for path in formula_dir.rglob("*") if path.is_file()]

    aliases_dir = Path(root) / ALIASES_DIR
    if aliases_dir.is_dir():
        files.extend(path for path in aliases_dir.iterdir() if path.is_file())
    else:
        logger.debug("No %s directory under %s", ALIASES_DIR, root)

    return sorted(files)
