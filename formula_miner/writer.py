"""
TSV Emitter.

출력 레코드 (탭 구분, 문자열 필드는 큰따옴표):
    0  "<pm>"  "<name>"     "<license>"        "<repo url>"  "<archive url>"  "<system requirement>"
    1  "<pm>"  "<dep name>" "<owner license>"  "<types>"     "<restriction>"
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional, TextIO

from formula_miner.common.config import DEFAULT_PACKAGE_MANAGER
from formula_miner.common.errors import BaseError, DanglingDependencyError, ErrorKind
from formula_miner.models.dependency import Dependency
from formula_miner.models.formula import Formula

logger = logging.getLogger(__name__)

PACKAGE_RECORD = 0
DEPENDENCY_RECORD = 1


@dataclass(frozen=True)
class WriteResult:
    path: Path
    packages: int
    dependencies: int


def output_path(output_dir: Path, package_manager: str = DEFAULT_PACKAGE_MANAGER, day: Optional[date] = None) -> Path:
    """`deps-<pm>-<YYYY-MM-DD>.tsv`"""
    day = day or date.today()
    return Path(output_dir) / f"deps-{package_manager}-{day.isoformat()}.tsv"


def _record(kind: int, fields: Iterable[str]) -> str:
    return "\t".join([str(kind)] + [f'"{value}"' for value in fields]) + "\n"


def format_package_line(formula: Formula, package_manager: str = DEFAULT_PACKAGE_MANAGER) -> str:
    return _record(PACKAGE_RECORD, (
        package_manager,
        formula.name,
        formula.license,
        formula.repo_url,
        formula.archive_url,
        formula.system_requirement,
    ))


def format_dependency_line(
    owner: Formula,
    dependency: Dependency,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
) -> str:
    return _record(DEPENDENCY_RECORD, (
        package_manager,
        dependency.name,
        owner.license,
        dependency.types_joined,
        dependency.restriction,
    ))


def check_dependencies(formulae: Mapping[str, Formula]) -> None:
    """
    모든 의존성 대상이 맵에 있는지 확인.

    Raises:
        DanglingDependencyError: 첫 번째로 찾은 누락 대상
    """
    for name in sorted(formulae):
        for dependency in formulae[name].dependencies:
            if dependency.name not in formulae:
                raise DanglingDependencyError(name, dependency.name)


def write_records(formulae: Mapping[str, Formula], out: TextIO, package_manager: str = DEFAULT_PACKAGE_MANAGER) -> WriteResult:
    """이름 순으로 패키지 레코드와 그 의존성 레코드를 쓴다. 대상 검사는 check_dependencies() 몫."""
    packages = dependencies = 0
    for name in sorted(formulae):
        formula = formulae[name]
        out.write(format_package_line(formula, package_manager))
        packages += 1
        for dependency in formula.dependencies:
            out.write(format_dependency_line(formula, dependency, package_manager))
            dependencies += 1

    return WriteResult(path=Path(getattr(out, "name", "")), packages=packages, dependencies=dependencies)


def write_formulae(
    formulae: Mapping[str, Formula],
    output_dir: Path,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    day: Optional[date] = None,
) -> WriteResult:
    """
    Formula 맵을 TSV 파일에 추가 모드로 기록.

    Raises:
        DanglingDependencyError: 맵에 없는 의존성 대상이 있을 때 (아무것도 쓰지 않음)
        BaseError: 출력 파일을 열 수 없을 때
    """
    path = output_path(output_dir, package_manager, day)
    check_dependencies(formulae)

    try:
        with open(path, "a", encoding="utf-8") as out:
            result = write_records(formulae, out, package_manager)
    except OSError as exc:
        raise BaseError(
            f"cannot write {path}: {exc}",
            kind=ErrorKind.OUTPUT_IO,
            context={"path": str(path)},
        ) from exc

    logger.info(
        "Wrote %d packages and %d dependencies to %s",
        result.packages, result.dependencies, path,
    )
    return WriteResult(path=path, packages=result.packages, dependencies=result.dependencies)
