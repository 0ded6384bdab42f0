"""
필드 디스크립터 테이블과 파일 단위 추출.
"""
from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from formula_miner.common.errors import CorpusError, FormulaParseError
from formula_miner.extractors.dependency import clean_dependency_section
from formula_miner.extractors.license import clean_license_sequence
from formula_miner.extractors.url import (
    clean_head_sequence,
    clean_stable_sequence,
    clean_url_sequence,
    head_from_line,
    resolve_interpolation,
    stable_from_line,
)
from formula_miner.models.formula import SourceFormula
from formula_miner.parser import boundaries, patterns
from formula_miner.parser.fields import (
    Field,
    MultiLineField,
    SameLineMultiField,
    SingleLineField,
    parse_lines,
)

logger = logging.getLogger(__name__)

FORMULA_SUFFIX = ".rb"


def build_fields(end_tolerance: int = 0) -> Tuple[Field, ...]:
    """
    추출 순서대로 정렬된 필드 디스크립터.

    url 과 stable 블록은 같은 이름("url")을 쓰므로 먼저 나온 쪽만 채택된다.
    """
    return (
        SingleLineField("homepage", patterns.HOMEPAGE),
        MultiLineField(
            "url",
            begins=boundaries.is_begin_url_sequence,
            ends=boundaries.is_end_url_sequence,
            clean=clean_url_sequence,
            fallback=SameLineMultiField(
                "url", patterns.URL, (patterns.TAG,), convert=stable_from_line
            ),
            required=True,
        ),
        MultiLineField(
            "url",
            begins=boundaries.is_begin_stable,
            ends=boundaries.is_end_top_block,
            clean=partial(clean_stable_sequence, end_tolerance=end_tolerance),
            required=True,
        ),
        SingleLineField("mirror", patterns.MIRROR),
        MultiLineField(
            "license",
            begins=boundaries.is_begin_license,
            ends=boundaries.is_end_license,
            clean=clean_license_sequence,
            fallback=SingleLineField("license", patterns.LICENSE),
        ),
        MultiLineField(
            "head",
            begins=boundaries.is_begin_head,
            ends=boundaries.is_end_top_block,
            clean=partial(clean_head_sequence, end_tolerance=end_tolerance),
            fallback=SingleLineField("head", patterns.HEAD, convert=head_from_line),
        ),
        MultiLineField(
            "dependency",
            begins=boundaries.is_begin_dependency_section,
            ends=boundaries.is_end_dependency_section,
            clean=partial(clean_dependency_section, end_tolerance=end_tolerance),
        ),
    )


def formula_name(path: Path) -> str:
    """파일 이름에서 `.rb` 를 뗀 formula 이름."""
    name = path.name
    if name.endswith(FORMULA_SUFFIX):
        return name[: -len(FORMULA_SUFFIX)]
    return name


def extract_source_formula(
    name: str,
    lines: Sequence[str],
    fields: Optional[Sequence[Field]] = None,
) -> SourceFormula:
    """
    줄 목록에서 SourceFormula 추출.

    Args:
        name: formula 이름
        lines: 파일 내용 (개행 제거)
        fields: 필드 디스크립터 (None 이면 build_fields())

    Raises:
        FormulaParseError: 필수 필드 누락, URL 보간 실패 등
    """
    matches = parse_lines(fields or build_fields(), lines)

    stable = matches["url"]
    if patterns.INTERPOLATION.search(stable.url):
        stable = replace(stable, url=resolve_interpolation(stable.url, lines))

    return SourceFormula(
        name=name,
        stable=stable,
        homepage=matches.get("homepage"),
        mirror=matches.get("mirror"),
        license=matches.get("license"),
        dependencies=matches.get("dependency"),
        head=matches.get("head"),
    )


def read_lines(path: Path) -> List[str]:
    """파일을 줄 단위로 읽는다."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read().splitlines()
    except OSError as exc:
        raise CorpusError(f"cannot read {path}: {exc}", path=str(path)) from exc


def extract_from_file(path: Path, fields: Optional[Sequence[Field]] = None) -> SourceFormula:
    """파일 하나를 읽어 SourceFormula 추출. 에러에는 파일 경로가 붙는다."""
    lines = read_lines(path)
    try:
        source = extract_source_formula(formula_name(path), lines, fields)
    except FormulaParseError as exc:
        raise exc.with_path(str(path))
    logger.debug("Extracted %s from %s", source.name, path)
    return source
