"""
stable/head URL clean 함수와 URL 보간 해석.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from formula_miner.common.errors import InterpolationError, MissingFieldError
from formula_miner.extractors.dependency import walk_dependencies
from formula_miner.models.formula import Head, Stable
from formula_miner.parser import boundaries, patterns

logger = logging.getLogger(__name__)


def format_tree_url(url: str, tag: str) -> str:
    """git URL + 태그 -> `<repo>/tree/<tag>`."""
    base = url.removesuffix(".git").rstrip("/")
    return f"{base}/tree/{tag}"


def stable_from_line(values: Tuple[Optional[str], ...]) -> Stable:
    """`url "<u>"[, tag: "<t>"]` 한 줄에서 Stable 생성."""
    url, tag = values[0], values[1] if len(values) > 1 else None
    return Stable(url=format_tree_url(url, tag) if tag else url)


def _find_tag(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        m = patterns.TAG.search(line)
        if m:
            return m.group(1)
    return None


def clean_url_sequence(lines: Sequence[str]) -> Stable:
    """
    여러 줄로 이어지는 url 인자 목록.

        url "https://github.com/owner/repo.git",
            tag:      "v1.2.3",
            revision: "abcdef"
    """
    m = patterns.URL.match(lines[0])
    if not m:
        raise MissingFieldError("url")
    tag = _find_tag(lines)
    return Stable(url=format_tree_url(m.group(1), tag) if tag else m.group(1))


def _block_body(lines: Sequence[str]) -> Sequence[str]:
    """블록 시작 줄과 닫는 `end` 줄을 떼어낸 내부."""
    body = lines[1:]
    if body and boundaries.is_end_top_block(body[-1]):
        body = body[:-1]
    return body


def clean_stable_sequence(lines: Sequence[str], end_tolerance: int = 0) -> Stable:
    """
    `stable do ... end` 블록.

    url(과 이어지는 tag 줄) 다음 줄부터 블록 끝까지를 의존성으로 해석한다.
    """
    body = _block_body(lines)
    url: Optional[str] = None
    tag: Optional[str] = None
    index = -1

    for i, line in enumerate(body):
        if url is None:
            m = patterns.BLOCK_URL.match(line)
            if not m:
                continue
            url = m.group(1)
        tag_match = patterns.TAG.search(line)
        if tag_match:
            tag = tag_match.group(1)
        if not patterns.TRAILING_COMMA.search(line):
            index = i
            break

    if url is None:
        raise MissingFieldError("url")
    if index < 0:
        index = len(body) - 1

    mirror = None
    for line in body:
        m = patterns.BLOCK_MIRROR.match(line)
        if m:
            mirror = m.group(1)
            break

    return Stable(
        url=format_tree_url(url, tag) if tag else url,
        mirror=mirror,
        dependencies=walk_dependencies(body[index + 1:], end_tolerance),
    )


def head_from_line(url: str) -> Head:
    return Head(url=url)


def clean_head_sequence(lines: Sequence[str], end_tolerance: int = 0) -> Head:
    """`head do ... end` 블록: 블록 안 url 과 의존성."""
    body = _block_body(lines)
    url = ""
    for line in body:
        m = patterns.BLOCK_URL.match(line)
        if m:
            url = m.group(1)
            break
    if not url:
        logger.debug("head block without url")
    return Head(url=url, dependencies=walk_dependencies(body, end_tolerance))


def resolve_interpolation(url: str, lines: Sequence[str]) -> str:
    """
    URL 의 `#{var}` 를 같은 파일의 `var = "value"` 대입문으로 치환.

    Raises:
        InterpolationError: 대입문을 찾지 못했을 때
    """
    resolved = url
    for variable in patterns.INTERPOLATION.findall(url):
        assignment = patterns.assignment_pattern(variable)
        value = None
        for line in lines:
            m = assignment.search(line)
            if m:
                value = m.group(1)
                break
        if value is None:
            raise InterpolationError(variable, url)
        resolved = resolved.replace(f"#{{{variable}}}", value)
    return resolved
