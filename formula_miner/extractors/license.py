"""
License Expression Normalizer.

`all_of: ["A", any_of: ["B", "C"]]` 같은 중첩 표현식을
`A and (B or C)` 형태의 평탄한 중위 문자열로 바꾼다.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from formula_miner.parser import patterns

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK = "pseudo"

OPERATORS = {
    "all_of:": " and ",
    "any_of:": " or ",
    "one_of:": " or ",
}

_EXCEPTION_HASH = re.compile(r"=>\{with:([-.\w]+)\}")
_EXCEPTION_MARKER = "=>with:"
# 따옴표 밖의 공백만 지운다
_QUOTED_OR_SPACE = re.compile(r'("[^"]*")|\s+')

_PRE_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    (",{", ","),
    ("]}", "]"),
    (",}", "}"),
    ("}", ""),
)
_POST_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    (":public_domain", "Public Domain"),
    (":cannot_represent", "Cannot Represent"),
    ("=>", " "),
    (":", " "),
    ("{", ""),
    ("}", ""),
)


def _replace_all(text: str, pairs: Sequence[Tuple[str, str]]) -> str:
    """왼쪽부터 겹치지 않게 치환. 같은 위치에서는 앞쪽 쌍이 우선."""
    table = dict(pairs)
    pattern = re.compile("|".join(re.escape(old) for old, _ in pairs))
    return pattern.sub(lambda m: table[m.group(0)], text)


@dataclass
class _Frame:
    operator: str
    count: int = 0


class _LicenseScanner:
    """문자 단위 스캐너. 연산자 스택과 대괄호 깊이로 괄호를 넣는다."""

    def __init__(self, text: str):
        self.text = text
        self.output: List[str] = []
        self.frames: List[_Frame] = []
        self.sequence: List[str] = []
        self.word: List[str] = []

    def _emit(self, frame: _Frame, token: str) -> None:
        if frame.count:
            self.output.append(frame.operator)
        self.output.append(token)
        frame.count += 1

    def _flush_word(self) -> None:
        if not self.word:
            return
        token = "".join(self.word)
        self.word.clear()
        if _EXCEPTION_MARKER in token and self.frames:
            token = f"({token})"
        self.sequence.append(token)

    def _flush_sequence(self) -> None:
        if not self.sequence or not self.frames:
            return
        frame = self.frames[-1]
        for token in self.sequence:
            self._emit(frame, token)
        self.sequence.clear()

    def _open(self) -> None:
        keyword = "".join(self.word)
        self.word.clear()
        operator = OPERATORS.get(keyword)
        if operator is None:
            logger.debug("Unknown license operator %r, assuming all_of", keyword)
            operator = OPERATORS["all_of:"]

        if self.frames:
            self._flush_sequence()
            parent = self.frames[-1]
            if parent.count:
                self.output.append(parent.operator)
            parent.count += 1
            self.output.append("(")
        self.frames.append(_Frame(operator))

    def _close(self) -> None:
        self._flush_word()
        if not self.frames:
            logger.debug("Unbalanced ']' in license expression %r", self.text)
            return
        self._flush_sequence()
        self.frames.pop()
        if self.frames:
            self.output.append(")")

    def scan(self) -> str:
        for ch in self.text:
            if ch == "[":
                self._open()
            elif ch == "]":
                self._close()
            elif ch == ",":
                self._flush_word()
            else:
                self.word.append(ch)

        self._flush_word()
        if self.frames:
            logger.debug("Unclosed license expression %r", self.text)
            self._flush_sequence()
            self.output.extend(")" * (len(self.frames) - 1))
        elif self.sequence and not self.output:
            self.output.append(" and ".join(self.sequence))
        return "".join(self.output)


def normalize_license(raw: str, fallback: str = DEFAULT_FALLBACK) -> str:
    """
    라이선스 표현식을 평탄한 문자열로 정규화.

    Args:
        raw: clean 된 라이선스 표현식 (예: 'any_of: ["MIT", "Apache-2.0"]')
        fallback: 표현식이 비었을 때 반환할 값

    Returns:
        정규화된 라이선스 문자열

    Example:
        >>> normalize_license('all_of: ["A", any_of: ["B", "C"]]')
        'A and (B or C)'
        >>> normalize_license('"LGPL-2.1-only" => { with: "OCaml-LGPL-linking-exception" }')
        'LGPL-2.1-only with OCaml-LGPL-linking-exception'
    """
    text = _QUOTED_OR_SPACE.sub(lambda m: m.group(1) or "", raw or "").replace('"', "")
    if not text:
        return fallback

    text = _EXCEPTION_HASH.sub(r"=>with:\1", text)
    text = _replace_all(text, _PRE_REPLACEMENTS)
    expression = _LicenseScanner(text).scan()
    expression = _replace_all(expression, _POST_REPLACEMENTS).strip()
    return expression or fallback


def clean_license_sequence(lines: Iterable[str]) -> str:
    """
    여러 줄 license 구문을 한 줄 표현식으로 합친다.

    첫 줄의 `license` 키워드와 줄 끝 주석을 제거하고, 각 줄을 trim 해서 이어붙인다.
    """
    parts: List[str] = []
    for index, line in enumerate(lines):
        if index == 0:
            line = patterns.LICENSE_KEYWORD.sub("", line, count=1)
        line = patterns.TRAILING_COMMENT.sub("", line)
        parts.append(line.strip())
    return "".join(parts)
