"""
Field Strategy Parser.

필드 디스크립터는 세 가지 변형 중 하나다.

- SingleLineField: 캡처 그룹 하나짜리 정규식
- SameLineMultiField: 한 줄에서 주 패턴과 보조 패턴 값을 함께 추출
- MultiLineField: 시작 경계가 열리면 끝 경계까지 줄을 모아 clean 함수에 전달.
  시작 경계가 없으면 fallback 한 줄 디스크립터로 추출

파서 상태(ParserState)는 불변 값이고, step() 이 줄 하나를 받아 다음 상태를
돌려준다. 같은 이름의 필드는 처음 매칭된 값만 남는다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Pattern, Sequence, Tuple, Union

from formula_miner.common.errors import MissingFieldError, UnterminatedSequenceError

logger = logging.getLogger(__name__)


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class SingleLineField:
    """정규식 한 개, 캡처 그룹 한 개."""
    name: str
    pattern: Pattern[str]
    convert: Callable[[str], Any] = _identity
    required: bool = False


@dataclass(frozen=True)
class SameLineMultiField:
    """주 패턴 + 같은 줄의 보조 패턴들. convert 는 (주 값, 보조 값...) 튜플을 받는다."""
    name: str
    pattern: Pattern[str]
    extra_patterns: Tuple[Pattern[str], ...] = ()
    convert: Callable[[Tuple[Optional[str], ...]], Any] = _identity
    required: bool = False


LineField = Union[SingleLineField, SameLineMultiField]


@dataclass(frozen=True)
class MultiLineField:
    """begin/end 경계로 둘러싸인 여러 줄 구문."""
    name: str
    begins: Callable[[str], bool]
    ends: Callable[[str], bool]
    clean: Callable[[Sequence[str]], Any]
    fallback: Optional[LineField] = None
    required: bool = False


Field = Union[SingleLineField, SameLineMultiField, MultiLineField]


@dataclass(frozen=True)
class OpenSequence:
    """열려 있는 다중 라인 구문과 지금까지 모은 줄 (시작 줄 포함)."""
    descriptor: MultiLineField
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class ParserState:
    matches: Dict[str, Any] = field(default_factory=dict)
    open: Optional[OpenSequence] = None

    def with_match(self, name: str, value: Any) -> "ParserState":
        return ParserState(matches={**self.matches, name: value}, open=None)


def match_line(descriptor: LineField, line: str) -> Optional[Any]:
    """한 줄 디스크립터 매칭. 매칭되지 않으면 None."""
    if isinstance(descriptor, SingleLineField):
        m = descriptor.pattern.search(line)
        return descriptor.convert(m.group(1)) if m else None
    if isinstance(descriptor, SameLineMultiField):
        m = descriptor.pattern.search(line)
        if not m:
            return None
        values = [m.group(1)]
        for extra in descriptor.extra_patterns:
            extra_match = extra.search(line)
            values.append(extra_match.group(1) if extra_match else None)
        return descriptor.convert(tuple(values))
    raise TypeError(f"not a single-line field descriptor: {descriptor!r}")


def _feed_open(state: ParserState, line: str) -> ParserState:
    sequence = state.open
    lines = sequence.lines + (line,)
    if sequence.descriptor.ends(line):
        return state.with_match(sequence.descriptor.name, sequence.descriptor.clean(lines))
    return ParserState(matches=state.matches, open=OpenSequence(sequence.descriptor, lines))


def step(fields: Sequence[Field], state: ParserState, line: str) -> ParserState:
    """
    줄 하나를 처리하고 다음 상태를 반환.

    열린 구문이 있으면 그 구문이 줄을 가져가고, 없으면 아직 값이 없는
    디스크립터를 순서대로 시도한다.
    """
    if state.open is not None:
        return _feed_open(state, line)

    for descriptor in fields:
        if descriptor.name in state.matches:
            continue

        if isinstance(descriptor, MultiLineField):
            if descriptor.begins(line):
                return ParserState(
                    matches=state.matches,
                    open=OpenSequence(descriptor, (line,)),
                )
            if descriptor.fallback is None:
                continue
            value = match_line(descriptor.fallback, line)
        elif isinstance(descriptor, (SingleLineField, SameLineMultiField)):
            value = match_line(descriptor, line)
        else:
            raise TypeError(f"unknown field descriptor: {descriptor!r}")

        if value is not None:
            return state.with_match(descriptor.name, value)

    return state


def finish(fields: Sequence[Field], state: ParserState) -> Dict[str, Any]:
    """
    입력 끝에서 상태를 마무리하고 필드 값 dict 를 반환.

    Raises:
        UnterminatedSequenceError: 필수 다중 라인 구문이 닫히지 않음
        MissingFieldError: 필수 필드 값이 없음
    """
    if state.open is not None:
        sequence = state.open
        if sequence.descriptor.required:
            raise UnterminatedSequenceError(sequence.descriptor.name)
        logger.warning(
            "Unterminated %s sequence dropped (%d lines)",
            sequence.descriptor.name, len(sequence.lines),
        )

    for descriptor in fields:
        if descriptor.required and descriptor.name not in state.matches:
            raise MissingFieldError(descriptor.name)

    return dict(state.matches)


def parse_lines(fields: Sequence[Field], lines: Iterable[str]) -> Dict[str, Any]:
    """줄 시퀀스 전체를 파싱."""
    state = ParserState()
    for line in lines:
        state = step(fields, state, line)
    return finish(fields, state)
