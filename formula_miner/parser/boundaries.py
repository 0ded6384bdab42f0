"""
Sequence Boundary Detector.

원시 줄 하나만 보고 다중 라인 구문의 시작/끝을 판단하는 순수 함수들.
"""
from formula_miner.parser import patterns


def _bracket_balance(line: str) -> int:
    opened = line.count("[") + line.count("{")
    closed = line.count("]") + line.count("}")
    return opened - closed


def is_begin_license(line: str) -> bool:
    """license 키워드가 있고 여는 괄호가 더 많은 줄."""
    return bool(patterns.LICENSE_START.match(line)) and _bracket_balance(line) > 0


def is_end_license(line: str) -> bool:
    """닫는 괄호가 더 많고 trailing comma 로 이어지지 않는 줄."""
    return _bracket_balance(line) < 0 and not patterns.TRAILING_COMMA.search(line)


def is_begin_stable(line: str) -> bool:
    return bool(patterns.STABLE_BEGIN.match(line))


def is_begin_head(line: str) -> bool:
    return bool(patterns.HEAD_BEGIN.match(line))


def is_end_top_block(line: str) -> bool:
    """stable/head 블록을 닫는 2칸 들여쓰기 `end`."""
    return bool(patterns.TOP_BLOCK_END.match(line))


def is_begin_url_sequence(line: str) -> bool:
    """
    trailing comma 로 인자가 다음 줄로 이어지는 url 줄.

    같은 줄에 tag/using 같은 인자가 이미 있어도 줄 끝이 쉼표면 이어진다.
    """
    return bool(patterns.URL_BEGIN.match(line))


def is_end_url_sequence(line: str) -> bool:
    """url 인자 목록의 마지막 줄 (trailing comma 없음)."""
    return not patterns.TRAILING_COMMA.search(line)


def is_begin_dependency_section(line: str) -> bool:
    """최상위 depends_on / uses_from_macos / on_* 블록."""
    return bool(patterns.DEPENDENCY_BEGIN.match(line))


def is_end_dependency_section(line: str) -> bool:
    """`def install` 등 첫 메서드 정의나 클래스의 `end`."""
    return bool(patterns.DEPENDENCY_END.match(line))


def is_begin_skip_region(line: str) -> bool:
    """resource/patch 블록. 내용은 의존성과 무관하다."""
    return bool(patterns.SKIP_REGION.match(line))


def opens_block(line: str) -> bool:
    """`... do`, `if`, `case` 등 `end` 로 닫히는 모든 블록 시작."""
    return bool(patterns.DO_BLOCK.search(line) or patterns.KEYWORD_BLOCK.match(line))


def is_block_end(line: str) -> bool:
    """들여쓰기와 무관한 일반 `end`."""
    return bool(patterns.BLOCK_END.match(line))
