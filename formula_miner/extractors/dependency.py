"""
Restriction & Requirement Stack Model.

의존성 블록의 줄들을 먼저 토큰(BeginBlock / DependencyToken / RequirementToken /
ElseToken / EndBlock)으로 바꾸고, 재귀 하강으로 블록 중첩을 따라가며

- 블록 조건(on_linux, on_arm, on_sonoma :or_newer ...)을 의존성별 restriction 으로
- 블록과 무관한 depends_on macos:/xcode:/arch: 문장을 system requirement 로

모은다. resource/patch 블록은 내용 전체를 건너뛴다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from formula_miner.common.errors import UnbalancedBlockError
from formula_miner.models.dependency import Dependencies, Dependency, DependencySet
from formula_miner.parser import boundaries, patterns

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    CONDITION = "condition"   # restriction 토큰을 push
    NEUTRAL = "neutral"       # fails_with, 알 수 없는 do/if 블록
    SKIP = "skip"             # resource/patch


@dataclass(frozen=True)
class BeginBlock:
    kind: BlockKind
    restriction: str = ""
    line: str = ""
    # else 이후에 적용할 반대 조건 (if/unless 블록만)
    otherwise: str = ""


@dataclass(frozen=True)
class EndBlock:
    line: str = ""


@dataclass(frozen=True)
class ElseToken:
    line: str = ""
    # elsif 는 새 조건이 붙으므로 반대 조건을 쓸 수 없다
    chained: bool = False


@dataclass(frozen=True)
class DependencyToken:
    name: str
    dep_types: Tuple[str, ...] = ()
    # 줄 자체에 붙은 조건 (uses_from_macos, `if ...` 수식어)
    condition: str = ""


@dataclass(frozen=True)
class RequirementToken:
    text: str


Token = Union[BeginBlock, EndBlock, ElseToken, DependencyToken, RequirementToken]


# ---- 포맷터 ----

def format_version(value: str) -> str:
    """
    `sierra_or_older` -> `<= sierra`, `high_sierra_or_newer` -> `>= high_sierra`.

    Raises:
        ValueError: 두 형식 모두 아닐 때
    """
    if value.endswith("_or_older"):
        return "<= " + value[: -len("_or_older")]
    if value.endswith("_or_newer"):
        return ">= " + value[: -len("_or_newer")]
    raise ValueError(f"invalid version format: {value}")


def format_arguments(raw: str) -> str:
    """`[:monterey, :build]` -> `monterey build`, `"12.0"` -> `12.0`."""
    items = raw.strip().strip("[]").split(",")
    cleaned = [item.strip().strip('"').lstrip(":") for item in items]
    return " ".join(item for item in cleaned if item)


def parse_dep_types(line: str) -> Tuple[str, ...]:
    """`=> :build` 또는 `=> [:build, :test]` 에서 타입 목록 추출 (선언 순서, 중복 제거)."""
    m = patterns.DEP_TYPE.search(line)
    if not m:
        return ()
    found = [m.group(1)] if m.group(1) else patterns.SYMBOL.findall(m.group(2) or "")
    types: List[str] = []
    for dep_type in found:
        if dep_type not in types:
            types.append(dep_type)
    return tuple(types)


def condition_token(expression: str, negate: bool = False) -> str:
    """
    if/unless 조건식을 restriction 토큰으로 변환. 모르는 조건이면 빈 문자열.
    """
    clang = patterns.CLANG_VERSION.search(expression)
    if clang:
        if negate:
            return ""
        return f"clang version {clang.group(1)} {clang.group(2)}"
    for pattern, token, negated in patterns.CONDITION_TOKENS:
        if pattern.search(expression):
            return negated if negate else token
    return ""


def format_requirement(line: str) -> Optional[str]:
    """
    formula 수준 요구사항 문장을 문자열로.

    `depends_on macos: :catalina` -> `macos >= catalina (or linux)` 처럼
    키워드별 템플릿을 쓴다. 모르는 키워드면 None.
    """
    m = patterns.REQUIREMENT.match(line)
    if not m:
        return None
    symbol, symbol_args, keyword, value = m.groups()

    if symbol:
        text = symbol
        if symbol_args:
            text += " " + format_arguments(symbol_args)
    elif keyword == "macos":
        text = f"macos >= {format_arguments(value)} (or linux)"
    elif keyword == "maximum_macos":
        text = f"macos <= {format_arguments(value)} (or linux)"
    elif keyword == "xcode":
        if '"' in value:
            text = f"xcode >= {format_arguments(value)} (on macos)"
        else:
            text = f"xcode {format_arguments(value)} (on macos)"
    elif keyword == "arch":
        text = format_arguments(value)
    else:
        logger.debug("Unknown requirement keyword %r: %s", keyword, line.strip())
        return None

    return text.replace("DevelopmentTools.clang_build_version", "clang version")


def _on_system_token(arguments: str) -> str:
    m = patterns.ON_SYSTEM_MACOS.search(arguments)
    if not m:
        return " or ".join(patterns.SYMBOL.findall(arguments))
    try:
        version = format_version(m.group(1))
    except ValueError:
        logger.warning("Unrecognized on_system version %r, keeping it verbatim", m.group(1))
        version = m.group(1)
    return f"linux or macos: {version}"


def _macos_version_token(name: str, qualifier: Optional[str]) -> str:
    if qualifier == "newer":
        return f"macos: >= {name}"
    if qualifier == "older":
        return f"macos: <= {name}"
    return f"macos: {name}"


# ---- 토크나이저 ----

def tokenize_line(line: str) -> Optional[Token]:
    """의존성과 관련된 줄만 토큰으로. 나머지는 None."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if boundaries.is_block_end(line):
        return EndBlock(line)
    if patterns.ELSE.match(line):
        return ElseToken(line, chained=stripped.startswith("elsif"))
    if boundaries.is_begin_skip_region(line):
        return BeginBlock(BlockKind.SKIP, line=line)

    uses = patterns.USES_FROM_MACOS.match(line)
    if uses:
        restriction = "linux"
        since = patterns.SINCE.search(line)
        if since:
            restriction += f" or macos: < {since.group(1)}"
        return DependencyToken(uses.group(1), parse_dep_types(line), restriction)

    depends = patterns.DEPENDS_ON.match(line)
    if depends:
        condition = ""
        modifier = patterns.MODIFIER.search(line[depends.end():])
        if modifier:
            condition = condition_token(modifier.group(2), negate=modifier.group(1) == "unless")
            if not condition:
                logger.debug("Ignoring unknown dependency modifier: %s", stripped)
        return DependencyToken(depends.group(1), parse_dep_types(line), condition)

    if patterns.REQUIREMENT.match(line):
        requirement = format_requirement(line)
        return RequirementToken(requirement) if requirement else None

    on_system = patterns.ON_SYSTEM.match(line)
    if on_system:
        return BeginBlock(BlockKind.CONDITION, _on_system_token(on_system.group(1)), line)

    platform = patterns.ON_PLATFORM.match(line)
    if platform:
        return BeginBlock(BlockKind.CONDITION, platform.group(1), line)

    version = patterns.ON_MACOS_VERSION.match(line)
    if version:
        return BeginBlock(BlockKind.CONDITION, _macos_version_token(*version.groups()), line)

    conditional = patterns.CONDITIONAL.match(line)
    if conditional:
        negate = conditional.group(1) == "unless"
        token = condition_token(conditional.group(2), negate=negate)
        kind = BlockKind.CONDITION if token else BlockKind.NEUTRAL
        otherwise = condition_token(conditional.group(2), negate=not negate) if token else ""
        return BeginBlock(kind, token, line, otherwise)

    if boundaries.opens_block(line):
        return BeginBlock(BlockKind.NEUTRAL, line=line)

    return None


def tokenize(lines: Iterable[str]) -> List[Token]:
    tokens = []
    for line in lines:
        token = tokenize_line(line)
        if token is not None:
            tokens.append(token)
    return tokens


# ---- 재귀 하강 ----

def _join_restriction(parts: Sequence[str]) -> str:
    unique: List[str] = []
    for part in parts:
        if part and part not in unique:
            unique.append(part)
    parts = unique
    if len(parts) > 1:
        parts = [f"({part})" if " or " in part else part for part in parts]
    return " and ".join(parts)


class _Walker:
    def __init__(self, tokens: Sequence[Token], end_tolerance: int):
        self.tokens = tokens
        self.pos = 0
        self.end_tolerance = end_tolerance
        self.unmatched_ends = 0
        self.deps = DependencySet()
        self.requirements: List[str] = []

    def walk(self) -> Dependencies:
        while self._body((), "", skipping=False):
            # 최상위에서 만난 짝 없는 end
            self.unmatched_ends += 1
            line = self.tokens[self.pos - 1].line
            if self.unmatched_ends > self.end_tolerance:
                raise UnbalancedBlockError(line, self.end_tolerance)
            logger.debug("Tolerated unmatched end (%d/%d)", self.unmatched_ends, self.end_tolerance)
        return Dependencies(self.deps.to_tuple(), ", ".join(self.requirements))

    def _body(
        self,
        frames: Tuple[str, ...],
        own: str,
        skipping: bool,
        otherwise: str = "",
    ) -> bool:
        """EndBlock 을 만나면 True, 토큰이 끝나면 False."""
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1

            if isinstance(token, EndBlock):
                return True
            if isinstance(token, BeginBlock):
                inner = frames + (own,) if own else frames
                closed = self._body(
                    inner,
                    token.restriction,
                    skipping or token.kind is BlockKind.SKIP,
                    token.otherwise,
                )
                if not closed:
                    logger.debug("Block left open at end of sequence: %s", token.line.strip())
                    return False
                continue
            if skipping:
                continue
            if isinstance(token, ElseToken):
                # elsif 나 모르는 조건이면 else 이후는 무조건으로 본다
                own = "" if token.chained else otherwise
                otherwise = ""
            elif isinstance(token, DependencyToken):
                restriction = _join_restriction(frames + (own, token.condition))
                self.deps.add(Dependency(token.name, token.dep_types, restriction))
            elif isinstance(token, RequirementToken):
                self.requirements.append(token.text)
            else:
                raise TypeError(f"unknown token: {token!r}")
        return False


def walk_dependencies(lines: Iterable[str], end_tolerance: int = 0) -> Dependencies:
    """
    의존성 블록 줄들을 해석해서 Dependencies 반환.

    Args:
        lines: 블록 내부 줄 (바깥 블록의 시작/끝 줄은 제외)
        end_tolerance: 허용할 짝 없는 `end` 개수

    Raises:
        UnbalancedBlockError: 짝 없는 `end` 가 허용치를 넘을 때
    """
    return _Walker(tokenize(lines), end_tolerance).walk()


def clean_dependency_section(lines: Sequence[str], end_tolerance: int = 0) -> Dependencies:
    """최상위 의존성 구간 clean 함수. 구간을 끝낸 줄(`def install` 등)은 제외한다."""
    body = list(lines)
    if body and boundaries.is_end_dependency_section(body[-1]):
        body = body[:-1]
    return walk_dependencies(body, end_tolerance)
