"""
의존성 데이터 모델과 identity 기반 병합 집합.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

# 평탄화된 제한식에서 OR 보다 강하게 묶이는 구분자
_BINDING_SEPARATORS = (" and ", ", ")


@dataclass(frozen=True)
class Dependency:
    """
    formula 하나의 의존성.

    identity 는 (name, dep_types 집합)이며, 같은 identity 는 DependencySet 에서
    하나로 병합된다. restriction 이 빈 문자열이면 무조건 의존.
    """
    name: str
    dep_types: Tuple[str, ...] = ()
    restriction: str = ""

    @property
    def identity(self) -> Tuple[str, FrozenSet[str]]:
        return self.name, frozenset(self.dep_types)

    @property
    def types_joined(self) -> str:
        return ",".join(self.dep_types)


def _has_top_level_separator(expr: str) -> bool:
    """괄호 밖에 and / ', ' 가 있는지."""
    depth = 0
    for i, ch in enumerate(expr):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif depth == 0 and any(expr.startswith(sep, i) for sep in _BINDING_SEPARATORS):
            return True
    return False


def _group(expr: str) -> str:
    if _has_top_level_separator(expr):
        return f"({expr})"
    return expr


def merge_restrictions(existing: str, new: str) -> str:
    """
    같은 의존성의 두 제한식을 OR 로 합친다.

    한쪽이 무조건(빈 문자열)이면 결과도 무조건이다.

    >>> merge_restrictions("macos: >= sonoma", "linux")
    'macos: >= sonoma or linux'
    >>> merge_restrictions("macos and arm", "linux")
    '(macos and arm) or linux'
    """
    if not existing or not new:
        return ""
    if existing == new:
        return existing
    return f"{_group(existing)} or {_group(new)}"


class DependencySet:
    """
    Dependency identity 로 키가 잡힌 삽입 순서 유지 집합.

    같은 identity 가 다시 들어오면 restriction 을 OR 로 병합한다.
    """

    def __init__(self, deps: Optional[Iterable[Dependency]] = None):
        self._items: Dict[Tuple[str, FrozenSet[str]], Dependency] = {}
        for dep in deps or ():
            self.add(dep)

    def add(self, dep: Dependency) -> None:
        key = dep.identity
        current = self._items.get(key)
        if current is None:
            self._items[key] = dep
            return
        self._items[key] = Dependency(
            name=current.name,
            dep_types=current.dep_types,
            restriction=merge_restrictions(current.restriction, dep.restriction),
        )

    def update(self, deps: Iterable[Dependency]) -> None:
        for dep in deps:
            self.add(dep)

    def to_tuple(self) -> Tuple[Dependency, ...]:
        return tuple(self._items.values())

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


@dataclass(frozen=True)
class Dependencies:
    """의존성 목록과 formula 전체에 걸린 시스템 요구사항."""
    deps: Tuple[Dependency, ...] = ()
    system_requirements: str = ""

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.deps)

    def __len__(self) -> int:
        return len(self.deps)
