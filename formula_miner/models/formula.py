"""
Formula 데이터 모델.

SourceFormula 는 파일 하나에서 뽑아낸 원시 값이고, Formula 는 라이선스
정규화와 repo URL 해석을 거친 출력용 값이다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from formula_miner.extractors.license import normalize_license
from formula_miner.extractors.repository import resolve_repo_url
from formula_miner.models.dependency import Dependencies, DependencySet


@dataclass(frozen=True)
class Stable:
    """릴리스 아카이브 URL 과 stable 블록 안에 선언된 의존성."""
    url: str
    mirror: Optional[str] = None
    dependencies: Optional[Dependencies] = None


@dataclass(frozen=True)
class Head:
    """VCS URL 과 head 블록 안에 선언된 의존성."""
    url: str
    dependencies: Optional[Dependencies] = None


@dataclass(frozen=True)
class SourceFormula:
    """파일 하나의 추출 결과 (불변)."""
    name: str
    stable: Stable
    homepage: Optional[str] = None
    mirror: Optional[str] = None
    license: Optional[str] = None
    dependencies: Optional[Dependencies] = None
    head: Optional[Head] = None

    @property
    def effective_mirror(self) -> Optional[str]:
        return self.mirror or self.stable.mirror


@dataclass(frozen=True)
class Formula:
    """출력 가능한 formula."""
    name: str
    license: str
    repo_url: str
    archive_url: str
    system_requirement: str
    dependencies: Dependencies

    @classmethod
    def from_source(
        cls,
        source: SourceFormula,
        fallback_license: str = "pseudo",
        derive_repo: bool = True,
    ) -> "Formula":
        """
        SourceFormula 를 Formula 로 변환.

        Args:
            source: 파일 추출 결과
            fallback_license: license 가 없을 때 쓸 값
            derive_repo: False 이면 head URL 만 repo URL 로 인정

        Returns:
            top-level, stable, head 의존성을 병합한 Formula
        """
        merged = DependencySet()
        requirements = []
        for deps in (
            source.dependencies,
            source.stable.dependencies,
            source.head.dependencies if source.head else None,
        ):
            if deps is None:
                continue
            merged.update(deps)
            if deps.system_requirements:
                requirements.append(deps.system_requirements)

        head_url = source.head.url if source.head else None
        if derive_repo:
            repo_url = resolve_repo_url(
                head=head_url,
                homepage=source.homepage,
                stable=source.stable.url,
                mirror=source.effective_mirror,
            )
        else:
            repo_url = head_url or ""

        system_requirement = ", ".join(requirements)
        return cls(
            name=source.name,
            license=normalize_license(source.license or "", fallback=fallback_license),
            repo_url=repo_url,
            archive_url=source.stable.url,
            system_requirement=system_requirement,
            dependencies=Dependencies(merged.to_tuple(), system_requirement),
        )
