"""Formula 데이터 모델."""
from formula_miner.models.dependency import (
    Dependency,
    Dependencies,
    DependencySet,
    merge_restrictions,
)
from formula_miner.models.formula import (
    Formula,
    Head,
    SourceFormula,
    Stable,
)

__all__ = [
    "Dependency",
    "Dependencies",
    "DependencySet",
    "merge_restrictions",
    "Formula",
    "Head",
    "SourceFormula",
    "Stable",
]
