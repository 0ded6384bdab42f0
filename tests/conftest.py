"""
pytest 설정 및 공통 fixture.

사용법:
    # 빠른 테스트만 실행 (개발 시)
    pytest --skip-slow

    # 전체 테스트 실행
    pytest
"""
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from formula_miner.common.config import CoreRepoSettings, ReaderSettings, Settings
from formula_miner.extractors.formula import extract_from_file
from formula_miner.models.formula import SourceFormula

DATA_DIR = Path(__file__).parent / "data"
FORMULA_FIXTURES = DATA_DIR / "formulae"


def pytest_addoption(parser):
    """느린 테스트 제외 옵션 추가."""
    parser.addoption(
        "--skip-slow",
        action="store_true",
        default=False,
        help="느린 테스트(대량 코퍼스 생성) 건너뛰기"
    )


def pytest_configure(config):
    """마커 등록."""
    config.addinivalue_line(
        "markers", "slow: 큰 임시 코퍼스를 만드는 느린 테스트"
    )
    config.addinivalue_line(
        "markers", "integration: 임시 코퍼스 전체를 도는 통합 테스트"
    )
    config.addinivalue_line(
        "markers", "unit: 단위 테스트"
    )


def pytest_collection_modifyitems(config, items):
    """--skip-slow 옵션 시 slow 마커 테스트 건너뛰기."""
    if not config.getoption("--skip-slow"):
        return

    skip_slow = pytest.mark.skip(reason="--skip-slow 옵션으로 건너뜀")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


# === 공통 Fixture ===

@pytest.fixture
def fixture_path() -> Callable[[str], Path]:
    """tests/data/formulae 아래 formula 파일 경로."""
    def _path(name: str) -> Path:
        return FORMULA_FIXTURES / f"{name}.rb"
    return _path


@pytest.fixture
def load_source(fixture_path) -> Callable[[str], SourceFormula]:
    """fixture formula 를 SourceFormula 로 추출."""
    def _load(name: str) -> SourceFormula:
        return extract_from_file(fixture_path(name))
    return _load


def formula_text(
    name: str,
    deps: str = "",
    url: Optional[str] = None,
    license: str = '"MIT"',
) -> str:
    """최소한의 formula 본문."""
    class_name = "".join(part.capitalize() for part in name.replace("@", "-").split("-"))
    url = url or f"https://github.com/example/{name}/archive/refs/tags/v1.0.tar.gz"
    return (
        f"class {class_name} < Formula\n"
        f'  desc "{name} fixture"\n'
        f'  homepage "https://example.com/{name}"\n'
        f'  url "{url}"\n'
        f'  sha256 "{"0" * 64}"\n'
        f"  license {license}\n"
        "\n"
        f"{deps}"
        "\n"
        "  def install\n"
        '    system "make", "install"\n'
        "  end\n"
        "end\n"
    )


@pytest.fixture
def make_corpus(tmp_path) -> Callable[..., Path]:
    """
    임시 코퍼스 생성 factory.

    Formula/<첫 글자>/<name>.rb 와 Aliases/<alias> 레이아웃을 만든다.
    """
    def _make(formulae: Dict[str, str], aliases: Optional[Dict[str, str]] = None) -> Path:
        root = tmp_path / "core"
        for name, text in formulae.items():
            path = root / "Formula" / name[0] / f"{name}.rb"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        aliases_dir = root / "Aliases"
        aliases_dir.mkdir(parents=True, exist_ok=True)
        for alias, target in (aliases or {}).items():
            (aliases_dir / alias).write_text(formulae[target], encoding="utf-8")
        return root
    return _make


@pytest.fixture
def mini_corpus(make_corpus) -> Path:
    """의존성 대상이 모두 코퍼스 안에 있는 작은 코퍼스."""
    return make_corpus(
        {
            "pkgconf": formula_text("pkgconf"),
            "libfoo": formula_text(
                "libfoo",
                deps='  depends_on "pkgconf" => :build\n',
                license='any_of: ["MIT", "Apache-2.0"]',
            ),
            "bar": formula_text(
                "bar",
                deps=(
                    '  depends_on "pkgconf" => :build\n'
                    '  depends_on "libfoo"\n'
                    "\n"
                    "  on_linux do\n"
                    '    depends_on "pkgconf" => :build\n'
                    "  end\n"
                ),
            ),
        },
        aliases={"foo": "libfoo"},
    )


@pytest.fixture
def settings_factory(tmp_path) -> Callable[..., Settings]:
    """임시 디렉토리를 쓰는 Settings."""
    def _settings(core_dir: Path, **reader: object) -> Settings:
        return Settings(
            output_dir=str(tmp_path / "out"),
            core_repo=CoreRepoSettings(dir=str(core_dir), clone=False),
            reader=ReaderSettings(**reader),
        )
    return _settings
