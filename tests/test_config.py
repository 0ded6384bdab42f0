"""Settings 로드 / 환경변수 오버라이드 / 디렉토리 검증 테스트."""
import pytest

from formula_miner.common.config import (
    CoreRepoSettings,
    ReaderSettings,
    Settings,
    load_config_file,
    load_settings,
    validate_settings,
)
from formula_miner.common.errors import ConfigError, ErrorKind


@pytest.fixture
def write_config(tmp_path):
    """tmp_path 에 config.yml 작성."""
    def _write(text: str, name: str = "config.yml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """로컬 .env / 셸 환경의 MINER_* 값이 섞이지 않도록."""
    for key in (
        "MINER_OUTPUT_DIR",
        "MINER_PACKAGE_MANAGER",
        "MINER_READER__MAX_WORKERS",
        "MINER_CORE_REPO__DIR",
    ):
        monkeypatch.delenv(key, raising=False)


class TestLoadSettings:
    """config.yml 로드."""

    def test_yaml_values(self, write_config):
        path = write_config(
            "output_dir: /tmp/out\n"
            "core_repo:\n"
            "  url: https://github.com/Homebrew/homebrew-core.git\n"
            "  branch: master\n"
            "  dir: /tmp/core\n"
            "  clone: true\n"
            "reader:\n"
            "  max_workers: 4\n"
            "  derive_repo: false\n"
        )
        settings = load_settings(path)

        assert settings.output_dir == "/tmp/out"
        assert settings.package_manager == "brew"
        assert settings.core_repo.branch == "master"
        assert settings.core_repo.clone is True
        assert settings.reader.max_workers == 4
        assert settings.reader.derive_repo is False
        assert settings.reader.fallback_license == "pseudo"
        assert settings.reader.end_tolerance == 0

    def test_empty_file_uses_defaults(self, write_config):
        settings = load_settings(write_config(""))
        assert settings.reader.max_workers == 8
        assert settings.core_repo.branch == "main"

    def test_overrides_merge_nested(self, write_config):
        path = write_config("reader:\n  max_workers: 4\n  derive_repo: false\n")
        settings = load_settings(path, reader={"max_workers": 2}, output_dir="/tmp/x")
        assert settings.reader.max_workers == 2
        assert settings.reader.derive_repo is False
        assert settings.output_dir == "/tmp/x"

    def test_env_overrides_yaml(self, write_config, monkeypatch):
        monkeypatch.setenv("MINER_READER__MAX_WORKERS", "3")
        monkeypatch.setenv("MINER_OUTPUT_DIR", "/tmp/env-out")
        settings = load_settings(write_config("output_dir: /tmp/out\nreader:\n  max_workers: 4\n"))
        assert settings.reader.max_workers == 3
        assert settings.output_dir == "/tmp/env-out"

    def test_cli_overrides_beat_env(self, write_config, monkeypatch):
        """CLI 오버라이드 > 환경변수 > YAML."""
        monkeypatch.setenv("MINER_READER__MAX_WORKERS", "16")
        monkeypatch.setenv("MINER_OUTPUT_DIR", "/tmp/env-out")
        path = write_config("reader:\n  max_workers: 4\n  derive_repo: false\n")
        settings = load_settings(path, reader={"max_workers": 1}, output_dir="/tmp/cli-out")
        assert settings.reader.max_workers == 1
        assert settings.reader.derive_repo is False
        assert settings.output_dir == "/tmp/cli-out"

    def test_invalid_override(self, write_config):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(write_config(""), reader={"max_workers": 0})
        assert exc_info.value.message == "invalid number of workers"
        assert exc_info.value.key == "reader.max_workers"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config_file(str(tmp_path / "nope.yml"))
        assert exc_info.value.kind == ErrorKind.CONFIG_INVALID

    def test_non_mapping_file(self, write_config):
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config_file(write_config("- a\n- b\n"))

    @pytest.mark.parametrize("workers", [0, -1])
    def test_invalid_workers(self, write_config, workers):
        path = write_config(f"reader:\n  max_workers: {workers}\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert exc_info.value.message == "invalid number of workers"
        assert exc_info.value.key == "reader.max_workers"

    def test_negative_end_tolerance(self, write_config):
        with pytest.raises(ConfigError):
            load_settings(write_config("reader:\n  end_tolerance: -1\n"))


class TestValidateSettings:
    """파일시스템 조건."""

    def _settings(self, output_dir, core_dir, clone=False, url="https://example.com/core.git"):
        return Settings(
            output_dir=str(output_dir) if output_dir else "",
            core_repo=CoreRepoSettings(url=url, dir=str(core_dir) if core_dir else "", clone=clone),
            reader=ReaderSettings(),
        )

    def test_creates_output_dir(self, tmp_path, mini_corpus):
        out = tmp_path / "new-out"
        validate_settings(self._settings(out, mini_corpus))
        assert out.is_dir()

    def test_empty_output_dir_setting(self, mini_corpus):
        with pytest.raises(ConfigError, match="the output directory is empty"):
            validate_settings(self._settings(None, mini_corpus))

    def test_output_dir_not_empty(self, tmp_path, mini_corpus):
        out = tmp_path / "out"
        out.mkdir()
        (out / "old.tsv").write_text("x")
        with pytest.raises(ConfigError, match="is not empty"):
            validate_settings(self._settings(out, mini_corpus))

    def test_output_dir_is_file(self, tmp_path, mini_corpus):
        out = tmp_path / "out"
        out.write_text("x")
        with pytest.raises(ConfigError, match="is not a directory") as exc_info:
            validate_settings(self._settings(out, mini_corpus))
        assert exc_info.value.key == "output_dir"

    def test_clone_target_is_file(self, tmp_path):
        core = tmp_path / "core"
        core.write_text("x")
        with pytest.raises(ConfigError, match="is not a directory"):
            validate_settings(self._settings(tmp_path / "out", core, clone=True))

    def test_empty_core_dir_setting(self, tmp_path):
        with pytest.raises(ConfigError, match="the core repository directory is empty"):
            validate_settings(self._settings(tmp_path / "out", None))

    def test_existing_corpus_must_have_content(self, tmp_path):
        core = tmp_path / "core"
        core.mkdir()
        with pytest.raises(ConfigError, match="is empty"):
            validate_settings(self._settings(tmp_path / "out", core))

    def test_existing_corpus_must_exist(self, tmp_path):
        with pytest.raises(ConfigError, match="is not a directory"):
            validate_settings(self._settings(tmp_path / "out", tmp_path / "missing"))

    def test_clone_target_is_created(self, tmp_path):
        core = tmp_path / "clone-here"
        validate_settings(self._settings(tmp_path / "out", core, clone=True))
        assert core.is_dir()

    def test_clone_target_must_be_empty(self, tmp_path, mini_corpus):
        with pytest.raises(ConfigError, match="is not empty"):
            validate_settings(self._settings(tmp_path / "out", mini_corpus, clone=True))

    def test_clone_requires_url(self, tmp_path):
        with pytest.raises(ConfigError, match="the core repository URL is empty"):
            validate_settings(self._settings(tmp_path / "out", tmp_path / "c", clone=True, url=""))

    def test_describe(self, tmp_path, mini_corpus):
        text = self._settings(tmp_path / "out", mini_corpus).describe()
        assert "workers=8" in text
        assert str(mini_corpus) in text
