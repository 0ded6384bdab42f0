"""
에러 클래스 테스트.

Tests:
1. 각 에러 클래스의 kind / suggested_action / context
2. to_dict() 형식
3. log() 동작
"""
import logging

from formula_miner.common.errors import (
    BaseError,
    CloneError,
    ConfigError,
    CorpusError,
    DanglingDependencyError,
    ErrorAction,
    ErrorKind,
    FormulaParseError,
    InterpolationError,
    MissingFieldError,
    UnbalancedBlockError,
    UnterminatedSequenceError,
)


class TestBaseError:
    """BaseError 기본 기능."""

    def test_defaults(self):
        error = BaseError("boom")
        assert error.kind == ErrorKind.UNKNOWN
        assert error.suggested_action == ErrorAction.ABORT
        assert error.context == {}
        assert str(error) == "boom"

    def test_to_dict(self):
        error = BaseError("boom", kind=ErrorKind.OUTPUT_IO, context={"path": "/tmp/x"})
        assert error.to_dict() == {
            "error": "boom",
            "kind": "output_io",
            "suggested_action": "abort",
            "context": {"path": "/tmp/x"},
        }

    def test_log(self, caplog):
        with caplog.at_level(logging.ERROR, logger="formula_miner.common.errors"):
            CorpusError("cannot read", path="/tmp/x").log()
        assert "CorpusError: cannot read" in caplog.text

    def test_log_level(self, caplog):
        with caplog.at_level(logging.WARNING, logger="formula_miner.common.errors"):
            BaseError("soft").log(level="warning")
        assert caplog.records[0].levelno == logging.WARNING


class TestConfigAndCorpusErrors:
    """설정 / 코퍼스 에러."""

    def test_config_error(self):
        error = ConfigError("invalid number of workers", key="reader.max_workers")
        assert error.kind == ErrorKind.CONFIG_INVALID
        assert error.suggested_action == ErrorAction.FIX_CONFIG
        assert error.context["key"] == "reader.max_workers"

    def test_clone_error(self):
        error = CloneError("failed", path="/tmp/core", stderr="fatal: not found")
        assert isinstance(error, CorpusError)
        assert error.kind == ErrorKind.CORPUS_CLONE
        assert error.suggested_action == ErrorAction.RETRY
        assert error.context == {"stderr": "fatal: not found", "path": "/tmp/core"}


class TestParseErrors:
    """formula 추출 에러."""

    def test_missing_field(self):
        error = MissingFieldError("license")
        assert isinstance(error, FormulaParseError)
        assert error.message == "no license found for formula"
        assert error.kind == ErrorKind.FIELD_MISSING
        assert error.suggested_action == ErrorAction.FIX_CORPUS

    def test_with_path(self):
        error = MissingFieldError("url").with_path("Formula/a/a.rb")
        assert error.path == "Formula/a/a.rb"
        assert error.context["path"] == "Formula/a/a.rb"
        assert error.context["field"] == "url"

    def test_unterminated(self):
        error = UnterminatedSequenceError("url")
        assert error.kind == ErrorKind.SEQUENCE_UNTERMINATED
        assert error.field == "url"

    def test_interpolation(self):
        error = InterpolationError("VERSION", "https://x/#{VERSION}")
        assert error.message == "could not resolve interpolation in URL"
        assert error.context["variable"] == "VERSION"

    def test_unbalanced(self):
        error = UnbalancedBlockError("  end", 0)
        assert error.kind == ErrorKind.UNBALANCED_BLOCK
        assert error.context["line"] == "  end"


def test_dangling_dependency():
    """인덱싱 불변식 위반."""
    error = DanglingDependencyError("bar", "missing")
    assert error.kind == ErrorKind.DANGLING_DEPENDENCY
    assert error.context == {"formula": "bar", "dependency": "missing"}
    assert "missing" in error.message
