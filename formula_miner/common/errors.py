"""
통합 에러 처리 시스템.

코퍼스 단위 실패(I/O, 필수 필드 누락)는 전파되고,
제한/라이선스 구문의 애매함은 각 추출기에서 흡수한다.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """에러 종류 분류."""

    # 설정
    CONFIG_INVALID = "config_invalid"

    # 코퍼스 입출력
    CORPUS_IO = "corpus_io"
    CORPUS_CLONE = "corpus_clone"

    # 파일 파싱
    PARSE_FAILED = "parse_failed"
    FIELD_MISSING = "field_missing"
    SEQUENCE_UNTERMINATED = "sequence_unterminated"
    INTERPOLATION_UNRESOLVED = "interpolation_unresolved"
    UNBALANCED_BLOCK = "unbalanced_block"

    # 출력
    DANGLING_DEPENDENCY = "dangling_dependency"
    OUTPUT_IO = "output_io"

    # 기타
    UNKNOWN = "unknown"


class ErrorAction(str, Enum):
    """에러 발생 시 권장 액션."""
    FIX_CONFIG = "fix_config"
    FIX_CORPUS = "fix_corpus"
    RETRY = "retry"
    ABORT = "abort"


class BaseError(Exception):
    """모든 formula miner 에러의 베이스 클래스."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        context: Optional[Dict[str, Any]] = None,
        suggested_action: ErrorAction = ErrorAction.ABORT,
    ):
        """
        Args:
            message: 에러 메시지 (사용자에게 표시 가능)
            kind: 에러 종류
            context: 추가 컨텍스트 (파일 경로 등, 로깅용)
            suggested_action: 권장 액션
        """
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.context = context or {}
        self.suggested_action = suggested_action

    def to_dict(self) -> Dict[str, Any]:
        """에러를 dict로 변환 (요약 출력용)."""
        return {
            "error": self.message,
            "kind": self.kind.value,
            "suggested_action": self.suggested_action.value,
            "context": self.context,
        }

    def log(self, level: str = "error"):
        """에러를 로깅."""
        log_func = getattr(logger, level, logger.error)
        log_func(
            f"{self.__class__.__name__}: {self.message}",
            extra={
                "kind": self.kind.value,
                "context": self.context,
            }
        )


class ConfigError(BaseError):
    """설정 값이 잘못되었거나 디렉토리 조건을 만족하지 않음."""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        context["key"] = key
        super().__init__(
            message=message,
            kind=ErrorKind.CONFIG_INVALID,
            context=context,
            suggested_action=ErrorAction.FIX_CONFIG,
            **kwargs
        )
        self.key = key


# 코퍼스 관련 에러
class CorpusError(BaseError):
    """코퍼스 디렉토리/파일을 열 수 없음."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        context["path"] = path
        kind = kwargs.pop("kind", ErrorKind.CORPUS_IO)
        super().__init__(message=message, kind=kind, context=context, **kwargs)
        self.path = path


class CloneError(CorpusError):
    """git clone 실패."""

    def __init__(self, message: str, path: Optional[str] = None, stderr: str = "", **kwargs):
        context = kwargs.pop("context", {})
        context["stderr"] = stderr
        super().__init__(
            message,
            path=path,
            kind=ErrorKind.CORPUS_CLONE,
            context=context,
            suggested_action=ErrorAction.RETRY,
            **kwargs
        )


# 파싱 관련 에러
class FormulaParseError(BaseError):
    """단일 formula 파일 추출 실패. 코퍼스 전체 읽기를 중단시킨다."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        kind: ErrorKind = ErrorKind.PARSE_FAILED,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        context["path"] = path
        super().__init__(
            message=message,
            kind=kind,
            context=context,
            suggested_action=ErrorAction.FIX_CORPUS,
            **kwargs
        )
        self.path = path

    def with_path(self, path: str) -> "FormulaParseError":
        """파일 경로를 채워 넣는다 (추출 함수는 경로를 모른다)."""
        self.path = path
        self.context["path"] = path
        return self


class MissingFieldError(FormulaParseError):
    """필수 필드가 파일 끝까지 나오지 않음."""

    def __init__(self, field: str, path: Optional[str] = None, **kwargs):
        super().__init__(
            f"no {field} found for formula",
            path=path,
            kind=ErrorKind.FIELD_MISSING,
            **kwargs
        )
        self.context["field"] = field
        self.field = field


class UnterminatedSequenceError(FormulaParseError):
    """다중 라인 구문이 열린 채로 파일이 끝남."""

    def __init__(self, field: str, path: Optional[str] = None, **kwargs):
        super().__init__(
            f"no {field} found for formula: sequence never closed",
            path=path,
            kind=ErrorKind.SEQUENCE_UNTERMINATED,
            **kwargs
        )
        self.context["field"] = field
        self.field = field


class InterpolationError(FormulaParseError):
    """URL 안의 #{var} 를 해석할 수 없음."""

    def __init__(self, variable: str, url: str, path: Optional[str] = None, **kwargs):
        super().__init__(
            "could not resolve interpolation in URL",
            path=path,
            kind=ErrorKind.INTERPOLATION_UNRESOLVED,
            **kwargs
        )
        self.context.update({"variable": variable, "url": url})
        self.variable = variable


class UnbalancedBlockError(FormulaParseError):
    """허용치를 넘는 짝 없는 `end`."""

    def __init__(self, line: str, tolerance: int, path: Optional[str] = None, **kwargs):
        super().__init__(
            "unbalanced end in dependency block",
            path=path,
            kind=ErrorKind.UNBALANCED_BLOCK,
            **kwargs
        )
        self.context.update({"line": line, "tolerance": tolerance})


# 출력 관련 에러
class DanglingDependencyError(BaseError):
    """의존성이 가리키는 formula 가 코퍼스 맵에 없음 (인덱싱 불변식 위반)."""

    def __init__(self, formula: str, dependency: str, **kwargs):
        super().__init__(
            f"dependency {dependency!r} of {formula!r} not found in formulae",
            kind=ErrorKind.DANGLING_DEPENDENCY,
            context={"formula": formula, "dependency": dependency},
            suggested_action=ErrorAction.FIX_CORPUS,
            **kwargs
        )
        self.formula = formula
        self.dependency = dependency
