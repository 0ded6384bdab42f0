"""
Structured Logging 설정.

환경변수:
- LOG_LEVEL: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_FORMAT: 로그 형식 (text, json)
- LOG_FILE: 로그 파일 경로 (선택)
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# LogRecord 기본 속성. 나머지는 extra 로 들어온 값이다.
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "asctime",
))


class JsonFormatter(logging.Formatter):
    """
    JSON 형식 로그 포맷터.

    한 레코드를 한 줄의 JSON 객체로 출력한다. 대량 코퍼스 실행 로그를
    나중에 jq 등으로 걸러보기 위한 용도.
    """

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 JSON 문자열로 변환."""
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
            "thread": record.threadName,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # extra 필드
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_obj[key] = value

        return json.dumps(log_obj, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """
    가독성 높은 텍스트 포맷터.

    터미널에 연결된 경우에만 레벨을 색으로 표시한다.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, datefmt: Optional[str] = None, use_color: bool = False):
        super().__init__(datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 텍스트로 변환."""
        record.asctime = self.formatTime(record, self.datefmt)

        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        formatted = f"{record.asctime} | {level} | {record.name} | {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def get_formatter(format_type: str, use_color: bool = False) -> logging.Formatter:
    """
    로그 형식에 따른 포맷터 반환.

    Args:
        format_type: 'json' 또는 'text'
        use_color: text 형식에서 ANSI 색 사용 여부

    Returns:
        해당 형식의 Formatter 인스턴스
    """
    if format_type.lower() == "json":
        return JsonFormatter()
    return TextFormatter(datefmt="%Y-%m-%d %H:%M:%S", use_color=use_color)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None
) -> None:
    """
    애플리케이션 로깅 설정.

    파라미터가 환경변수보다 우선합니다.

    Args:
        level: 로그 레벨 (기본값: INFO, 환경변수: LOG_LEVEL)
        log_file: 로그 파일 경로 (환경변수: LOG_FILE)
        log_format: 로그 형식 'text' 또는 'json' (기본값: text, 환경변수: LOG_FORMAT)
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    log_file = log_file or os.getenv("LOG_FILE")
    log_format = log_format or os.getenv("LOG_FORMAT", "text")

    handlers: list[logging.Handler] = []

    # 진행 로그는 stderr 로 보내고 stdout 은 요약 출력에 남긴다
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(get_formatter(log_format, use_color=sys.stderr.isatty()))
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # 파일은 항상 JSON
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True
    )

    logging.getLogger("yaml").setLevel(logging.WARNING)
