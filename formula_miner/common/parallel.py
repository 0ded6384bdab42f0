"""Fail-fast parallel execution based on concurrent.futures."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, List, Optional, TypeVar
import logging
import threading

logger = logging.getLogger(__name__)

T = TypeVar("T")
DEFAULT_MAX_WORKERS = 8


def run_fail_fast(
    items: Iterable[T],
    func: Callable[[T], None],
    max_workers: int = DEFAULT_MAX_WORKERS,
    thread_name_prefix: str = "worker",
) -> int:
    """
    items 각각에 func 를 병렬로 적용하고, 첫 에러가 나면 나머지 작업을 취소한다.

    실행 중인 작업은 끝까지 진행되고, 아직 시작하지 않은 작업은
    취소 플래그를 확인한 뒤 건너뛴다. 모든 워커가 끝난 다음에
    가장 먼저 발생한 에러를 다시 던진다.

    Args:
        items: 작업 입력 목록
        func: 입력 하나를 처리하는 함수 (결과는 func 가 직접 저장)
        max_workers: 동시에 실행할 워커 수
        thread_name_prefix: 워커 스레드 이름 접두사

    Returns:
        실제로 처리된 항목 수

    Raises:
        첫 번째로 실패한 작업의 예외
    """
    cancelled = threading.Event()
    lock = threading.Lock()
    first_error: List[Optional[BaseException]] = [None]
    processed = [0]

    def _run(item: T) -> None:
        if cancelled.is_set():
            return
        try:
            func(item)
        except Exception as exc:
            with lock:
                if first_error[0] is None:
                    first_error[0] = exc
            cancelled.set()
            raise
        with lock:
            processed[0] += 1

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix) as executor:
        futures = [executor.submit(_run, item) for item in items]

        for future in as_completed(futures):
            exc = future.exception()
            if exc is not None and exc is not first_error[0]:
                logger.debug("Parallel task failed after cancellation: %s", exc)

    if first_error[0] is not None:
        logger.warning(
            "Parallel run aborted after %d of %d tasks: %s",
            processed[0], len(futures), first_error[0],
        )
        raise first_error[0]

    return processed[0]
