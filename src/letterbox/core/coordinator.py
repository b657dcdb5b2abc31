"""Bounded-concurrency batch coordinator.

Items are admitted in input order through an :class:`AdmissionGate` that lets
at most ``ceiling`` transforms run at the same time. The first failure closes
the gate so no further items start, while items already running are allowed to
finish. A cancel event stops admissions the same way. In every case the
coordinator waits for running items before it returns or raises.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .error_handling import BatchOperationContextManager
from .exceptions import CancellationError, ConfigurationError, ItemProcessingError
from .models import BatchReport, ItemResult, ItemStatus
from .observability import LogContext, MetricsCollector, PerformanceMetrics, StructuredLogger
from .protocols import LoggerProtocol, Transform

DEFAULT_POLL_INTERVAL = 0.05


def _validate_ceiling(ceiling: int) -> None:
    if isinstance(ceiling, bool) or not isinstance(ceiling, int) or ceiling < 1:
        raise ConfigurationError(f"concurrency ceiling must be an integer >= 1, got {ceiling!r}")


class AdmissionGate:
    """Counting gate that admits at most ``ceiling`` holders at once.

    A blocked :meth:`acquire` wakes up on :meth:`release`, on :meth:`close`
    and, within ``poll_interval`` seconds, when its cancel event is set.
    Waiters are served by a single dispatcher thread, so admission follows
    the dispatcher's order.
    """

    def __init__(self, ceiling: int, poll_interval: float = DEFAULT_POLL_INTERVAL):
        _validate_ceiling(ceiling)
        self._ceiling = ceiling
        self._poll_interval = poll_interval
        self._in_flight = 0
        self._peak = 0
        self._closed = False
        self._cond = threading.Condition()

    @property
    def ceiling(self) -> int:
        return self._ceiling

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        with self._cond:
            return self._peak

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def acquire(self, cancel_event: Optional[threading.Event] = None) -> bool:
        """Wait for a vacancy. Returns False if closed or cancelled first."""
        with self._cond:
            while True:
                if self._closed:
                    return False
                if cancel_event is not None and cancel_event.is_set():
                    return False
                if self._in_flight < self._ceiling:
                    self._in_flight += 1
                    self._peak = max(self._peak, self._in_flight)
                    return True
                self._cond.wait(self._poll_interval)

    def release(self) -> None:
        with self._cond:
            if self._in_flight <= 0:
                raise RuntimeError("release() called more times than acquire()")
            self._in_flight -= 1
            self._cond.notify_all()

    def close(self) -> None:
        """Refuse all further admissions."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def drain(self) -> None:
        """Block until every admitted holder has released."""
        with self._cond:
            while self._in_flight > 0:
                self._cond.wait()


@dataclass
class _RunState:
    batch: BatchOperationContextManager
    lock: threading.Lock = field(default_factory=threading.Lock)
    results: Dict[int, ItemResult] = field(default_factory=dict)
    first_error: Optional[ItemProcessingError] = None


class BatchCoordinator:
    """Run a transform over a list of items under a concurrency ceiling."""

    def __init__(
        self,
        ceiling: int,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        _validate_ceiling(ceiling)
        self._ceiling = ceiling
        self._logger = logger or StructuredLogger("letterbox.coordinator")
        self._metrics_collector = metrics_collector
        self._poll_interval = poll_interval
        self.last_gate: Optional[AdmissionGate] = None

    @property
    def ceiling(self) -> int:
        return self._ceiling

    def run(
        self,
        items: Iterable[str],
        transform: Transform,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchReport:
        """
        Run ``transform`` once for every item.

        Args:
            items: Item identifiers; duplicates run as separate units
            transform: Callable invoked from worker threads; raises on failure
            cancel_event: Optional event that stops further admissions

        Returns:
            BatchReport listing processed and skipped items

        Raises:
            ItemProcessingError: The first failure, once running items drained
            CancellationError: The cancel event kept items from starting
            BaseException: Anything else a transform raised, unwrapped
        """
        items = list(items)
        start_time = time.time()

        if not items:
            self._logger.info("No items to process")
            return BatchReport()

        gate = AdmissionGate(self._ceiling, self._poll_interval)
        self.last_gate = gate
        admitted = 0

        with BatchOperationContextManager(
            f"Letterbox batch of {len(items)} item(s)", self._logger
        ) as batch:
            state = _RunState(batch=batch)
            futures: List[Future] = []
            workers = min(self._ceiling, len(items))

            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="letterbox-worker"
            ) as executor:
                for index, item in enumerate(items):
                    if not gate.acquire(cancel_event):
                        break
                    try:
                        futures.append(
                            executor.submit(
                                self._execute, index, item, transform, gate, state
                            )
                        )
                    except BaseException:
                        gate.release()
                        raise
                    admitted += 1
                gate.drain()

                # re-raises anything a worker could not record as an item failure
                for future in futures:
                    future.result()

            if state.first_error is not None:
                raise state.first_error

            if admitted < len(items):
                pending = len(items) - admitted
                raise CancellationError(
                    f"Batch cancelled with {pending} item(s) not started",
                    pending=pending,
                )

        report = BatchReport(total_items=len(items), processing_time=time.time() - start_time)
        for index in sorted(state.results):
            result = state.results[index]
            if result.status is ItemStatus.SKIPPED:
                report.skipped.append(result.item_id)
            else:
                report.processed.append(result.item_id)
        return report

    def _execute(
        self,
        index: int,
        item: str,
        transform: Transform,
        gate: AdmissionGate,
        state: _RunState,
    ) -> None:
        start_time = time.time()
        status: Optional[ItemStatus] = None
        error: Optional[ItemProcessingError] = None

        try:
            try:
                outcome = transform(item)
                status = outcome if isinstance(outcome, ItemStatus) else ItemStatus.PROCESSED
            except ItemProcessingError as exc:
                if exc.item_id is None:
                    exc.item_id = item
                error = exc
            except Exception as exc:  # noqa: BLE001
                error = ItemProcessingError(
                    f"{type(exc).__name__}: {exc}", item_id=item, cause=exc
                )
                error.__cause__ = exc

            end_time = time.time()
            self._record(index, item, status, error, start_time, end_time, gate, state)
        except BaseException:
            gate.close()
            raise
        finally:
            gate.release()

    def _record(
        self,
        index: int,
        item: str,
        status: Optional[ItemStatus],
        error: Optional[ItemProcessingError],
        start_time: float,
        end_time: float,
        gate: AdmissionGate,
        state: _RunState,
    ) -> None:
        result = ItemResult(
            item_id=item,
            status=status,
            success=error is None,
            error="" if error is None else str(error),
            processing_time=end_time - start_time,
        )

        if self._metrics_collector is not None:
            self._metrics_collector.record_metric(
                PerformanceMetrics(
                    operation="transform",
                    start_time=start_time,
                    end_time=end_time,
                    success=error is None,
                    error_message=None if error is None else str(error),
                    metadata={"item_id": item, "status": status.value if status else None},
                )
            )

        with state.lock:
            state.results[index] = result
            state.batch.add_result(result)
            if error is not None and state.first_error is None:
                state.first_error = error
                gate.close()
                return

        if error is not None:
            # only the first failure is reported to the caller
            log_context = LogContext(operation="transform").with_metadata(item=item)
            self._logger.warning(f"Discarding later failure: {error}", log_context)


def run_batch(
    items: Iterable[str],
    ceiling: int,
    transform: Transform,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[LoggerProtocol] = None,
    metrics_collector: Optional[MetricsCollector] = None,
) -> BatchReport:
    """Run ``transform`` over ``items`` with at most ``ceiling`` in flight."""
    coordinator = BatchCoordinator(ceiling, logger=logger, metrics_collector=metrics_collector)
    return coordinator.run(items, transform, cancel_event)
