"""Export driver — build, encode, and persist one merged video per request.

Job lifecycle:

    IDLE -> BUILDING -> ENCODING -> DONE
               |            |
               +-> FAILED <-+

  - BUILDING runs synchronously on the caller's thread: snapshot the
    sources, build the timeline, compile the instructions. A source that
    cannot be read fails the job here and ENCODING is never entered.
  - ENCODING runs on a background worker. When the encoder returns, the
    finished file is handed to the sink (if any). Only then does the job
    reach DONE, or FAILED with a PersistError.
  - DONE and FAILED are terminal and reported exactly once, through the
    job's future and its on_done / on_failed callback. A second terminal
    signal is logged and dropped.

Requests with no sources (EmptyInputError) or while another job is still
in flight (BusyError) are rejected before any job is created.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from fractions import Fraction
from pathlib import Path

from .compose import MoviepyEncoder
from .errors import (
    BusyError,
    ClipMergeError,
    EmptyInputError,
    EncodeError,
    PersistError,
    PersistFailure,
)
from .instructions import compile_instructions
from .settings import ExportSettings
from .sinks import Sink
from .timeline import build_timeline

logger = logging.getLogger(__name__)


class ExportState(enum.Enum):
    IDLE = "idle"
    BUILDING = "building"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = {ExportState.DONE, ExportState.FAILED}

_TRANSITIONS = {
    ExportState.IDLE: {ExportState.BUILDING},
    ExportState.BUILDING: {ExportState.ENCODING, ExportState.FAILED},
    ExportState.ENCODING: {ExportState.DONE, ExportState.FAILED},
    ExportState.DONE: set(),
    ExportState.FAILED: set(),
}


# ── Output naming ─────────────────────────────────────────────────

def human_timestamp(now: datetime) -> str:
    """Long date plus short time, e.g. 'October 18, 2026 at 3.04 PM'.

    The hour/minute separator is '.' rather than ':' so the result is a
    valid file name everywhere.
    """
    hour = now.hour % 12 or 12
    return f"{now:%B} {now.day}, {now.year} at {hour}.{now:%M} {now:%p}"


def output_filename(now: datetime, settings: ExportSettings) -> str:
    """Name for an export started at `now`.

    Unique per clock minute only: two exports started within the same
    minute get the same name.
    """
    return f"{settings.filename_prefix}-{human_timestamp(now)}.{settings.container}"


# ── Job ───────────────────────────────────────────────────────────

class ExportJob:
    """One export request. Never reused."""

    def __init__(
        self,
        output_path,
        on_done=None,
        on_failed=None,
        callback_executor=None,
    ):
        self.output_path = str(output_path)
        self.timeline = None
        self.instructions = None
        self.state = ExportState.IDLE
        self.result: str | None = None
        self.error: Exception | None = None

        self._on_done = on_done
        self._on_failed = on_failed
        self._callback_executor = callback_executor
        self._lock = threading.Lock()

        # Marked running up front: jobs cannot be cancelled.
        self.future: Future = Future()
        self.future.set_running_or_notify_cancel()

    def __repr__(self):
        return f"<ExportJob {self.output_path!r} {self.state.value}>"

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def wait(self, timeout: float | None = None) -> str:
        """Block until the job is terminal. Returns the path or raises its error."""
        return self.future.result(timeout)

    def advance(self, state: ExportState) -> None:
        """Move to a non-terminal state."""
        with self._lock:
            self._check_transition(state)
            logger.info("Job %s: %s -> %s", self.output_path, self.state.value, state.value)
            self.state = state

    def succeed(self, path: str) -> bool:
        return self._finish(ExportState.DONE, result=path)

    def fail(self, error: Exception) -> bool:
        return self._finish(ExportState.FAILED, error=error)

    def _check_transition(self, state):
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal export transition {self.state.value} -> {state.value}"
            )

    def _finish(self, state, result=None, error=None) -> bool:
        with self._lock:
            if self.is_terminal:
                logger.warning(
                    "Job %s already %s; ignoring %s signal",
                    self.output_path, self.state.value, state.value,
                )
                return False
            self._check_transition(state)
            logger.info("Job %s: %s -> %s", self.output_path, self.state.value, state.value)
            self.state = state
            self.result = result
            self.error = error

        # Inline callbacks run before the future resolves, so anyone
        # waiting on the future sees their side effects.
        if state is ExportState.DONE:
            self._dispatch(self._on_done, result)
            self.future.set_result(result)
        else:
            self._dispatch(self._on_failed, error)
            self.future.set_exception(error)
        return True

    def _dispatch(self, callback, arg):
        """Run or submit a completion callback. Never raises."""
        if callback is None:
            return
        try:
            if self._callback_executor is not None:
                self._callback_executor.submit(callback, arg)
            else:
                callback(arg)
        except Exception:
            logger.exception("Completion callback for %s raised", self.output_path)


# ── Driver ────────────────────────────────────────────────────────

class ExportDriver:
    """Runs merge exports one at a time.

    Args:
        output_dir: Directory the merged file is written to.
        settings: Encoder settings. Defaults to ExportSettings().
        encoder: Callable (instructions, output_path, settings) -> path.
            Defaults to MoviepyEncoder().
        sink: Optional object with persist(path), called with the
            finished file before the job completes.
        executor: Executor for encoding. Defaults to a private
            single-worker pool, shut down by close().
        callback_executor: Executor that on_done / on_failed run on.
            Defaults to running them inline on the worker thread.
        clock: Returns the current datetime; used for output naming.
    """

    def __init__(
        self,
        output_dir,
        settings: ExportSettings | None = None,
        encoder=None,
        sink: Sink | None = None,
        executor=None,
        callback_executor=None,
        clock=datetime.now,
    ):
        self.output_dir = Path(output_dir)
        self.settings = settings or ExportSettings()
        self._encoder = encoder or MoviepyEncoder()
        self._sink = sink
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="clipmerge-export",
        )
        self._callback_executor = callback_executor
        self._clock = clock
        self._lock = threading.Lock()
        self._job: ExportJob | None = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    @property
    def current_job(self) -> ExportJob | None:
        return self._job

    @property
    def state(self) -> ExportState:
        if self._job is None:
            return ExportState.IDLE
        return self._job.state

    def export(self, sources, on_done=None, on_failed=None, now=None) -> ExportJob:
        """Request a merged export of `sources`.

        Args:
            sources: SourceRegistry or ordered iterable of VideoSource.
                Snapshotted here; later changes do not affect the job.
            on_done: Called once with the output path on success.
            on_failed: Called once with the error on failure.
            now: Timestamp for output naming. Defaults to the clock.

        Returns:
            The ExportJob. It may already be FAILED if a source could
            not be read.

        Raises:
            EmptyInputError: No sources.
            BusyError: A previous job is still building or encoding.
        """
        sources = tuple(sources)
        if not sources:
            raise EmptyInputError("No sources to merge")

        with self._lock:
            if self._job is not None and not self._job.is_terminal:
                raise BusyError(
                    f"Export already in progress ({self._job.state.value}): "
                    f"{self._job.output_path}"
                )
            name = output_filename(now or self._clock(), self.settings)
            job = ExportJob(
                self.output_dir / name,
                on_done=on_done,
                on_failed=on_failed,
                callback_executor=self._callback_executor,
            )
            job.advance(ExportState.BUILDING)
            self._job = job

        try:
            job.timeline = build_timeline(sources)
            job.instructions = compile_instructions(
                job.timeline, frame_duration=Fraction(1, self.settings.fps),
            )
        except ClipMergeError as e:
            logger.error("Export aborted while building: %s", e)
            job.fail(e)
            return job
        except Exception as e:
            # Unexpected: still leave the job terminal so the driver is not
            # stuck busy, then let the caller see the original error.
            logger.exception("Export aborted while building")
            job.fail(e)
            raise

        job.advance(ExportState.ENCODING)
        try:
            self._executor.submit(self._encode, job)
        except RuntimeError as e:
            error = EncodeError(f"could not start encoder: {e}")
            error.__cause__ = e
            job.fail(error)
        return job

    def _encode(self, job: ExportJob) -> None:
        try:
            path = self._encoder(job.instructions, job.output_path, self.settings)
        except Exception as e:
            self._discard_partial(job.output_path)
            error = EncodeError(str(e) or type(e).__name__)
            error.__cause__ = e
            job.fail(error)
            return

        path = str(path or job.output_path)
        if self._sink is not None:
            try:
                self._sink.persist(path)
            except PersistError as e:
                job.fail(e)
                return
            except Exception as e:
                error = PersistError(PersistFailure.UNKNOWN, str(e))
                error.__cause__ = e
                job.fail(error)
                return

        job.succeed(path)

    @staticmethod
    def _discard_partial(path: str) -> None:
        p = Path(path)
        if not p.exists():
            return
        logger.warning("Removing partial output %s", p)
        try:
            p.unlink()
        except OSError as e:
            logger.warning("Could not remove partial output %s: %s", p, e)
