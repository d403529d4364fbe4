"""
Pipeline Stage - Barrier stage over the whole entry collection.

run() puts every entry on a queue, starts up to num_workers threads that
drain it through process(), and returns once the queue is empty. Each
worker mutates only the entry it took, so entries need no locks.

A fatal exception raised by process() does not cancel sibling work; it is
re-raised after the stage has drained its queue.
"""

import threading
import logging
import time
from typing import List
from queue import Queue, Empty
from abc import ABC, abstractmethod

from .pipeline_data import ThemeEntry


class PipelineStage(ABC):
    """
    Base class of the per-entry stages.

    Subclasses implement process(entry) and may narrow should_process().
    Recoverable failures belong on the entry (entry.record_error); anything
    process() raises is fatal for the run.
    """

    def __init__(self, name: str, num_workers: int = 4):
        """
        Args:
            name: Stage name, used in logs and as ErrorInfo.stage
            num_workers: Upper bound on worker threads per run
        """
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")

        self.name = name
        self.num_workers = num_workers

        self.processed_count = 0
        self.skipped_count = 0
        self.error_count = 0
        self.total_processing_time = 0.0
        self.runtime = 0.0

        self.stats_lock = threading.Lock()
        self._failures: List[BaseException] = []

        self.logger = logging.getLogger(f"{self.__class__.__name__}:{self.name}")

    @abstractmethod
    def process(self, entry: ThemeEntry) -> None:
        """Advance one entry in place."""

    def should_process(self, entry: ThemeEntry) -> bool:
        """Entries that already failed are skip-only."""
        return not entry.has_error

    def run(self, entries: List[ThemeEntry]) -> List[ThemeEntry]:
        """
        Process every entry and block until the stage is complete.

        Returns:
            The same list, entries updated in place
        """
        pending: Queue = Queue()
        for entry in entries:
            pending.put(entry)

        self._failures = []
        started = time.time()
        thread_count = max(1, min(self.num_workers, len(entries)))

        threads = [
            threading.Thread(target=self._drain, args=(pending,),
                             name=f"{self.name}-{n + 1}", daemon=True)
            for n in range(thread_count)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.runtime = time.time() - started
        self.logger.info(
            f"Stage '{self.name}' done: {self.processed_count} processed, "
            f"{self.skipped_count} skipped, {self.error_count} errors "
            f"({self.runtime:.2f}s, {thread_count} threads)"
        )

        if self._failures:
            if len(self._failures) > 1:
                self.logger.error(f"{len(self._failures)} fatal errors in stage '{self.name}', "
                                  f"raising the first")
            raise self._failures[0]
        return entries

    def _drain(self, pending: Queue):
        thread_name = threading.current_thread().name

        while True:
            try:
                entry = pending.get_nowait()
            except Empty:
                break

            if not self.should_process(entry):
                with self.stats_lock:
                    self.skipped_count += 1
                continue

            failed_before = entry.has_error
            started = time.time()
            try:
                self.process(entry)
            except Exception as e:
                self.logger.error(f"{thread_name}: fatal error on {entry.name}: {e}")
                with self.stats_lock:
                    self._failures.append(e)
                continue

            elapsed = time.time() - started
            entry.add_timing(self.name, elapsed)
            with self.stats_lock:
                self.processed_count += 1
                self.total_processing_time += elapsed
                if entry.has_error and not failed_before:
                    self.error_count += 1

            self.logger.debug(f"{thread_name}: {entry.name} took {elapsed:.3f}s")

    def get_stats(self) -> dict:
        with self.stats_lock:
            processed = self.processed_count
            return {
                'name': self.name,
                'workers': self.num_workers,
                'processed': processed,
                'skipped': self.skipped_count,
                'errors': self.error_count,
                'fatal': len(self._failures),
                'runtime_seconds': round(self.runtime, 2),
                'avg_processing_time_seconds': (
                    round(self.total_processing_time / processed, 3) if processed else 0.0
                ),
            }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name='{self.name}' workers={self.num_workers}>"
