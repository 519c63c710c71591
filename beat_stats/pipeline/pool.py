"""Fixed-size thread pool draining a shared queue of map folders.

All folders are enqueued up front. Each worker pops one folder at a time and
processes it. Results go into a shared append-only collection. The first
failure stops the other workers from taking new folders and is re-raised
once every worker has returned.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from beat_stats.schemas.normalized import BeatmapRecord

logger = logging.getLogger(__name__)

FolderProcessor = Callable[[Path], BeatmapRecord]


class WorkQueue:
    """FIFO of pending folders guarded by a lock."""

    def __init__(self, folders: Iterable[Path]):
        self._items: deque[Path] = deque(folders)
        self._lock = threading.Lock()

    def pop(self) -> Path | None:
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class ResultCollector:
    """Append-only list of records shared by all workers."""

    def __init__(self, on_append: Callable[[], None] | None = None):
        self._records: list[BeatmapRecord] = []
        self._lock = threading.Lock()
        self._on_append = on_append

    def append(self, record: BeatmapRecord) -> None:
        with self._lock:
            self._records.append(record)
            if self._on_append is not None:
                self._on_append()

    def snapshot(self) -> list[BeatmapRecord]:
        with self._lock:
            return list(self._records)


class StopSignal:
    """Set by the first failing worker, keeping that worker's exception."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.error: Exception | None = None

    def fail(self, exc: Exception) -> None:
        with self._lock:
            if self.error is None:
                self.error = exc
            self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()


def resolve_thread_count(threads: int) -> int:
    """0 (or less) means one worker per available CPU."""
    if threads > 0:
        return threads
    return os.cpu_count() or 1


class WorkerPool:
    """Run a folder processor over many folders on a fixed set of threads."""

    def __init__(self, process: FolderProcessor, threads: int = 0, show_progress: bool = False):
        self.process = process
        self.threads = resolve_thread_count(threads)
        self.show_progress = show_progress

    def _worker(self, queue: WorkQueue, results: ResultCollector, stop: StopSignal) -> int:
        processed = 0
        while not stop.is_set():
            folder = queue.pop()
            if folder is None:
                break
            try:
                results.append(self.process(folder))
            except Exception as exc:
                stop.fail(exc)
                break
            processed += 1
        return processed

    def run(self, folders: Iterable[Path]) -> list[BeatmapRecord]:
        """Process every folder and return the records in completion order.

        The earliest worker failure is re-raised once all workers have stopped;
        no partial result is returned in that case.
        """
        queue = WorkQueue(folders)
        total = len(queue)
        logger.debug("Using threads=%d for %d folders", self.threads, total)

        pbar = None
        if self.show_progress:
            from tqdm import tqdm

            pbar = tqdm(total=total, desc="Processing maps", unit="map")

        results = ResultCollector(on_append=pbar.update if pbar is not None else None)
        stop = StopSignal()
        try:
            with ThreadPoolExecutor(
                max_workers=self.threads, thread_name_prefix="beat-stats"
            ) as executor:
                futures = [
                    executor.submit(self._worker, queue, results, stop)
                    for _ in range(self.threads)
                ]
            # Leaving the with-block joins every worker.
            for future in futures:
                future.result()
            if stop.error is not None:
                raise stop.error
        finally:
            if pbar is not None:
                pbar.close()

        records = results.snapshot()
        logger.info("Processed %d custom levels", len(records))
        return records
