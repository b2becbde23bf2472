"""Persistence gateway - loads and saves the whole document."""

import logging
import queue
import threading
from concurrent.futures import Future

from .core.models import Document
from .ports.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the document could not be read from or written to storage."""

    pass


class PersistenceGateway:
    """
    Reads and writes the document through a SettingsStore.

    Saves are queued to a single worker thread and run in submission order,
    so a slow write can never be overtaken by a newer one. Each save works on
    a snapshot taken when it was queued.
    """

    def __init__(self, backend: SettingsStore):
        self.backend = backend
        self._queue: queue.Queue[tuple[dict, Future] | None] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._failures: list[PersistenceError] = []
        self._failures_lock = threading.Lock()

    def load(self) -> Document:
        """Load the saved document, or a default one if nothing was saved."""
        try:
            data = self.backend.load()
        except Exception as e:
            raise PersistenceError(f"Failed to load document: {e}") from e
        if data is None:
            logger.info("No saved document, starting empty")
            return Document()
        try:
            return Document.from_dict(data)
        except Exception as e:
            raise PersistenceError(f"Saved document is malformed: {e}") from e

    def save(self, document: Document) -> Future:
        """Queue a write of the document. Returns immediately."""
        future: Future = Future()
        self._ensure_worker()
        self._queue.put((document.to_dict(), future))
        return future

    def flush(self) -> None:
        """
        Wait until every queued write has settled.

        Raises PersistenceError if any write failed since the last flush.
        """
        if self._worker is not None:
            self._queue.join()
        with self._failures_lock:
            failures, self._failures = self._failures, []
        if failures:
            if len(failures) == 1:
                raise failures[0]
            raise PersistenceError(f"{len(failures)} saves failed; last error: {failures[-1]}") from failures[-1]

    def close(self) -> None:
        """Stop the writer after pending writes finish."""
        if self._worker is None:
            return
        self._queue.put(None)
        self._worker.join()
        self._worker = None

    def _ensure_worker(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        self._worker = threading.Thread(target=self._run, name="taskblocks-writer", daemon=True)
        self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                data, future = item
                try:
                    self.backend.save(data)
                except Exception as e:
                    error = PersistenceError(f"Failed to save document: {e}")
                    error.__cause__ = e
                    logger.warning(str(error))
                    with self._failures_lock:
                        self._failures.append(error)
                    future.set_exception(error)
                else:
                    logger.debug(f"Saved document ({len(data.get('categories', []))} categories)")
                    future.set_result(None)
            finally:
                self._queue.task_done()
