from __future__ import annotations

import threading


class JobController:
    """Single cancellable job token shared by scan and delete operations.

    Only one job is current at a time. Starting a job supersedes the previous
    one: cancellation checks made with a stale id always read False.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._job_id = 0
        self._cancel = False

    @property
    def current_job_id(self) -> int:
        with self._lock:
            return self._job_id

    def start_new_job(self) -> int:
        with self._lock:
            self._job_id += 1
            self._cancel = False
            return self._job_id

    def request_cancel(self) -> bool:
        """Flag the current job as cancelled.

        Returns False when no job has ever been started.
        """
        with self._lock:
            if self._job_id == 0:
                return False
            self._cancel = True
            return True

    def is_cancelled(self, job_id: int) -> bool:
        with self._lock:
            return self._job_id == job_id and self._cancel
