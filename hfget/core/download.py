# hfget/core/download.py
from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import requests

from .errors import FilesystemError, HfgetError, TransportError, UserCancelled
from .http import HF_HOST, open_stream, resolve_url
from .models import DownloadOutcome, DownloadReport, DownloadTask, ExistingFileAction
from .paths import prune_empty_dirs
from .progress import ProgressSnapshot, snapshot

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

ExistingFileCB = Callable[[DownloadTask], ExistingFileAction]


class CancelToken:
    """Set from a signal handler; polled by the loop and between chunks."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise UserCancelled("Download cancelled by user.")


class ProgressReporter:
    """No-op reporter. The UI subclasses this to draw a progress bar."""

    def file_started(self, index: int, total: int, task: DownloadTask) -> None:
        pass

    def progress_started(self, task: DownloadTask, snap: ProgressSnapshot) -> None:
        pass

    def progress(self, snap: ProgressSnapshot) -> None:
        pass

    def progress_stopped(self) -> None:
        pass

    def skipped(self, task: DownloadTask) -> None:
        pass

    def saved(self, task: DownloadTask) -> None:
        pass

    def failed(self, task: DownloadTask, error: BaseException) -> None:
        pass

    def cleaned_up(self, path: Path, what: str) -> None:
        pass


def _unlink_quietly(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.debug("Could not remove %s: %s", path, e)
        return False
    return True


def stream_to_file(
    url: str,
    dest: Path,
    token: Optional[str] = None,
    expected_size: int = 0,
    cancel: Optional[CancelToken] = None,
    reporter: Optional[ProgressReporter] = None,
    task: Optional[DownloadTask] = None,
    session: Optional[requests.Session] = None,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Write the response body to dest chunk by chunk. Returns bytes written.
    Raises TransportError / FilesystemError / UserCancelled; the partial
    file is left for the caller to clean up.
    """
    reporter = reporter or ProgressReporter()
    started = clock()
    downloaded = 0
    shown = False

    first = snapshot(0, expected_size, 0.0)
    if first is not None and task is not None:
        reporter.progress_started(task, first)
        shown = True

    try:
        with open_stream(url, token, session=session) as r:
            try:
                f = open(dest, "wb")
            except OSError as e:
                raise FilesystemError(f"Cannot write {dest}", e) from e
            with f:
                try:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if cancel is not None:
                            cancel.raise_if_cancelled()
                        if not chunk:
                            continue
                        try:
                            f.write(chunk)
                        except OSError as e:
                            raise FilesystemError(f"Write failed for {dest}", e) from e
                        downloaded += len(chunk)
                        if shown:
                            snap = snapshot(downloaded, expected_size, clock() - started)
                            if snap is not None:
                                reporter.progress(snap)
                except requests.RequestException as e:
                    raise TransportError(f"Connection lost while downloading {url}", e) from e
    finally:
        if shown:
            reporter.progress_stopped()

    logger.debug("Download finished: %s (%d bytes)", dest, downloaded)
    return downloaded


class DownloadPipeline:
    """
    Sequential download of the selected files into one target directory.

    on_exists decides what to do with a destination that is already on disk;
    cancel is checked before each file and between chunks.
    """

    def __init__(
        self,
        on_exists: ExistingFileCB,
        reporter: Optional[ProgressReporter] = None,
        session: Optional[requests.Session] = None,
        host: str = HF_HOST,
    ):
        self.on_exists = on_exists
        self.reporter = reporter or ProgressReporter()
        self.session = session
        self.host = host
        self.current_target: Optional[Path] = None

    def build_tasks(
        self,
        repo: str,
        paths: Sequence[str],
        target_dir: Path,
        sizes: Callable[[str], int],
    ) -> List[DownloadTask]:
        return [
            DownloadTask(
                source_repo=repo,
                remote_path=p,
                target_dir=target_dir,
                destination=target_dir / Path(p).name,
                expected_size=sizes(p),
            )
            for p in paths
        ]

    def run(
        self,
        repo: str,
        paths: Sequence[str],
        target_dir: Union[str, Path],
        base_dir: Union[str, Path],
        token: Optional[str] = None,
        sizes: Callable[[str], int] = lambda _p: 0,
        cancel: Optional[CancelToken] = None,
    ) -> DownloadReport:
        target_dir = Path(target_dir)
        cancel = cancel or CancelToken()
        tasks = self.build_tasks(repo, paths, target_dir, sizes)
        report = DownloadReport(total=len(tasks))

        for i, task in enumerate(tasks, 1):
            if cancel.cancelled:
                self.abort(target_dir, base_dir)
                break
            self.reporter.file_started(i, len(tasks), task)
            try:
                outcome = self._run_one(task, token, cancel)
            except UserCancelled:
                self.abort(target_dir, base_dir)
                report.cancelled = True
                break
            except HfgetError as e:
                logger.debug("Download failed: %s: %s", task.remote_path, e)
                self.reporter.failed(task, e)
                if self.current_target is not None:
                    _unlink_quietly(self.current_target)
                report.record(task.remote_path, DownloadOutcome.FAILED, str(e))
            else:
                if outcome is None:
                    # cancel-all on the existing-file prompt
                    report.cancelled = True
                    break
                report.record(task.remote_path, outcome)
            self.current_target = None

        if cancel.cancelled:
            report.cancelled = True
        return report

    def _run_one(self, task: DownloadTask, token: Optional[str], cancel: CancelToken) -> Optional[DownloadOutcome]:
        dest = task.destination
        if dest.exists():
            action = self.on_exists(task)
            if action is ExistingFileAction.CANCEL:
                return None
            if action is ExistingFileAction.SKIP:
                self.reporter.skipped(task)
                return DownloadOutcome.SKIPPED
            try:
                dest.unlink()
            except OSError as e:
                raise FilesystemError(f"Failed to delete existing file {dest}", e) from e

        cancel.raise_if_cancelled()
        self.current_target = dest
        url = resolve_url(task.source_repo, task.remote_path, self.host)
        logger.debug("Downloading %s -> %s", url, dest)
        stream_to_file(
            url, dest, token,
            expected_size=task.expected_size,
            cancel=cancel,
            reporter=self.reporter,
            task=task,
            session=self.session,
        )
        self.reporter.saved(task)
        return DownloadOutcome.SUCCESS

    def abort(self, target_dir: Path, base_dir: Union[str, Path]) -> List[Path]:
        """
        Interrupt cleanup: drop the partial file of the transfer in flight,
        then any directories left empty. Safe to call more than once.
        """
        removed: List[Path] = []
        target = self.current_target
        self.current_target = None
        if target is not None and target.exists() and _unlink_quietly(target):
            removed.append(target)
            self.reporter.cleaned_up(target, "partial file")
        for d in prune_empty_dirs(target_dir, base_dir):
            removed.append(d)
            self.reporter.cleaned_up(d, "empty directory")
        return removed
