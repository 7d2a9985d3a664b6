from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class RepositorySummary:
    name: str            # "owner/model"
    likes: int = 0


@dataclass(frozen=True)
class FileEntry:
    path: str            # relative to the repository root
    size: Optional[int] = None


class Step(Enum):
    SEARCH = "search"
    SELECT_REPO = "selectRepo"
    SELECT_FILE = "selectFile"
    OUTPUT_DIR = "outputDir"
    DOWNLOAD = "download"
    QUIT = "quit"


@dataclass(frozen=True)
class WizardContext:
    """Selections accumulated across the wizard; every transition returns a new one."""

    query: Optional[str] = None
    results: Optional[Tuple[RepositorySummary, ...]] = None
    selected_repo: Optional[str] = None
    files: Optional[Tuple[FileEntry, ...]] = None
    weight_files: Optional[Tuple[FileEntry, ...]] = None
    selected_files: Optional[Tuple[str, ...]] = None
    out_dir: Optional[str] = None

    def evolve(self, **changes) -> "WizardContext":
        return replace(self, **changes)

    def expected_size(self, path: str) -> int:
        for f in self.weight_files or ():
            if f.path == path:
                return f.size or 0
        return 0


class ExistingFileAction(Enum):
    SKIP = "skip"
    OVERWRITE = "overwrite"
    CANCEL = "cancel"


class DownloadOutcome(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DownloadTask:
    source_repo: str
    remote_path: str
    target_dir: Path
    destination: Path
    expected_size: int = 0


@dataclass
class DownloadReport:
    total: int
    outcomes: List[Tuple[str, DownloadOutcome]] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for _, o in self.outcomes if o is not DownloadOutcome.FAILED)

    @property
    def failed(self) -> List[str]:
        return [p for p, o in self.outcomes if o is DownloadOutcome.FAILED]

    def record(self, path: str, outcome: DownloadOutcome, error: Optional[str] = None) -> None:
        self.outcomes.append((path, outcome))
        if error:
            self.errors.append((path, error))
