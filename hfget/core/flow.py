# hfget/core/flow.py
"""
Wizard state machine.

  search -> selectRepo -> selectFile -> outputDir -> download -> (quit | download)

Each function takes the current WizardContext plus whatever the step
learned (user answers, catalog responses) and returns (next Step, new
context). No I/O happens here; ui.py does the asking and calls these.
"""
from __future__ import annotations
from typing import Iterable, Optional, Sequence, Tuple

from .models import DownloadReport, FileEntry, RepositorySummary, Step, WizardContext
from .utils import weight_files

Transition = Tuple[Step, WizardContext]

# what each step needs, and where to go when it is missing
_REQUIRES = {
    Step.SELECT_REPO: (("results",), Step.SEARCH),
    Step.SELECT_FILE: (("selected_repo", "weight_files"), Step.SELECT_REPO),
    Step.OUTPUT_DIR: (("selected_repo", "selected_files"), Step.SELECT_FILE),
    Step.DOWNLOAD: (("selected_repo", "selected_files", "out_dir"), Step.OUTPUT_DIR),
}


def guard(step: Step, ctx: WizardContext) -> Step:
    """
    Send a step whose inputs are absent back to the step that produces them,
    repeatedly, until a step that can run is reached. SEARCH needs nothing.
    """
    while True:
        need = _REQUIRES.get(step)
        if need is None:
            return step
        fields, fallback = need
        if all(getattr(ctx, f) for f in fields):
            return step
        step = fallback


def searched(ctx: WizardContext, query: str, results: Sequence[RepositorySummary]) -> Transition:
    ctx = ctx.evolve(query=query)
    if not results:
        return Step.SEARCH, ctx
    return Step.SELECT_REPO, ctx.evolve(results=tuple(results))


def search_failed(ctx: WizardContext) -> Transition:
    return Step.SEARCH, ctx


def repo_failed(ctx: WizardContext) -> Transition:
    """Metadata / listing failure: pick another repository, keep the results."""
    return Step.SELECT_REPO, ctx


def repo_listed(ctx: WizardContext, repo: str, files: Iterable[FileEntry]) -> Transition:
    files = tuple(files)
    weights = tuple(weight_files(files))
    if not weights:
        return Step.SELECT_REPO, ctx.evolve(selected_repo=repo)
    return Step.SELECT_FILE, ctx.evolve(
        selected_repo=repo,
        files=files,
        weight_files=weights,
        selected_files=None,
    )


def files_selected(ctx: WizardContext, selected: Sequence[str]) -> Transition:
    if not selected:
        return Step.SELECT_FILE, ctx
    return Step.OUTPUT_DIR, ctx.evolve(selected_files=tuple(selected))


def output_chosen(ctx: WizardContext, out_dir: str) -> Transition:
    out_dir = (out_dir or "").strip()
    if not out_dir:
        return Step.OUTPUT_DIR, ctx
    return Step.DOWNLOAD, ctx.evolve(out_dir=out_dir)


def target_dir_failed(ctx: WizardContext) -> Transition:
    return Step.OUTPUT_DIR, ctx


def downloaded(ctx: WizardContext, report: DownloadReport, retry: Optional[bool] = None) -> Transition:
    """retry is the user's answer to the retry prompt; None when it was not asked."""
    if report.cancelled:
        return Step.QUIT, ctx
    failed = report.failed
    if failed and retry:
        return Step.DOWNLOAD, ctx.evolve(selected_files=tuple(failed))
    return Step.QUIT, ctx
