#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
UI layer for hfget

- Search the Hub, pick a repository, pick weight files, pick a directory
- Sequential download with a progress line (MB, MB/s, ETA)
- Existing-file prompt (skip / overwrite / cancel all)
- Ctrl+C during downloads removes the partial file and empty directories
- Retry prompt for failed files
"""

from __future__ import annotations
import signal
from pathlib import Path
from typing import Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn
from rich.status import Status

from .core import (
    CancelToken,
    CatalogClient,
    DownloadPipeline,
    ProgressReporter,
    Settings,
    config_path,
    format_bytes,
    make_target_dir,
    quant_label,
    resolve_target_dir,
)
from .core import flow
from .core.errors import FilesystemError, HfgetError
from .core.models import DownloadReport, DownloadTask, ExistingFileAction, Step, WizardContext
from .core.progress import ProgressSnapshot
from .tui import RichChooser, header_art, navigation_hint, section

console = Console()

# ────────────────────────── Progress rendering ──────────────────────────
class RichReporter(ProgressReporter):
    def __init__(self, console_: Console):
        self.console = console_
        self._progress: Optional[Progress] = None
        self._task_id = None

    def file_started(self, index: int, total: int, task: DownloadTask) -> None:
        self.console.print(f"\n[cyan][{index}/{total}] {escape(task.destination.name)}[/]")

    def _fields(self, snap: ProgressSnapshot) -> Dict[str, object]:
        return {"downloaded": snap.position, "total_mb": snap.total, "speed": snap.speed, "eta": snap.eta}

    def progress_started(self, task: DownloadTask, snap: ProgressSnapshot) -> None:
        self._progress = Progress(
            BarColumn(complete_style="cyan"),
            TextColumn("{task.percentage:>3.0f}%"),
            TextColumn("| {task.fields[downloaded]}/{task.fields[total_mb]} MB"),
            TextColumn("| {task.fields[speed]} MB/s"),
            TextColumn("| ETA: {task.fields[eta]}"),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("dl", total=snap.total, completed=snap.position, **self._fields(snap))

    def progress(self, snap: ProgressSnapshot) -> None:
        if self._progress is not None:
            self._progress.update(self._task_id, completed=snap.position, **self._fields(snap))

    def progress_stopped(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def skipped(self, task: DownloadTask) -> None:
        self.console.print("[dim]Skipping file.[/]\n")

    def saved(self, task: DownloadTask) -> None:
        self.console.print(f"[green]✓ Saved → {escape(str(task.destination))}[/]")

    def failed(self, task: DownloadTask, error: BaseException) -> None:
        self.console.print(f"[red]✗ Download failed: {escape(task.remote_path)}[/]")
        self.console.print(f"[red]{escape(str(error))}[/]")

    def cleaned_up(self, path: Path, what: str) -> None:
        self.console.print(f"[dim]Removed {what}: {escape(str(path))}[/]")


# ────────────────────────── Wizard ──────────────────────────
class Wizard:
    def __init__(
        self,
        settings: Settings,
        catalog: CatalogClient,
        chooser=None,
        console_: Optional[Console] = None,
        pipeline_factory: Optional[Callable[..., DownloadPipeline]] = None,
    ):
        self.settings = settings
        self.catalog = catalog
        self.console = console_ or console
        self.chooser = chooser or RichChooser(self.console)
        self.pipeline_factory = pipeline_factory or DownloadPipeline
        self.ctx = WizardContext()
        self.interrupted = False
        self.steps = {
            Step.SEARCH: self.step_search,
            Step.SELECT_REPO: self.step_select_repo,
            Step.SELECT_FILE: self.step_select_file,
            Step.OUTPUT_DIR: self.step_output_dir,
            Step.DOWNLOAD: self.step_download,
        }

    def run(self, start: Step = Step.SEARCH) -> Step:
        step = start
        while step is not Step.QUIT:
            step = flow.guard(step, self.ctx)
            step = self.steps[step]()
        return step

    # ---- search ----
    def step_search(self) -> Step:
        self.console.print("\n" + navigation_hint())
        query = ""
        while not query.strip():
            query = self.chooser.ask_text("Search models on HuggingFace")
        query = query.strip()

        try:
            with Status(f"Searching for \"{escape(query)}\"...", console=self.console):
                results = self.catalog.search(query, self.settings.search_limit())
        except HfgetError as e:
            self.console.print(f"[red]Search failed.[/] {escape(str(e))}")
            step, self.ctx = flow.search_failed(self.ctx)
            return step

        self.console.print(f"[green]✓[/] Found {len(results)} models.")
        if not results:
            self.console.print("[yellow]No models found.[/]")
        step, self.ctx = flow.searched(self.ctx, query, results)
        return step

    # ---- repository ----
    def step_select_repo(self) -> Step:
        results = self.ctx.results
        self.console.print("\n" + navigation_hint())
        self.console.print(f"[dim]Found {len(results)} models[/]\n")

        needle = self.chooser.ask_text("Filter (Enter for all)", default="").strip().lower()
        shown = [(i, m) for i, m in enumerate(results, 1) if needle in m.name.lower()] or list(enumerate(results, 1))
        options = [
            (f"{escape(m.name)} [dim](likes: {m.likes})[/]", m.name)
            for _, m in shown
        ]
        repo = self.chooser.choose("Select a repository", options)
        if not repo:
            return Step.SEARCH

        try:
            with Status(f"Fetching files for {escape(repo)}...", console=self.console):
                self.catalog.fetch_metadata(repo)
                files = self.catalog.list_files(repo)
        except HfgetError as e:
            self.console.print(f"[red]Failed to fetch model info.[/] {escape(str(e))}")
            step, self.ctx = flow.repo_failed(self.ctx)
            return step

        self.console.print("[green]✓[/] Got model info.")
        step, self.ctx = flow.repo_listed(self.ctx, repo, files)
        if step is Step.SELECT_REPO:
            self.console.print("[yellow]No weight files found (.gguf, .safetensors, .bin).[/]")
        return step

    # ---- files ----
    def step_select_file(self) -> Step:
        weights = self.ctx.weight_files
        self.console.print("\n" + navigation_hint(multi=True))
        self.console.print(f"[dim]Found {len(weights)} files[/]\n")
        options = [
            (f"{escape(quant_label(f.path)):<12} {format_bytes(f.size):<10} [dim]{escape(f.path)}[/]", f.path)
            for f in weights
        ]
        selected = self.chooser.choose_many("Select files to download", options)
        if not selected:
            self.console.print("[yellow]You must select at least one file.[/]")
        step, self.ctx = flow.files_selected(self.ctx, selected)
        return step

    # ---- output dir ----
    def step_output_dir(self) -> Step:
        self.console.print("\n" + navigation_hint())
        selected = self.ctx.selected_files or ()
        if len(selected) > 1:
            self.console.print(f"[dim]Selected {len(selected)} files[/]\n")
        out_dir = self.chooser.ask_text("Download directory", default=self.settings.download_dir())
        step, self.ctx = flow.output_chosen(self.ctx, out_dir)
        return step

    # ---- download ----
    def ask_existing(self, task: DownloadTask) -> ExistingFileAction:
        size = task.destination.stat().st_size
        self.console.print(f"\n[yellow]⚠ File already exists ({format_bytes(size)})[/]")
        self.console.print(f"[dim]  {escape(str(task.destination))}[/]\n")
        action = self.chooser.choose("What would you like to do?", [
            ("Skip this file", ExistingFileAction.SKIP),
            ("Overwrite", ExistingFileAction.OVERWRITE),
            ("Cancel all downloads", ExistingFileAction.CANCEL),
        ])
        if action is None or action is ExistingFileAction.CANCEL:
            self.console.print("[yellow]Downloads cancelled by user.[/]")
            return ExistingFileAction.CANCEL
        if action is ExistingFileAction.OVERWRITE:
            self.console.print("[dim]Overwriting existing file...[/]\n")
        return action

    def step_download(self) -> Step:
        ctx = self.ctx
        strategy = self.settings.strategy()
        target = resolve_target_dir(ctx.out_dir, strategy, ctx.selected_repo)
        try:
            make_target_dir(target)
        except FilesystemError as e:
            self.console.print(f"[red]Failed to create directory: {escape(str(target))}[/]")
            self.console.print(f"[red]{escape(str(e.original_error or e))}[/]")
            step, self.ctx = flow.target_dir_failed(ctx)
            return step

        label = "Organized by owner/model" if strategy == "organized" else "Flat"
        self.console.print(f"\n[dim]Storage: {label}[/]")
        self.console.print(f"[dim]Target: {escape(str(target))}[/]\n")

        pipeline = self.pipeline_factory(on_exists=self.ask_existing, reporter=RichReporter(self.console))
        cancel = CancelToken()
        report = self._run_pipeline(pipeline, target, cancel)

        if report.cancelled:
            if cancel.cancelled:
                self.interrupted = True
                self.console.print("\n\n[yellow]Download cancelled by user.[/]")
            step, self.ctx = flow.downloaded(ctx, report)
            return step

        retry = self.show_report(report)
        step, self.ctx = flow.downloaded(ctx, report, retry)
        return step

    def _run_pipeline(self, pipeline: DownloadPipeline, target: Path, cancel: CancelToken) -> DownloadReport:
        ctx = self.ctx

        def on_sigint(signum, frame):
            # second Ctrl+C gets out of a blocking prompt
            if cancel.cancelled:
                raise KeyboardInterrupt
            cancel.cancel()

        previous = signal.signal(signal.SIGINT, on_sigint)
        try:
            return pipeline.run(
                ctx.selected_repo,
                ctx.selected_files,
                target,
                base_dir=ctx.out_dir,
                token=self.settings.resolve_token(),
                sizes=ctx.expected_size,
                cancel=cancel,
            )
        except KeyboardInterrupt:
            pipeline.abort(target, ctx.out_dir)
            report = DownloadReport(total=len(ctx.selected_files), cancelled=True)
            cancel.cancel()
            return report
        finally:
            signal.signal(signal.SIGINT, previous)

    def show_report(self, report: DownloadReport) -> Optional[bool]:
        self.console.print(f"\n[green]✓ Successfully downloaded {report.succeeded} of {report.total} files[/]")
        failed = report.failed
        if not failed:
            return None
        self.console.print(f"\n[red]✗ Failed to download {len(failed)} files:[/]")
        causes = dict(report.errors)
        for path in failed:
            self.console.print(f"[red]  - {escape(path)}[/]")
            if path in causes:
                self.console.print(f"[dim]      {escape(causes[path])}[/]")
        return self.chooser.confirm("Would you like to retry the failed downloads?", default=True)


def banner(console_: Console = console) -> None:
    console_.print(f"[yellow]{escape(header_art())}[/]")
    section(console_, "🤗 HuggingFace Model Downloader", f"Config: {escape(str(config_path()))}")
