import requests
import pytest

from hfget.core.download import CancelToken, DownloadPipeline, ProgressReporter, stream_to_file
from hfget.core.errors import TransportError, UserCancelled
from hfget.core.models import DownloadOutcome, ExistingFileAction
from hfget.core.progress import MB
from tests.conftest import fake_response, fake_session


class RecordingReporter(ProgressReporter):
    def __init__(self):
        self.events = []

    def progress_started(self, task, snap):
        self.events.append(("start", snap))

    def progress(self, snap):
        self.events.append(("progress", snap))

    def progress_stopped(self):
        self.events.append(("stop", None))

    def cleaned_up(self, path, what):
        self.events.append(("cleaned", what))


def never_asked(task):
    raise AssertionError(f"unexpected existing-file prompt for {task.destination}")


class TestStreamToFile:

    def test_writes_chunks_in_order(self, tmp_path):
        dest = tmp_path / "f.gguf"
        session = fake_session(fake_response(200, [b"ab", b"", b"cd"]))
        assert stream_to_file("https://h/f", dest, session=session) == 4
        assert dest.read_bytes() == b"abcd"

    def test_progress_only_with_known_size(self, tmp_path):
        reporter = RecordingReporter()
        session = fake_session(fake_response(200, [b"x" * 10]))
        stream_to_file("https://h/f", tmp_path / "f", session=session, reporter=reporter)
        assert reporter.events == []

    def test_progress_snapshots(self, tmp_path):
        from hfget.core.models import DownloadTask

        reporter = RecordingReporter()
        ticks = iter([0.0, 1.0, 3.0])
        chunk = b"x" * (3 * MB)
        session = fake_session(fake_response(200, [chunk, chunk]))
        dest = tmp_path / "f"
        task = DownloadTask("org/m", "f", tmp_path, dest, 12 * MB)
        stream_to_file(
            "https://h/f", dest, session=session, reporter=reporter,
            expected_size=12 * MB, task=task, clock=lambda: next(ticks),
        )
        kinds = [k for k, _ in reporter.events]
        assert kinds == ["start", "progress", "progress", "stop"]
        early, late = reporter.events[1][1], reporter.events[2][1]
        assert (early.position, early.speed, early.eta) == (3, "0.0", "calculating...")
        # 6 MB in 3 s -> 2.0 MB/s, 6 MB left -> 3 s
        assert (late.position, late.total, late.speed, late.eta) == (6, 12, "2.0", "00:03")

    def test_connection_drop_mid_stream(self, tmp_path):
        def body():
            yield b"partial"
            raise requests.ConnectionError("reset by peer")

        session = fake_session(fake_response(200, body()))
        with pytest.raises(TransportError):
            stream_to_file("https://h/f", tmp_path / "f", session=session)

    def test_cancel_between_chunks(self, tmp_path):
        cancel = CancelToken()

        def body():
            yield b"one"
            cancel.cancel()
            yield b"two"

        dest = tmp_path / "f"
        session = fake_session(fake_response(200, body()))
        with pytest.raises(UserCancelled):
            stream_to_file("https://h/f", dest, session=session, cancel=cancel)
        assert dest.read_bytes() == b"one"


class TestDownloadPipeline:

    def test_happy_path_flat(self, tmp_path):
        session = fake_session(fake_response(200, [b"GGUF", b"data"]))
        pipeline = DownloadPipeline(on_exists=never_asked, session=session)
        report = pipeline.run(
            "org/llama-x", ["model.q4.gguf"], tmp_path, base_dir=tmp_path,
            token="hf_tok", sizes=lambda p: 4_000_000_000,
        )
        assert report.outcomes == [("model.q4.gguf", DownloadOutcome.SUCCESS)]
        assert report.succeeded == 1 and report.total == 1
        assert (tmp_path / "model.q4.gguf").read_bytes() == b"GGUFdata"
        url = session.get.call_args.args[0]
        assert url == "https://huggingface.co/org/llama-x/resolve/main/model.q4.gguf"
        assert session.get.call_args.kwargs["headers"] == {"Authorization": "Bearer hf_tok"}

    def test_destination_uses_basename(self, tmp_path):
        session = fake_session(fake_response(200, [b"x"]))
        DownloadPipeline(on_exists=never_asked, session=session).run(
            "org/m", ["quants/deep/m.gguf"], tmp_path, base_dir=tmp_path,
        )
        assert (tmp_path / "m.gguf").exists()
        assert session.get.call_args.args[0].endswith("/resolve/main/quants/deep/m.gguf")

    def test_skip_existing_makes_no_request(self, tmp_path):
        (tmp_path / "a.gguf").write_bytes(b"old")
        session = fake_session()
        pipeline = DownloadPipeline(on_exists=lambda t: ExistingFileAction.SKIP, session=session)
        report = pipeline.run("org/m", ["a.gguf"], tmp_path, base_dir=tmp_path)
        assert report.outcomes == [("a.gguf", DownloadOutcome.SKIPPED)]
        assert report.succeeded == 1
        session.get.assert_not_called()
        assert (tmp_path / "a.gguf").read_bytes() == b"old"

    def test_overwrite_existing(self, tmp_path):
        (tmp_path / "a.gguf").write_bytes(b"old")
        session = fake_session(fake_response(200, [b"new"]))
        pipeline = DownloadPipeline(on_exists=lambda t: ExistingFileAction.OVERWRITE, session=session)
        report = pipeline.run("org/m", ["a.gguf"], tmp_path, base_dir=tmp_path)
        assert report.outcomes == [("a.gguf", DownloadOutcome.SUCCESS)]
        assert (tmp_path / "a.gguf").read_bytes() == b"new"

    def test_overwrite_delete_failure_marks_failed_and_continues(self, tmp_path):
        # a directory where the file should be cannot be unlinked
        (tmp_path / "a.gguf").mkdir()
        session = fake_session(fake_response(200, [b"b"]))
        pipeline = DownloadPipeline(on_exists=lambda t: ExistingFileAction.OVERWRITE, session=session)
        report = pipeline.run("org/m", ["a.gguf", "b.gguf"], tmp_path, base_dir=tmp_path)
        assert report.outcomes == [
            ("a.gguf", DownloadOutcome.FAILED),
            ("b.gguf", DownloadOutcome.SUCCESS),
        ]
        assert (tmp_path / "a.gguf").is_dir()

    def test_cancel_all_stops_batch(self, tmp_path):
        (tmp_path / "one.gguf").write_bytes(b"old")
        session = fake_session()
        pipeline = DownloadPipeline(on_exists=lambda t: ExistingFileAction.CANCEL, session=session)
        report = pipeline.run("org/m", ["one.gguf", "two.gguf"], tmp_path, base_dir=tmp_path)
        assert report.cancelled
        assert report.outcomes == []
        assert report.failed == []
        session.get.assert_not_called()
        assert not (tmp_path / "two.gguf").exists()

    def test_failure_removes_partial_and_continues(self, tmp_path):
        def body():
            yield b"half"
            raise requests.ConnectionError("reset")

        session = fake_session(fake_response(200, body()), fake_response(200, [b"ok"]))
        pipeline = DownloadPipeline(on_exists=never_asked, session=session)
        report = pipeline.run("org/m", ["a.gguf", "b.gguf"], tmp_path, base_dir=tmp_path)
        assert report.failed == ["a.gguf"]
        assert report.succeeded == 1
        assert not (tmp_path / "a.gguf").exists()
        assert (tmp_path / "b.gguf").read_bytes() == b"ok"
        assert report.errors[0][0] == "a.gguf"

    def test_http_error_is_failed_outcome(self, tmp_path):
        session = fake_session(fake_response(403))
        report = DownloadPipeline(on_exists=never_asked, session=session).run(
            "org/gated", ["a.gguf"], tmp_path, base_dir=tmp_path,
        )
        assert report.outcomes == [("a.gguf", DownloadOutcome.FAILED)]
        assert not (tmp_path / "a.gguf").exists()

    def test_interrupt_mid_transfer_cleans_up(self, tmp_path):
        base = tmp_path / "models"
        target = base / "owner" / "model-x"
        target.mkdir(parents=True)
        cancel = CancelToken()

        def body():
            yield b"x" * 100
            cancel.cancel()
            yield b"y" * 100

        session = fake_session(fake_response(200, body()))
        reporter = RecordingReporter()
        pipeline = DownloadPipeline(on_exists=never_asked, reporter=reporter, session=session)
        report = pipeline.run(
            "owner/model-x", ["a.gguf", "b.gguf"], target, base_dir=base, cancel=cancel,
        )
        assert report.cancelled
        assert report.outcomes == []
        assert not (target / "a.gguf").exists()
        assert not target.exists()
        assert not (base / "owner").exists()
        assert base.exists()
        assert session.get.call_count == 1
        assert [w for k, w in reporter.events if k == "cleaned"] == [
            "partial file", "empty directory", "empty directory",
        ]

    def test_interrupt_keeps_directory_with_other_files(self, tmp_path):
        target = tmp_path / "owner" / "model-x"
        target.mkdir(parents=True)
        (target / "earlier.gguf").write_bytes(b"done")
        cancel = CancelToken()

        def body():
            cancel.cancel()
            yield b"y"

        session = fake_session(fake_response(200, body()))
        DownloadPipeline(on_exists=never_asked, session=session).run(
            "owner/model-x", ["a.gguf"], target, base_dir=tmp_path, cancel=cancel,
        )
        assert not (target / "a.gguf").exists()
        assert (target / "earlier.gguf").exists()

    def test_already_cancelled_attempts_nothing(self, tmp_path):
        cancel = CancelToken()
        cancel.cancel()
        session = fake_session()
        report = DownloadPipeline(on_exists=never_asked, session=session).run(
            "org/m", ["a.gguf"], tmp_path, base_dir=tmp_path, cancel=cancel,
        )
        assert report.cancelled and report.outcomes == []
        session.get.assert_not_called()

    def test_abort_is_idempotent(self, tmp_path):
        pipeline = DownloadPipeline(on_exists=never_asked)
        pipeline.current_target = tmp_path / "gone.gguf"
        assert pipeline.abort(tmp_path / "missing", tmp_path) == []
        assert pipeline.abort(tmp_path / "missing", tmp_path) == []
