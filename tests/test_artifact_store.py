import os
import threading
import time

import pytest

from exceptions import StorageError
from services.artifact_store import LOCK_STRIPES, ArtifactStore, sanitize_segment


def test_sanitize_segment_replaces_unsafe_characters():
    assert sanitize_segment("INV 2024/03#1") == "INV_2024_03_1"
    assert sanitize_segment("INV-20240315_x") == "INV-20240315_x"


def test_paths_follow_period_and_invoice_number(tmp_path):
    store = ArtifactStore(str(tmp_path))
    paths = store.paths_for("March", 2024, "INV/1")

    assert paths.directory == os.path.join(str(tmp_path), "invoices", "2024-March")
    assert paths.markdown_path == os.path.join(paths.directory, "INV_1.md")
    assert paths.pdf_path == os.path.join(paths.directory, "INV_1.pdf")


def test_ensure_twice_renders_once(artifact_store, renderer):
    first = artifact_store.ensure_artifacts("March", 2024, "INV-1", "# Invoice\n")
    stamps = (os.stat(first.markdown_path).st_mtime_ns, os.stat(first.pdf_path).st_mtime_ns)

    second = artifact_store.ensure_artifacts("March", 2024, "INV-1", "# Invoice\n")

    assert renderer.calls == 1
    assert second == first
    assert (os.stat(second.markdown_path).st_mtime_ns, os.stat(second.pdf_path).st_mtime_ns) == stamps


def test_missing_pdf_is_regenerated_but_markdown_is_kept(artifact_store, renderer):
    first = artifact_store.ensure_artifacts("March", 2024, "INV-1", "original\n")
    os.remove(first.pdf_path)

    artifact_store.ensure_artifacts("March", 2024, "INV-1", "changed\n")

    assert renderer.calls == 2
    assert os.path.exists(first.pdf_path)
    assert artifact_store.read_text(first.markdown_path) == "original\n"


def test_changed_content_does_not_refresh_existing_files(artifact_store, renderer):
    first = artifact_store.ensure_artifacts("March", 2024, "INV-1", "original\n")
    artifact_store.ensure_artifacts("March", 2024, "INV-1", "changed\n")

    assert renderer.calls == 1
    assert artifact_store.read_text(first.markdown_path) == "original\n"


def test_write_failure_raises_storage_error(tmp_path, renderer):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("x")
    store = ArtifactStore(str(blocker), renderer=renderer)

    with pytest.raises(StorageError):
        store.ensure_artifacts("March", 2024, "INV-1", "content\n")


def test_read_missing_file_raises_storage_error(artifact_store, tmp_path):
    with pytest.raises(StorageError):
        artifact_store.read_bytes(str(tmp_path / "missing.pdf"))


def test_delete_artifacts_is_best_effort(artifact_store, tmp_path):
    ensured = artifact_store.ensure_artifacts("March", 2024, "INV-1", "content\n")

    artifact_store.delete_artifacts([ensured.markdown_path, ensured.pdf_path, None, str(tmp_path / "gone.md")])

    assert not os.path.exists(ensured.markdown_path)
    assert not os.path.exists(ensured.pdf_path)


class BlockingRenderer:
    """Holds the first render open until released."""

    def __init__(self):
        self.calls = 0
        self.started = threading.Event()
        self.release = threading.Event()

    def render(self, content, title=None):
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        return b"%PDF-stub"


def test_concurrent_ensure_for_same_invoice_renders_once(tmp_path):
    renderer = BlockingRenderer()
    store = ArtifactStore(str(tmp_path), renderer=renderer)
    errors = []

    def ensure():
        try:
            store.ensure_artifacts("March", 2024, "INV-1", "content\n")
        except Exception as exc:
            errors.append(exc)

    first = threading.Thread(target=ensure)
    second = threading.Thread(target=ensure)
    first.start()
    assert renderer.started.wait(timeout=5)
    second.start()
    time.sleep(0.05)
    renderer.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert errors == []
    assert renderer.calls == 1


def test_lock_pool_does_not_grow_with_invoices(artifact_store, renderer):
    for number in range(500):
        artifact_store.ensure_artifacts("March", 2024, f"INV-{number}", "content\n")

    assert renderer.calls == 500
    assert len(artifact_store._locks) == LOCK_STRIPES
