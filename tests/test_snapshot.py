import logging

import pytest

from site_snapshot.crawler.models import Success
from site_snapshot.crawler.snapshot import SnapshotError, SnapshotWriter


def test_prepare_creates_output_tree(tmp_path):
    writer = SnapshotWriter(tmp_path / "out")
    writer.prepare()
    assert (tmp_path / "out" / "html").is_dir()
    assert (tmp_path / "out" / "screenshots").is_dir()


def test_prepare_fails_when_output_is_a_file(tmp_path):
    blocker = tmp_path / "out"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(SnapshotError):
        SnapshotWriter(blocker).prepare()


def test_save_writes_markup_and_screenshot(tmp_path):
    writer = SnapshotWriter(tmp_path)
    writer.prepare()
    page = Success(200, "text/html", "<html><body>hi</body></html>", screenshot=b"\x89PNG")

    path = writer.save("http://x/blog/post", page)

    assert path == tmp_path / "html" / "blog_post.html"
    assert path.read_text(encoding="utf-8") == "<html><body>hi</body></html>"
    assert (tmp_path / "screenshots" / "blog_post.png").read_bytes() == b"\x89PNG"


def test_save_root_as_index_without_screenshot(tmp_path):
    writer = SnapshotWriter(tmp_path)
    writer.prepare()
    writer.save("http://x/", Success(200, "text/html", "<p>root</p>"))

    assert (tmp_path / "html" / "index.html").exists()
    assert not (tmp_path / "screenshots" / "index.png").exists()


def test_save_overwrites_previous_run(tmp_path):
    writer = SnapshotWriter(tmp_path)
    writer.prepare()
    writer.save("http://x/a", Success(200, "text/html", "old", screenshot=b"old"))
    writer.save("http://x/a", Success(200, "text/html", "new", screenshot=b"new"))

    assert (tmp_path / "html" / "a.html").read_text(encoding="utf-8") == "new"
    assert (tmp_path / "screenshots" / "a.png").read_bytes() == b"new"


def test_pretty_output_puts_tags_on_separate_lines(tmp_path):
    writer = SnapshotWriter(tmp_path, pretty=True)
    writer.prepare()
    path = writer.save("http://x/", Success(200, "text/html", "<html><body><p>hi</p></body></html>"))

    lines = [line.strip() for line in path.read_text(encoding="utf-8").splitlines()]
    assert "<p>" in lines
    assert "hi" in lines


def test_write_failure_is_fatal(tmp_path):
    writer = SnapshotWriter(tmp_path)
    # no prepare(): html/ does not exist
    with pytest.raises(SnapshotError):
        writer.save("http://x/", Success(200, "text/html", "<p>x</p>"))


def test_filename_collision_is_logged(tmp_path, project_log):
    writer = SnapshotWriter(tmp_path)
    writer.prepare()
    writer.save("http://x/a_b", Success(200, "text/html", "flat"))
    writer.save("http://x/a/b", Success(200, "text/html", "nested"))

    assert (tmp_path / "html" / "a_b.html").read_text(encoding="utf-8") == "nested"
    warnings = [r for r in project_log.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "http://x/a/b" in warnings[0].getMessage()
    assert "http://x/a_b" in warnings[0].getMessage()


def test_resaving_same_url_is_not_a_collision(tmp_path, project_log):
    writer = SnapshotWriter(tmp_path)
    writer.prepare()
    writer.save("http://x/a_b", Success(200, "text/html", "one"))
    writer.save("http://x/a_b", Success(200, "text/html", "two"))
    writer.prepare()
    writer.save("http://x/a/b", Success(200, "text/html", "next run"))

    assert not [r for r in project_log.records if r.levelno >= logging.WARNING]
