"""Tests for upward directory searches."""

from pathlib import Path

from discovery.ancestors import find_dir_up, find_file_up, find_in_parents


class TestFindInParents:
    """find_in_parents probing order and termination."""

    def test_returns_first_hit_walking_up(self, tmp_path):
        deep = tmp_path / "a" / "b" / "c"
        deep.mkdir(parents=True)
        (tmp_path / "a" / "marker").write_text("x")

        hit = find_in_parents(lambda d: d if (d / "marker").exists() else None, deep)

        assert hit == tmp_path / "a"

    def test_stops_at_filesystem_root(self, tmp_path):
        seen = []

        def probe(directory):
            seen.append(directory)
            return None

        assert find_in_parents(probe, tmp_path) is None
        assert seen[0] == tmp_path
        assert seen[-1] == seen[-1].parent

    def test_relative_start_reaches_filesystem_root(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        seen = []

        def record(directory):
            seen.append(directory)
            return None

        assert find_in_parents(record, Path(".")) is None
        assert seen[0] == tmp_path.resolve()
        assert seen[-1] == Path(tmp_path.anchor)


class TestFindFileUp:
    """find_file_up."""

    def test_nearest_file_wins(self, tmp_path):
        inner = tmp_path / "proj" / "pkg"
        inner.mkdir(parents=True)
        (tmp_path / "snapinit.yml").write_text("a: 1")
        (tmp_path / "proj" / "snapinit.yml").write_text("a: 2")

        found = find_file_up(inner, lambda f: f.name == "snapinit.yml")

        assert found == tmp_path / "proj" / "snapinit.yml"

    def test_upper_bound_limits_search(self, tmp_path):
        inner = tmp_path / "proj" / "pkg"
        inner.mkdir(parents=True)
        (tmp_path / "snapinit.yml").write_text("a: 1")

        found = find_file_up(inner, lambda f: f.name == "snapinit.yml", upper_bound=tmp_path / "proj")

        assert found is None

    def test_directories_are_not_files(self, tmp_path):
        (tmp_path / "target").mkdir()
        start = tmp_path / "x"
        start.mkdir()

        assert find_file_up(start, lambda f: f.name == "target", upper_bound=tmp_path) is None
        assert find_dir_up(start, lambda d: d.name == "target", upper_bound=tmp_path) == tmp_path / "target"


class TestFindDirUp:
    """find_dir_up."""

    def test_nearest_directory_wins(self, tmp_path):
        inner = tmp_path / "proj" / "pkg"
        inner.mkdir(parents=True)
        (tmp_path / "templates").mkdir()
        (tmp_path / "proj" / "templates").mkdir()

        found = find_dir_up(inner, lambda d: d.name == "templates")

        assert found == tmp_path / "proj" / "templates"

    def test_upper_bound_limits_search(self, tmp_path):
        inner = tmp_path / "proj" / "pkg"
        inner.mkdir(parents=True)
        (tmp_path / "templates").mkdir()

        assert find_dir_up(inner, lambda d: d.name == "templates", upper_bound=tmp_path / "proj") is None
        assert find_dir_up(inner, lambda d: d.name == "templates", upper_bound=tmp_path) == tmp_path / "templates"

    def test_files_are_not_directories(self, tmp_path):
        (tmp_path / "templates").write_text("x")
        start = tmp_path / "x"
        start.mkdir()

        assert find_dir_up(start, lambda d: d.name == "templates", upper_bound=tmp_path) is None
