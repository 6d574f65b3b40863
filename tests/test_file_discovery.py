import os
import sys
from pathlib import Path

import pytest

from conftest import write_files
from text_grab.application.copy_files_content import aggregate_results
from text_grab.infrastructure.file_discovery import DirectoryWalker, FileContentReader


def test_excluded_directory_is_not_descended(project):
    write_files(project, {
        "src/keep.ts": "keep",
        "node_modules/skip.ts": "skip",
        "node_modules/pkg/deep.ts": "deep",
    })

    lines = DirectoryWalker().collect(project, ["*.ts"], ".", ["node_modules"])

    assert [line.path for line in lines] == [project / "src" / "keep.ts"]


def test_only_matching_files_are_read(project):
    write_files(project, {"docs/a.md": "hello", "docs/b.txt": "ignore"})

    lines = DirectoryWalker().collect(project, ["*.md"], "docs", [])

    assert aggregate_results(lines) == f"// File: {project / 'docs' / 'a.md'}\nhello\n"


def test_breadth_first_order(project):
    write_files(project, {
        "b/deep/z.py": "z",
        "a/x.py": "x",
        "top.py": "top",
        "b/y.py": "y",
    })

    lines = DirectoryWalker().collect(project, ["*.py"], ".", [])

    names = [line.path.relative_to(project).as_posix() for line in lines]
    assert names == ["top.py", "a/x.py", "b/y.py", "b/deep/z.py"]


def test_missing_search_root_yields_nothing(project):
    walker = DirectoryWalker()

    assert walker.collect(project, ["*.py"], ["does-not-exist"], []) == []
    assert walker.warnings == []


def test_several_search_roots_and_overlap_is_kept(project):
    write_files(project, {"src/a.py": "a", "lib/b.py": "b"})

    lines = DirectoryWalker().collect(project, ["*.py"], ["src", "lib", "src"], [])

    names = [line.path.name for line in lines]
    assert names == ["a.py", "b.py", "a.py"]


def test_absolute_search_root(tmp_path, project):
    outside = tmp_path / "shared"
    write_files(outside, {"common.py": "common"})

    lines = DirectoryWalker().collect(project, ["*.py"], [str(outside)], [])

    assert [line.path for line in lines] == [outside / "common.py"]


def test_excluded_search_root_is_skipped(project):
    write_files(project, {"dist/out.js": "out", "src/in.js": "in"})

    lines = DirectoryWalker().collect(project, ["*.js"], ["dist", "src"], ["dist"])

    assert [line.path.name for line in lines] == ["in.js"]


def test_glob_exclude_rules_skip_files(project):
    write_files(project, {"src/app.ts": "app", "src/app.test.ts": "test"})

    lines = DirectoryWalker().collect(project, ["*.ts"], "src", ["*.test.ts"])

    assert [line.path.name for line in lines] == ["app.ts"]


def test_exclude_rules_ignore_parent_of_project_root(tmp_path):
    root = tmp_path / "node_modules_project"
    write_files(root, {"index.js": "index"})

    lines = DirectoryWalker().collect(root, ["*.js"], ".", ["node_modules"])

    assert [line.path.name for line in lines] == ["index.js"]


def test_unreadable_file_is_skipped_with_warning(project):
    write_files(project, {"good.txt": "good", "bad.txt": "bad"})

    class FlakyReader(FileContentReader):
        def read_file(self, file_path):
            if file_path.name == "bad.txt":
                raise PermissionError(13, "Permission denied", str(file_path))
            return super().read_file(file_path)

    walker = DirectoryWalker(FlakyReader())
    lines = walker.collect(project, ["*.txt"], ".", [])

    assert [line.path.name for line in lines] == ["good.txt"]
    assert len(walker.warnings) == 1
    assert "bad.txt" in walker.warnings[0]


def test_undecodable_file_is_skipped_with_warning(project):
    (project / "latin.txt").write_bytes(b"caf\xe9")
    write_files(project, {"plain.txt": "plain"})

    walker = DirectoryWalker()
    lines = walker.collect(project, ["*.txt"], ".", [])

    assert [line.content for line in lines] == ["plain"]
    assert len(walker.warnings) == 1


@pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permissions are not enforced",
)
def test_unlistable_directory_is_skipped_with_warning(project):
    write_files(project, {"open/a.txt": "a", "locked/b.txt": "b"})
    locked = project / "locked"
    locked.chmod(0)
    try:
        walker = DirectoryWalker()
        lines = walker.collect(project, ["*.txt"], ".", [])
    finally:
        locked.chmod(0o755)

    assert [line.path.name for line in lines] == ["a.txt"]
    assert any("locked" in warning for warning in walker.warnings)


def test_walk_is_repeatable(project):
    write_files(project, {"a/1.md": "one", "b/2.md": "two", "3.md": "three"})
    walker = DirectoryWalker()

    first = aggregate_results(walker.collect(project, ["*.md"], ".", []))
    second = aggregate_results(walker.collect(project, ["*.md"], ".", []))

    assert first == second
    assert first.count("// File: ") == 3


def test_parent_relative_search_root_is_normalized(tmp_path, project):
    write_files(tmp_path / "shared", {"a.md": "shared"})

    lines = DirectoryWalker().collect(project, ["*.md"], ["../shared"], [])

    assert [line.path for line in lines] == [tmp_path / "shared" / "a.md"]
    assert ".." not in aggregate_results(lines)


def test_parent_relative_project_root_is_normalized(project):
    write_files(project, {"docs/a.md": "hello"})

    lines = DirectoryWalker().collect(project / "docs" / "..", ["*.md"], "docs", [])

    assert aggregate_results(lines) == f"// File: {project / 'docs' / 'a.md'}\nhello\n"


def test_absolute_exclude_rule(project):
    write_files(project, {"generated/api.ts": "api", "src/app.ts": "app"})

    lines = DirectoryWalker().collect(project, ["*.ts"], ".", [str(project / "generated")])

    assert [line.path.name for line in lines] == ["app.ts"]


def test_glob_exclude_rule_prunes_directory(project, monkeypatch):
    write_files(project, {
        "src/generated/api.ts": "api",
        "src/generated/models/user.ts": "user",
        "src/app.ts": "app",
    })
    listed = []
    original_iterdir = Path.iterdir

    def recording_iterdir(self):
        listed.append(self)
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", recording_iterdir)

    lines = DirectoryWalker().collect(project, ["*.ts"], ".", ["src/gen*"])

    assert [line.path.name for line in lines] == ["app.ts"]
    assert project / "src" / "generated" not in listed
    assert project / "src" / "generated" / "models" not in listed
