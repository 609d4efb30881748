"""Shared fixtures: a fixture skills repository and a git client that copies it."""

import shutil
import tempfile
from pathlib import Path

import pytest

from agent_skills_hub import GitClient, GitError


class FakeGit(GitClient):
    """GitClient that copies a local tree instead of running git."""

    def __init__(self, source: Path, fail_command: str = None, returncode: int = 128):
        super().__init__()
        self.source = source
        self.fail_command = fail_command
        self.returncode = returncode
        self.calls = []

    def _maybe_fail(self, command):
        if command == self.fail_command:
            raise GitError(self.returncode, ["git", command])

    def clone(self, url, dest, depth=None, symlinks=False, capture=True):
        self.calls.append(("clone", url, Path(dest), depth, symlinks))
        self._maybe_fail("clone")
        shutil.copytree(self.source, dest)
        (Path(dest) / ".git").mkdir()

    def pull(self, repo_dir, capture=False):
        self.calls.append(("pull", Path(repo_dir)))
        self._maybe_fail("pull")

    def checkout(self, repo_dir, ref, capture=False):
        self.calls.append(("checkout", Path(repo_dir), ref))
        self._maybe_fail("checkout")

    def current_commit(self, repo_dir):
        return "abc1234"

    def commands(self):
        return [call[0] for call in self.calls]


def build_fixture_repo(root: Path) -> Path:
    """
    Lay out a small skills repository:

        skills/frontend/react-patterns/SKILL.md   -> tools/lint/eslint-check.js
        skills/backend/api-design/SKILL.md        -> tools/missing/gone.py
        skills/backend/api-design/docs/extra.md   -> tools/lint/eslint-check.js
        tools/lint/eslint-check.js
    """
    react = root / "skills" / "frontend" / "react-patterns"
    react.mkdir(parents=True)
    (react / "SKILL.md").write_text(
        "---\nname: react-patterns\ndescription: React\n---\n"
        "Run `tools/lint/eslint-check.js` before committing.\n"
    )
    (react / "examples.txt").write_text("tools/ignored/not-md.sh")

    api = root / "skills" / "backend" / "api-design"
    (api / "docs").mkdir(parents=True)
    (api / "SKILL.md").write_text("See tools/missing/gone.py\n")
    (api / "docs" / "extra.md").write_text("Also tools/lint/eslint-check.js\n")

    lint = root / "tools" / "lint"
    lint.mkdir(parents=True)
    (lint / "eslint-check.js").write_text("console.log('lint');\n")
    return root


@pytest.fixture
def fixture_repo():
    with tempfile.TemporaryDirectory() as tmp:
        yield build_fixture_repo(Path(tmp) / "source")


@pytest.fixture
def fake_git(fixture_repo):
    return FakeGit(fixture_repo)


@pytest.fixture
def home():
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)
