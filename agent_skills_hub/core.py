"""
Agent Skills Hub Core Library

This module contains all core logic independent of the CLI interface,
allowing reuse by other Python programs.

Main Features:
    - Target resolution: pick the skills directory for a host integration
    - Git operations: clone, pull, checkout through the git executable
    - Skill extraction: find a single skill in a clone and copy it out
    - Tool resolution: install the tools/... files a skill's docs reference

Design Principles:
    - Only the git executable is shelled out to; everything else is stdlib
    - Configuration (repo URL, home directory, git client) is passed in
    - Fatal conditions raise InstallError or GitError, the CLI maps them to exit codes
"""

import os
import re
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


# =============================================================================
# Global Configuration
# =============================================================================

DEFAULT_REPO = "https://github.com/legendaryabhi/agent-skills-hub.git"

# Overrides DEFAULT_REPO, e.g. to install from a fork or a local mirror
REPO_ENV_VAR = "AGENT_SKILLS_HUB_REPO"

CODEX_HOME_ENV_VAR = "CODEX_HOME"

# Used when no integration flag and no --path is given, relative to home
DEFAULT_SKILLS_DIR = (".agent", "skills")

# Integration flag -> skills directory relative to home, in precedence order
INTEGRATION_DIRS = (
    ("cursor", (".cursor", "skills")),
    ("claude", (".claude", "skills")),
    ("gemini", (".gemini", "skills")),
    ("codex", (".codex", "skills")),
    ("openclaw", (".openclaw", "skills")),
)

SKILL_DOC_SUFFIX = ".md"

TOOL_REFERENCE_PATTERN = re.compile(r"tools/([a-zA-Z0-9_/-]+\.[a-zA-Z0-9]+)")

TEMP_PREFIX = "agent-skills-hub-"

HOME_UNRESOLVED_MESSAGE = "Could not resolve home directory. Use --path <absolute-path>."


# =============================================================================
# Terminal Color Handling
# =============================================================================

class Colors:
    """
    ANSI color code wrapper class.

    Design considerations:
        - Uses class attributes instead of instance, as colors are global settings
        - Provides disable() method for older Windows cmd compatibility
    """
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"

    @classmethod
    def disable(cls):
        """Disable all color output."""
        cls.RESET = cls.BOLD = cls.RED = cls.GREEN = ""
        cls.YELLOW = cls.BLUE = cls.CYAN = ""


if os.environ.get("NO_COLOR"):
    Colors.disable()
elif sys.platform == "win32" and not os.environ.get("WT_SESSION"):
    import colorama
    colorama.init()


# =============================================================================
# Logging Functions
# =============================================================================

def log_info(msg: str):
    """Info message (blue ℹ)."""
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {msg}")


def log_success(msg: str):
    """Success message (green ✓)."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {msg}")


def log_warning(msg: str):
    """Warning message (yellow ⚠)."""
    print(f"{Colors.YELLOW}⚠{Colors.RESET} {msg}")


def log_error(msg: str):
    """Error message (red ✗)."""
    print(f"{Colors.RED}✗{Colors.RESET} {msg}", file=sys.stderr)


# =============================================================================
# Errors
# =============================================================================

class InstallError(Exception):
    """A fatal installer condition; the CLI reports it and exits with exit_code."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class GitError(subprocess.CalledProcessError):
    """A git command exited with a non-zero status."""


# =============================================================================
# Options and Results
# =============================================================================

@dataclass(frozen=True)
class InstallOptions:
    """Parsed command line options for a single invocation."""
    path: Optional[str] = None
    version: Optional[str] = None
    tag: Optional[str] = None
    skill: Optional[str] = None
    cursor: bool = False
    claude: bool = False
    gemini: bool = False
    codex: bool = False
    openclaw: bool = False
    help: bool = False


@dataclass
class SkillInstallResult:
    skill_dir: Path
    tools_dir: Path
    installed_tools: list = field(default_factory=list)
    missing_tools: list = field(default_factory=list)


@dataclass
class RepoInstallResult:
    target: Path
    updated: bool
    ref: Optional[str] = None
    commit: Optional[str] = None


# =============================================================================
# Target Resolution
# =============================================================================

def get_home_dir(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Home directory from HOME, falling back to USERPROFILE. None if neither is set."""
    env = os.environ if environ is None else environ
    home = env.get("HOME") or env.get("USERPROFILE")
    return Path(home) if home else None


def get_repo_url(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return env.get(REPO_ENV_VAR) or DEFAULT_REPO


def expand_user_path(path: str, home: Optional[Path]) -> Path:
    """
    Expand a leading ``~`` (alone or followed by a slash) and make the path absolute.

    ``~user`` forms are left alone.

    Raises:
        InstallError: the path starts with ``~`` and the home directory is unknown
    """
    if path == "~" or path.startswith("~/") or path.startswith("~\\"):
        if home is None:
            raise InstallError(HOME_UNRESOLVED_MESSAGE)
        path = str(home) + path[1:]
    return Path(os.path.abspath(path))


def resolve_target_dir(
    options: InstallOptions,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Compute the absolute installation directory.

    Resolution order (first match wins):
        1. --path (with ~ expanded)
        2. --cursor, --claude, --gemini, --codex, --openclaw
        3. ~/.agent/skills

    The codex directory honours $CODEX_HOME before ~/.codex/skills.

    Raises:
        InstallError: the home directory is unknown and either no explicit
            path was given or the explicit path starts with ~
    """
    env =os.environ if environ is None else environ
    if home is None:
        home = get_home_dir(env)

    if options.path:
        return expand_user_path(options.path, home)

    for flag, parts in INTEGRATION_DIRS:
        if not getattr(options, flag):
            continue
        if flag == "codex" and env.get(CODEX_HOME_ENV_VAR):
            return Path(os.path.abspath(env[CODEX_HOME_ENV_VAR])) / "skills"
        if home is None:
            break
        return home.joinpath(*parts)

    if home is None:
        raise InstallError(HOME_UNRESOLVED_MESSAGE)
    return home.joinpath(*DEFAULT_SKILLS_DIR)


def tools_dir_for(target_dir: Path) -> Path:
    """
    Sibling directory that receives the tools of skills installed into target_dir.

        ~/.agent/skills  -> ~/.agent/tools
        ./my-skills      -> ./my-tools
        ./custom         -> ./custom-tools
    """
    name = target_dir.name
    if name == "skills":
        return target_dir.parent / "tools"
    if name.endswith("-skills"):
        return target_dir.parent / (name[:-len("-skills")] + "-tools")
    return target_dir.parent / f"{name}-tools"


def normalize_ref(tag: Optional[str] = None, version: Optional[str] = None) -> Optional[str]:
    """Ref to check out after a fresh clone: the tag, or v<version>."""
    if tag:
        return tag
    if version:
        return version if version.startswith("v") else f"v{version}"
    return None


# =============================================================================
# Git Operations
# =============================================================================

class GitClient:
    """
    Narrow wrapper around the git executable.

    Every method blocks until git exits. A non-zero exit raises GitError after
    the failing command (and captured stderr, if any) has been logged.
    """

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def run(self, args: list, cwd: Optional[Path] = None, capture: bool = True) -> subprocess.CompletedProcess:
        """
        Execute a git command.

        Args:
            args: Git command arguments (without 'git' itself)
            cwd: Working directory
            capture: Whether to capture output instead of streaming it to the terminal
        """
        cmd = [self.executable] + args
        result = subprocess.run(cmd, cwd=cwd, capture_output=capture, text=True)
        if result.returncode != 0:
            log_error(f"Git command failed: {' '.join(cmd)}")
            if result.stderr:
                log_error(result.stderr.strip())
            raise GitError(result.returncode, cmd, result.stdout, result.stderr)
        return result

    def clone(
        self,
        url: str,
        dest: Path,
        depth: Optional[int] = None,
        symlinks: bool = False,
        capture: bool = True,
    ) -> subprocess.CompletedProcess:
        args = ["-c", "core.symlinks=true"] if symlinks else []
        args.append("clone")
        if depth:
            args += ["--depth", str(depth)]
        args += [url, str(dest)]
        return self.run(args, capture=capture)

    def pull(self, repo_dir: Path, capture: bool = False) -> subprocess.CompletedProcess:
        return self.run(["pull"], cwd=repo_dir, capture=capture)

    def checkout(self, repo_dir: Path, ref: str, capture: bool = False) -> subprocess.CompletedProcess:
        return self.run(["checkout", ref], cwd=repo_dir, capture=capture)

    def current_commit(self, repo_dir: Path) -> Optional[str]:
        """Short hash of HEAD, or None when it cannot be determined."""
        try:
            result = subprocess.run(
                [self.executable, "rev-parse", "--short", "HEAD"],
                cwd=repo_dir,
                capture_output=True,
                text=True,
                timeout=10
            )
        except (OSError, subprocess.TimeoutExpired):
            return None
        if result.returncode == 0:
            return result.stdout.strip() or None
        return None


# =============================================================================
# Tool Reference Scanning
# =============================================================================

def _sorted_entries(directory: Path) -> list:
    """Directory entries sorted by name; an unreadable directory yields none."""
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except (PermissionError, NotADirectoryError, FileNotFoundError):
        return []


def find_tool_references(root: Path) -> list[str]:
    """
    Collect the distinct tools/<path>.<ext> references in Markdown files under root.

    Symlinked directories are not followed and unreadable directories are
    skipped. References are returned without the ``tools/`` prefix, in the
    order they were first seen.
    """
    found = {}
    root = Path(root)
    if not root.is_dir():
        return []

    pending = [root]
    while pending:
        directory = pending.pop()
        subdirs = []
        for entry in _sorted_entries(directory):
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
            elif entry.name.endswith(SKILL_DOC_SUFFIX) and entry.is_file():
                content = Path(entry.path).read_text(encoding="utf-8", errors="replace")
                for match in TOOL_REFERENCE_PATTERN.finditer(content):
                    found.setdefault(match.group(1), None)
        # depth-first, first subdirectory visited first
        pending.extend(reversed(subdirs))

    return list(found)


# =============================================================================
# Skill Installation
# =============================================================================

def find_skill_dir(skills_root: Path, skill_name: str) -> Optional[Path]:
    """
    Depth-first search for a directory named exactly skill_name.

    The first match in sorted traversal order wins. Symlinked directories are
    neither matched nor descended into.
    """
    for entry in _sorted_entries(skills_root):
        if not entry.is_dir(follow_symlinks=False):
            continue
        path = Path(entry.path)
        if entry.name == skill_name:
            return path
        found = find_skill_dir(path, skill_name)
        if found is not None:
            return found
    return None


def install_tools(tools: list, source_dir: Path, tools_dir: Path) -> tuple[list, list]:
    """
    Copy each referenced tool from source_dir into tools_dir.

    A missing tool only produces a warning.

    Returns:
        (installed, missing) lists of tool references
    """
    installed, missing = [], []
    for tool in tools:
        # tools//x.sh must stay inside tools_dir
        relative = tool.lstrip("/")
        source = source_dir / relative
        dest = tools_dir / relative
        if source.is_file():
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
            log_success(f"  Installed tool: {tool}")
            installed.append(tool)
        else:
            log_warning(f"  Referenced tool '{tool}' was not found in the repository.")
            missing.append(tool)
    return installed, missing


def install_skill(
    skill_name: str,
    target_dir: Path,
    repo_url: str = DEFAULT_REPO,
    git: Optional[GitClient] = None,
) -> SkillInstallResult:
    """
    Install a single skill, plus the tools its docs reference, into target_dir.

    The repository is shallow-cloned into a temporary workspace that is
    removed on every exit path. An existing copy of the skill is replaced,
    not merged.

    Raises:
        GitError: the clone failed
        InstallError: the skill does not exist in the repository
    """
    git = git or GitClient()
    target_dir = Path(target_dir)

    with tempfile.TemporaryDirectory(prefix=TEMP_PREFIX, ignore_cleanup_errors=True) as tmp:
        clone_dir = Path(tmp) / "repo"
        log_info(f"Cloning to temporary directory to extract skill: {skill_name}...")
        git.clone(repo_url, clone_dir, depth=1)

        source = find_skill_dir(clone_dir / "skills", skill_name)
        if source is None:
            raise InstallError(f"Skill '{skill_name}' not found in repository.")

        dest = target_dir / skill_name
        if dest.exists() or dest.is_symlink():
            log_info(f"Skill '{skill_name}' already exists at {dest}. Replacing...")
            if dest.is_dir() and not dest.is_symlink():
                shutil.rmtree(dest)
            else:
                dest.unlink()
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)

        shutil.copytree(source, dest, symlinks=True)
        log_success(f"Installed skill '{skill_name}' to {dest}")

        result = SkillInstallResult(skill_dir=dest, tools_dir=tools_dir_for(target_dir))
        tools = find_tool_references(dest)
        if tools:
            log_info(f"Found {len(tools)} tool(s) referenced by this skill. Installing...")
            result.installed_tools, result.missing_tools = install_tools(
                tools, clone_dir / "tools", result.tools_dir
            )

    return result


# =============================================================================
# Repository Installation
# =============================================================================

def install_repository(
    target_dir: Path,
    ref: Optional[str] = None,
    repo_url: str = DEFAULT_REPO,
    git: Optional[GitClient] = None,
    platform: Optional[str] = None,
) -> RepoInstallResult:
    """
    Clone the whole repository into target_dir, or pull if it is already a checkout.

    ref is only checked out after a fresh clone; an existing checkout is
    pulled and left on whatever it had checked out.

    Raises:
        GitError: clone, pull or checkout failed
        InstallError: target_dir exists but is not a git checkout, or its
            parent directory cannot be created
    """
    git = git or GitClient()
    target_dir = Path(target_dir)
    platform = platform or sys.platform

    if target_dir.exists():
        if not (target_dir / ".git").exists():
            raise InstallError(
                f"Directory exists and is not a git repo: {target_dir}\n"
                "Remove it or use --path to choose another location."
            )
        log_info("Directory already exists and is a git repo. Updating...")
        if ref:
            log_warning(f"Ignoring ref '{ref}' for an existing checkout; check it out manually if needed.")
        git.pull(target_dir)
        return RepoInstallResult(target=target_dir, updated=True, commit=git.current_commit(target_dir))

    parent = target_dir.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallError(f"Cannot create parent directory: {parent} ({e})") from e

    log_info(f"Cloning {repo_url} into {target_dir}")
    # core.symlinks defaults to false on Windows
    git.clone(repo_url, target_dir, symlinks=platform == "win32", capture=False)

    if ref:
        log_info(f"Checking out {ref}...")
        git.checkout(target_dir, ref)

    return RepoInstallResult(
        target=target_dir,
        updated=False,
        ref=ref,
        commit=git.current_commit(target_dir),
    )
