"""
Agent Skills Hub - installer for the agent-skills-hub repository

Public API:
    - resolve_target_dir: Pick the skills directory for an integration flag or --path
    - find_tool_references: Find tools/... references in a skill's Markdown
    - find_skill_dir: Locate a skill directory inside a clone
    - install_skill: Install a single skill and the tools it references
    - install_repository: Clone or update the whole repository
    - GitClient: Wrapper around the git executable

CLI Entry Point:
    - main: CLI main function
"""

__version__ = "0.1.0"

from .core import (
    # Constants
    DEFAULT_REPO,
    DEFAULT_SKILLS_DIR,
    INTEGRATION_DIRS,
    TOOL_REFERENCE_PATTERN,

    # Logging
    Colors,
    log_info,
    log_success,
    log_warning,
    log_error,

    # Errors
    InstallError,
    GitError,

    # Options and results
    InstallOptions,
    SkillInstallResult,
    RepoInstallResult,

    # Target resolution
    get_home_dir,
    get_repo_url,
    expand_user_path,
    resolve_target_dir,
    tools_dir_for,
    normalize_ref,

    # Git Operations
    GitClient,

    # Scanning and installation
    find_tool_references,
    find_skill_dir,
    install_tools,
    install_skill,
    install_repository,
)

from .cli import main, parse_options

__all__ = [
    # Constants
    "DEFAULT_REPO",
    "DEFAULT_SKILLS_DIR",
    "INTEGRATION_DIRS",
    "TOOL_REFERENCE_PATTERN",

    # Logging
    "Colors",
    "log_info",
    "log_success",
    "log_warning",
    "log_error",

    # Errors
    "InstallError",
    "GitError",

    # Options and results
    "InstallOptions",
    "SkillInstallResult",
    "RepoInstallResult",

    # Target resolution
    "get_home_dir",
    "get_repo_url",
    "expand_user_path",
    "resolve_target_dir",
    "tools_dir_for",
    "normalize_ref",

    # Git Operations
    "GitClient",

    # Scanning and installation
    "find_tool_references",
    "find_skill_dir",
    "install_tools",
    "install_skill",
    "install_repository",

    # CLI
    "main",
    "parse_options",
]
