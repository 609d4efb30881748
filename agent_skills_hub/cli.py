"""
Agent Skills Hub Command Line Interface

This module handles argument parsing and command dispatch; the core logic
is provided by the core module.
"""

import argparse
import os
import sys
from typing import Mapping, Optional

from .core import (
    Colors,
    GitClient,
    GitError,
    InstallError,
    InstallOptions,
    get_home_dir,
    get_repo_url,
    install_repository,
    install_skill,
    log_error,
    log_info,
    log_success,
    normalize_ref,
    resolve_target_dir,
)


EPILOG = """
Examples:
  agent-skills-hub
  agent-skills-hub --cursor
  agent-skills-hub install react-patterns --cursor
  agent-skills-hub --openclaw
  agent-skills-hub --version 4.6.0
  agent-skills-hub --path ./my-skills
"""


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-skills-hub",
        usage="%(prog)s [install] [skill-name] [options]",
        description="Clones the skills repo or installs a specific skill.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("tokens", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument("--help", "-h", action="store_true", help="Show this help and exit")
    parser.add_argument("--cursor", action="store_true", help="Install to ~/.cursor/skills (Cursor)")
    parser.add_argument("--claude", action="store_true", help="Install to ~/.claude/skills (Claude Code)")
    parser.add_argument("--gemini", action="store_true", help="Install to ~/.gemini/skills (Gemini CLI)")
    parser.add_argument("--codex", action="store_true",
                        help="Install to $CODEX_HOME/skills or ~/.codex/skills (Codex CLI)")
    parser.add_argument("--openclaw", action="store_true", help="Install to ~/.openclaw/skills (OpenClaw)")
    parser.add_argument("--path", nargs="?", metavar="DIR",
                        help="Install to DIR (default: ~/.agent/skills)")
    parser.add_argument("--version", nargs="?", metavar="VER",
                        help="After clone, checkout tag v<VER> (e.g. 4.6.0 -> v4.6.0)")
    parser.add_argument("--tag", nargs="?", metavar="TAG",
                        help="After clone, checkout this tag (e.g. v4.6.0)")
    parser.add_argument("--skill", nargs="?", metavar="NAME",
                        help="Install only this skill (same as the positional skill-name)")
    return parser


def parse_options(argv: list, parser: Optional[argparse.ArgumentParser] = None) -> InstallOptions:
    """
    Turn raw command line tokens into InstallOptions.

    Parsing is permissive: unknown flags are ignored, the literal ``install``
    is skipped, and the first other bare token is the skill name unless
    --skill was given.
    """
    parser = parser or build_parser()
    if "-h" in argv or "--help" in argv:
        return InstallOptions(help=True)

    # flags only count on an exact match; --cursor=yes or -hx are dropped
    known = {option for action in parser._actions for option in action.option_strings}
    argv = [t for t in argv if not t.startswith("-") or t in known]

    args, extras = parser.parse_known_intermixed_args(argv)

    bare = [t for t in args.tokens + extras if not t.startswith("-") and t != "install"]
    skill = args.skill or (bare[0] if bare else None)

    return InstallOptions(
        path=args.path,
        version=args.version,
        tag=args.tag,
        skill=skill,
        cursor=args.cursor,
        claude=args.claude,
        gemini=args.gemini,
        codex=args.codex,
        openclaw=args.openclaw,
    )


# =============================================================================
# Commands
# =============================================================================

def cmd_install_skill(options: InstallOptions, target_dir, repo_url: str, git: GitClient) -> int:
    """Extract a single skill (and its tools) from the repository."""
    result = install_skill(options.skill, target_dir, repo_url=repo_url, git=git)

    print()
    log_success(f"Installed to {result.skill_dir}")
    if result.installed_tools:
        log_info(f"{len(result.installed_tools)} tool(s) installed to {result.tools_dir}")
    return 0


def cmd_install_repo(options: InstallOptions, target_dir, repo_url: str, git: GitClient) -> int:
    """Clone or update the whole skills repository."""
    ref = normalize_ref(options.tag, options.version)
    result = install_repository(target_dir, ref=ref, repo_url=repo_url, git=git)

    print()
    location = f"{result.target} ({result.commit})" if result.commit else str(result.target)
    if result.updated:
        log_success(f"Updated {location}")
    else:
        log_success(f"Installed to {location}")
    print(f"{Colors.CYAN}Pick a bundle in docs/BUNDLES.md and use @skill-name in your AI assistant.{Colors.RESET}")
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================

def main(
    argv: Optional[list] = None,
    git: Optional[GitClient] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """CLI entry point. Returns the process exit code."""
    env = os.environ if environ is None else environ
    parser = build_parser()
    options = parse_options(sys.argv[1:] if argv is None else list(argv), parser)

    if options.help:
        parser.print_help()
        return 0

    git = git or GitClient()
    try:
        target_dir = resolve_target_dir(options, home=get_home_dir(env), environ=env)
        if options.skill:
            return cmd_install_skill(options, target_dir, get_repo_url(env), git)
        return cmd_install_repo(options, target_dir, get_repo_url(env), git)
    except GitError as e:
        # negative when git was killed by a signal
        return e.returncode if e.returncode and e.returncode > 0 else 1
    except InstallError as e:
        for line in str(e).splitlines():
            log_error(line)
        return e.exit_code
    except KeyboardInterrupt:
        print()
        return 130
    except Exception as e:
        log_error(f"Error: {e}")
        if env.get("DEBUG"):
            raise
        return 1
