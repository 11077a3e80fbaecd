"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import DEFAULT_PROTECTED_BRANCHES


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="git-worktree-keeper",
        description="Audit and consolidate git worktrees, stashes and branches",
        epilog="PR lookup uses the GITHUB_TOKEN environment variable when set. "
        "Without it (or with --bypass-github) PR status is reported as 'none'.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--version", action="version", version=f"git-worktree-keeper {__version__}"
    )
    parser.add_argument(
        "--repo", default=".", metavar="PATH", help="Path inside the repository (default: .)"
    )
    parser.add_argument("--main-branch", default="main", help="Main branch name")
    parser.add_argument(
        "--protected",
        nargs="*",
        default=list(DEFAULT_PROTECTED_BRANCHES),
        help="Branches that are never deleted",
    )
    parser.add_argument(
        "--stash-stale-days",
        type=int,
        default=30,
        help="Days after which a stash on an unused branch may be dropped",
    )
    parser.add_argument(
        "--bypass-github", action="store_true", help="Skip PR lookup (PR status becomes 'none')"
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["text", "table"],
        default="text",
        help="text: pipe-delimited report protocol; table: rich tables (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    subparsers.add_parser(
        "consolidate",
        aliases=["audit"],
        help="Print the worktree, stash and branch report without changing anything",
    )

    plan_parser = subparsers.add_parser(
        "plan", help="Print the report and the proposed cleanup plan"
    )
    plan_parser.add_argument(
        "-o", "--output", metavar="FILE", help="Write the plan as JSON for approval"
    )

    apply_parser = subparsers.add_parser("apply", help="Execute an approved plan file")
    apply_parser.add_argument("plan_file", metavar="FILE", help="Approved plan JSON")
    apply_parser.add_argument(
        "--approve-recommended",
        action="store_true",
        help="Resolve remaining ASK items to their default (KEEP where there is none)",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - report what would be removed without changing anything",
    )

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
