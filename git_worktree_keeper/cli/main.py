"""Command-line interface for git-worktree-keeper"""

import sys
from typing import Optional, Sequence

from rich.console import Console

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import UnresolvedPlanError, WorktreeKeeperError
from git_worktree_keeper.formatters import format_action_item, format_execution_result
from git_worktree_keeper.logging_config import setup_logging
from git_worktree_keeper.models.plan import Outcome
from git_worktree_keeper.services import DisplayService, ReportService, load_plan, save_plan

# stdout carries the report protocol; everything else goes to stderr
console = Console(stderr=True)


def _emit(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _build_config(parsed_args) -> Config:
    return Config(
        protected_branches=list(parsed_args.protected),
        main_branch=parsed_args.main_branch,
        stash_stale_days=parsed_args.stash_stale_days,
        dry_run=getattr(parsed_args, "dry_run", False),
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        output_format=parsed_args.output_format,
        bypass_github=parsed_args.bypass_github,
    )


def _show_snapshot(snapshot, config: Config) -> None:
    if config.output_format == "table":
        DisplayService(console).display_snapshot(snapshot)
    else:
        _emit(ReportService().render_snapshot(snapshot))


def run_consolidate(keeper: WorktreeKeeper, config: Config) -> int:
    _show_snapshot(keeper.audit(), config)
    return 0


def run_plan(keeper: WorktreeKeeper, config: Config, output: Optional[str]) -> int:
    snapshot, plan = keeper.propose()
    _show_snapshot(snapshot, config)
    if config.output_format == "table":
        DisplayService(console).display_plan(plan)
    else:
        _emit("\n" + ReportService().render_plan(plan))

    if output:
        path = save_plan(plan, output)
        console.print(f"[green]Plan written to {path}[/green]")
        pending = len(plan.pending_items)
        if pending:
            console.print(
                f"[yellow]Resolve {pending} ASK item(s) in {path} before running 'apply'[/yellow]"
            )
    return 0


def run_apply(keeper: WorktreeKeeper, config: Config, plan_file: str, approve_recommended: bool) -> int:
    plan = load_plan(plan_file)
    if config.dry_run:
        console.print("[yellow]Dry run: no changes will be made[/yellow]")

    def progress(result):
        console.print(format_execution_result(result), markup=False)

    results, after = keeper.apply(plan, approve_recommended=approve_recommended, on_result=progress)

    if config.output_format == "table":
        display = DisplayService(console)
        display.display_results(results)
        display.display_snapshot(after)
    else:
        _emit(ReportService().render_results(results))
        _emit("\n" + ReportService().render_snapshot(after))

    failed = [r for r in results if r.outcome == Outcome.FAILED]
    if failed:
        console.print(f"[red]{len(failed)} action(s) failed; see RESULTS[/red]")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    keeper = None
    try:
        parsed_args = parse_args(argv)

        # Setup logging before creating WorktreeKeeper
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = _build_config(parsed_args)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token":
                    continue
                console.print(f"  {key}: {value}", markup=False)

        keeper = WorktreeKeeper(parsed_args.repo, config)

        if parsed_args.command in ("consolidate", "audit"):
            return run_consolidate(keeper, config)
        if parsed_args.command == "plan":
            return run_plan(keeper, config, parsed_args.output)
        return run_apply(keeper, config, parsed_args.plan_file, parsed_args.approve_recommended)

    except UnresolvedPlanError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        for item in e.items:
            console.print(f"  {format_action_item(item)}", markup=False)
        console.print("[dim]Edit the plan file or pass --approve-recommended[/dim]")
        return 1
    except WorktreeKeeperError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"Error: {e}", style="red", markup=False)
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1
    finally:
        if keeper is not None:
            keeper.close()


if __name__ == "__main__":
    sys.exit(main())
