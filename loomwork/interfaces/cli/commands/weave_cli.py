"""
Weave command: run one generation pass over an architecture description.

Architecture:
- Uses WeaverService for loading and weaving
- Does NOT call workflows or components directly
"""

from __future__ import annotations

import argparse

from loomwork.helpers.exceptions import ArchitectureLoadError
from loomwork.interfaces.cli.cli_ui import InfoPanel, TableDisplay, print_error, print_info, print_success, print_warning
from loomwork.services.weaver_svc import WeaverService, load_architecture


def cmd_weave(args: argparse.Namespace) -> int:
    """
    Weave the architecture named by args.module into the workspace.

    Returns 0 when every task succeeded, 1 when any error was recorded.
    """
    try:
        architecture = load_architecture(args.module)
    except ArchitectureLoadError as e:
        print_error(str(e))
        return 2

    dry_run = getattr(args, "dry_run", False)
    service = WeaverService()
    result = service.weave(
        architecture,
        workspace_root=getattr(args, "workspace", None),
        package_filter=getattr(args, "package", None),
        verbose=True if getattr(args, "verbose", False) else None,
        max_workers=getattr(args, "workers", None),
        dry_run=True if dry_run else None,
    )

    content = f"""[bold]Generated:[/bold] {result.files_generated}
[bold]Modified:[/bold] {result.files_modified}
[bold]Unchanged:[/bold] {result.files_unchanged}
[bold]Blocks removed:[/bold] {result.blocks_removed}
[bold]Tasks run:[/bold] {result.tasks_run}  [bold]skipped:[/bold] {result.tasks_skipped}"""
    title = "Weave Complete (dry run)" if dry_run else "Weave Complete"
    if dry_run:
        print_info("Dry run: no file was written")

    if result.ok:
        InfoPanel.show(title, content, "green")
        print_success(f"{result.tasks_run} task(s) woven without errors")
        return 0

    InfoPanel.show(title, content, "yellow")
    TableDisplay.show_errors(result)
    print_warning(f"{len(result.errors)} error(s) recorded; re-run after fixing them")
    return 1
