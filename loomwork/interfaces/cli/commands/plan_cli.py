"""
Plan command: show which generation tasks a weave would run.
"""

from __future__ import annotations

import argparse

from loomwork.helpers.exceptions import ArchitectureLoadError
from loomwork.interfaces.cli.cli_ui import InfoPanel, TableDisplay, print_error, print_warning
from loomwork.services.weaver_svc import WeaverService, load_architecture


def cmd_plan(args: argparse.Namespace) -> int:
    """Build and display the plan without writing anything."""
    try:
        architecture = load_architecture(args.module)
    except ArchitectureLoadError as e:
        print_error(str(e))
        return 2

    plan = WeaverService().plan(architecture, verbose=getattr(args, "verbose", False))
    content = f"""[bold]Rings:[/bold] {len(plan.nodes)}
[bold]Edges:[/bold] {len(plan.edges)}
[bold]Capabilities:[/bold] {len(plan.capabilities)}
[bold]Tasks:[/bold] {len(plan.tasks)}"""
    InfoPanel.show(f"Plan for {architecture.source}", content)

    if not plan.tasks:
        print_warning("No edge matched a registered generator")
        return 0
    TableDisplay.show_plan(plan)
    return 0
