"""Rich output formatting for the featuregate CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from gate_engine.compatibility.models import Verdict
    from gate_engine.compatibility.registry import FeatureRegistry
    from gate_engine.context.models import DeploymentSnapshot


# ---------------------------------------------------------------------------
# Value colour mapping
# ---------------------------------------------------------------------------

_VALUE_COLOURS: dict[str, str] = {
    "enabled": "green",
    "required": "yellow",
    "disabled": "dim",
    "notRequired": "dim",
}


def _coloured(value: str) -> str:
    """Return a Rich markup string with the value colour-coded."""
    colour = _VALUE_COLOURS.get(value, "white")
    return f"[{colour}]{value}[/{colour}]"


# ---------------------------------------------------------------------------
# Feature list
# ---------------------------------------------------------------------------


def display_feature_list(console: Console, registry: FeatureRegistry) -> None:
    """Render a table of registered features and their descriptor axes.

    Parameters
    ----------
    console:
        Rich console to write to.
    registry:
        The feature registry to list.
    """
    if not len(registry):
        console.print("[dim]No features registered.[/dim]")
        return

    table = Table(
        title=f"Features ({len(registry)})",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    table.add_column("Feature", style="bold")
    table.add_column("ce")
    table.add_column("eeLite")
    table.add_column("eeLite License")
    table.add_column("cloud")
    table.add_column("selfHostedCloud")
    table.add_column("Entitlements")
    table.add_column("Mode")

    for feature_id, descriptor in registry.items():
        body = descriptor.to_dict()
        required = [name for name, value in body["entitlements"].items() if value == "required"]
        table.add_row(
            feature_id,
            _coloured(body["ce"]),
            _coloured(body["eeLite"]),
            _coloured(body["eeLiteLicense"]),
            _coloured(body["cloud"]),
            _coloured(body["selfHostedCloud"]),
            ", ".join(required) if required else "-",
            body["cliMode"],
        )

    console.print(table)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def display_snapshot(console: Console, snapshot: DeploymentSnapshot) -> None:
    """Render the deployment snapshot as a panel."""
    license_info = snapshot.license.to_dict()
    license_line = license_info["status"]
    if "expires_at" in license_info:
        license_line += f" (expires_at={license_info['expires_at']}"
        if "grace_ends_at" in license_info:
            license_line += f", grace_ends_at={license_info['grace_ends_at']}"
        license_line += ")"

    granted = [name for name, value in snapshot.entitlements.to_dict().items() if value]
    lines = [
        f"[bold]Plan:[/bold]         {snapshot.plan.value}",
        f"[bold]Mode:[/bold]         {snapshot.mode.value}",
        f"[bold]License:[/bold]      {license_line}",
        f"[bold]Entitlements:[/bold] {', '.join(granted) if granted else '(none)'}",
    ]
    console.print(Panel("\n".join(lines), title="Deployment Snapshot", border_style="blue"))


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------


def display_verdict(console: Console, feature_id: str, verdict: Verdict) -> None:
    """Render a verdict with its matched and unmatched reasons.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    feature_id:
        The feature that was evaluated.
    verdict:
        The evaluator's result.
    """
    colour = "green" if verdict.is_enabled else "red"
    console.print(
        Panel(
            f"[bold]{feature_id}[/bold] is [{colour}]{verdict.status.value}[/{colour}]",
            title="Feature Check",
            border_style=colour,
        )
    )

    table = Table(show_header=True, show_lines=False, expand=False)
    table.add_column("Reason", style="bold")
    table.add_column("Result")
    for reason in sorted(verdict.matched, key=lambda r: r.value):
        table.add_row(reason.value, "[green]match[/green]")
    for reason in sorted(verdict.unmatched, key=lambda r: r.value):
        table.add_row(reason.value, "[red]no match[/red]")
    console.print(table)

    display_snapshot(console, verdict.snapshot)
