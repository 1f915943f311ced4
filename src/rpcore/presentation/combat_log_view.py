from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rpcore.application.dtos import AttackOutcome

_CONSOLE = Console()

_BORDER_HIT = "red"
_BORDER_MISS = "grey50"
_BORDER_EFFECTS = "magenta"


def _ornate_title(title: str) -> str:
    return f"[bold yellow]⚔ {title} ⚔[/bold yellow]"


def _verdict(outcome: AttackOutcome) -> str:
    if outcome.is_critical_hit:
        return "[bold red]Critical Hit![/bold red]"
    if outcome.is_critical_miss:
        return "[bold]Critical Miss![/bold]"
    return "[green]Hit[/green]" if outcome.hit else "Miss"


def render_attack(
    outcome: AttackOutcome,
    target_hp: int,
    target_hp_max: int,
    console: Console | None = None,
) -> None:
    out = console or _CONSOLE
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold yellow", justify="right")
    table.add_column(style="white")
    table.add_row("Attacker", escape(outcome.attacker_breakdown))
    table.add_row("Defender", escape(outcome.defender_breakdown))
    table.add_row("Result", _verdict(outcome))
    if outcome.hit:
        table.add_row("Damage", str(outcome.damage))
    table.add_row(escape(outcome.defender_name), f"{target_hp}/{target_hp_max} HP")
    out.print(
        Panel.fit(
            table,
            title=_ornate_title(escape(f"{outcome.attacker_name} vs {outcome.defender_name}")),
            subtitle=f"[dim]{outcome.policy}[/dim]",
            subtitle_align="left",
            border_style=_BORDER_HIT if outcome.hit else _BORDER_MISS,
        )
    )


def render_effects(character_name: str, explanation: str, console: Console | None = None) -> None:
    out = console or _CONSOLE
    body = escape(explanation) if explanation else "[dim]No active effects[/dim]"
    out.print(
        Panel.fit(
            body,
            title=_ornate_title(escape(character_name)),
            subtitle="[dim]active effects[/dim]",
            subtitle_align="left",
            border_style=_BORDER_EFFECTS,
        )
    )
