"""Combat-specific display helpers — turn-based combat UI."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wayfarer.mechanics.combat_math import combat_power, difficulty_rating
from wayfarer.models.character import Character
from wayfarer.models.combat import CombatPhase, CombatSnapshot, CombatUnit
from wayfarer.models.entity import EntityDefinition
from wayfarer.models.event import LogEntry, LogSeverity

console = Console()

_SEVERITY_STYLES = {
    LogSeverity.INFO: "white",
    LogSeverity.SUCCESS: "green",
    LogSeverity.WARNING: "yellow",
    LogSeverity.ERROR: "red",
}


def hp_bar(current: int, maximum: int, width: int = 12) -> str:
    pct = max(0.0, current / maximum) if maximum > 0 else 0.0
    filled = int(pct * width)
    if pct > 0.6:
        color = "green"
    elif pct > 0.3:
        color = "yellow"
    else:
        color = "red"
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim]"


def threat_label(level: int) -> str:
    if level <= 2:
        return "Low"
    if level <= 4:
        return "Medium"
    if level <= 6:
        return "High"
    return "Extreme"


class CombatDisplay:
    def __init__(self, out: Console | None = None) -> None:
        self.console = out or console

    def show_entry(self, entry: LogEntry) -> None:
        style = _SEVERITY_STYLES.get(entry.severity, "white")
        self.console.print(f"  [{style}]{entry.message}[/{style}]")

    def show_state(self, snapshot: CombatSnapshot) -> None:
        content = Text()
        if snapshot.phase == CombatPhase.PLAYER_TURN:
            content.append("  Your Turn\n\n", style="bold green")
        elif snapshot.phase == CombatPhase.ENEMY_TURN:
            content.append("  Enemy Turn\n\n", style="bold red")

        content.append("  Your Party\n", style="bold")
        for unit in snapshot.player_units:
            marker = ">" if unit.id == snapshot.selected_player_id else " "
            content.append_text(Text.from_markup(self._unit_line(unit, marker)))

        content.append("\n  Enemies\n", style="bold")
        for index, unit in enumerate(snapshot.enemy_units, 1):
            if unit.id == snapshot.acting_enemy_id:
                marker = "!"
            elif unit.id == snapshot.selected_enemy_id:
                marker = "*" if snapshot.targeting else ">"
            else:
                marker = " "
            line = self._unit_line(unit, marker, index=index)
            if not unit.is_alive:
                line = line.rstrip("\n") + "  [dim]defeated[/dim]\n"
            else:
                line = line.rstrip("\n") + f"  [dim]threat: {threat_label(unit.level)}[/dim]\n"
            content.append_text(Text.from_markup(line))

        self.console.print(Panel(content, border_style="red", box=box.ROUNDED, width=76))

    def show_menu(self) -> None:
        self.console.print(
            "  [cyan bold][1][/cyan bold] Attack   [cyan bold][2][/cyan bold] Defend   "
            "[cyan bold][3][/cyan bold] Flee   [cyan bold][4][/cyan bold] Next target   "
            "[cyan bold][5][/cyan bold] Forfeit   [dim](t N selects enemy N)[/dim]"
        )

    def show_bestiary(self, definitions: list[EntityDefinition], player_level: int) -> None:
        table = Table(title="Bestiary", box=box.SIMPLE_HEAVY)
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Lvl", justify="right")
        table.add_column("HP", justify="right")
        table.add_column("ATK", justify="right")
        table.add_column("Power", justify="right")
        table.add_column("Difficulty")
        for d in sorted(definitions, key=lambda d: (d.level, d.id)):
            table.add_row(
                d.id, d.name, str(d.level), str(d.max_hp), str(d.attack),
                str(combat_power(d)), difficulty_rating(d, player_level),
            )
        self.console.print(table)

    def show_character(self, character: Character) -> None:
        body = (
            f"[bold]{character.name}[/bold] (#{character.id}) — {character.race_id}\n"
            f"Level {character.level}  XP {character.experience}\n"
            f"HP {hp_bar(character.current_hp, character.max_hp)} {character.current_hp}/{character.max_hp}\n"
            f"Attack {character.attack}  Coins {character.currency}"
        )
        self.console.print(Panel(body, border_style="cyan", box=box.ROUNDED, width=48))

    @staticmethod
    def _unit_line(unit: CombatUnit, marker: str, index: int | None = None) -> str:
        prefix = f"{index}." if index is not None else "  "
        return (
            f"  {marker} {prefix} {unit.name:<16} Lv{unit.level:<3} "
            f"{hp_bar(unit.current_hp, unit.max_hp)} {unit.current_hp}/{unit.max_hp}\n"
        )
