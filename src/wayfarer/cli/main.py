"""Typer CLI application."""
from __future__ import annotations

import logging
from typing import List, Optional

import typer

app = typer.Typer(
    name="wayfarer",
    help="A turn-based adventure: explore, get ambushed, fight your way out",
    no_args_is_help=True,
)

_config_option = typer.Option(None, "--config", "-c", help="Path to config.toml")


def _bootstrap(config: Optional[str], verbose: bool = False):
    from wayfarer.app import GameApp

    game_app = GameApp(config_path=config)
    level = logging.DEBUG if verbose else getattr(logging, game_app.settings.logging.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    return game_app


@app.command()
def create(
    name: str = typer.Argument(..., help="Character name"),
    race: str = typer.Option("human", "--race", "-r", help="Race definition id"),
    config: Optional[str] = _config_option,
) -> None:
    """Create a new level 1 character."""
    game_app = _bootstrap(config)
    character = game_app.create_character(name, race)
    game_app.display.show_character(character)


@app.command()
def show(
    character_id: int = typer.Argument(..., help="Character id"),
    config: Optional[str] = _config_option,
) -> None:
    """Show a saved character."""
    game_app = _bootstrap(config)
    character = game_app.characters.get(character_id)
    if character is None:
        game_app.display.console.print(f"[red]No character with id {character_id}.[/red]")
        raise typer.Exit(code=1)
    game_app.display.show_character(character)


@app.command()
def bestiary(
    level: int = typer.Option(1, "--level", "-l", help="Player level to rate difficulty against"),
    config: Optional[str] = _config_option,
) -> None:
    """List every known race and monster."""
    game_app = _bootstrap(config)
    game_app.display.show_bestiary(game_app.registry.all(), level)


@app.command()
def fight(
    character_id: int = typer.Argument(..., help="Character id"),
    enemy: Optional[List[str]] = typer.Option(None, "--enemy", "-e", help="Enemy definition id (repeatable)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible fights"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    config: Optional[str] = _config_option,
) -> None:
    """Start a fight. Without --enemy a random encounter is rolled."""
    game_app = _bootstrap(config, verbose)
    if seed is not None:
        game_app.rng.seed(seed)
    destination = game_app.fight(character_id, enemy or [])
    if destination is None:
        raise typer.Exit(code=1)
    game_app.display.console.print(f"[dim]Returning to {destination}.[/dim]")


if __name__ == "__main__":
    app()
