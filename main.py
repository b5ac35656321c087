import os
import logging
import questionary
from typing import Callable, Optional, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from components.hormone_bank import HORMONE_NAMES, PARAMETER_FIELDS, DECAY_MIN, DECAY_MAX
from components.vad_projector import emotion_intensity, is_intense
from utils.factory import ComponentFactory
from utils.validate_config import load_and_validate_config

Number = TypeVar("Number", int, float)

console = Console()
logger = logging.getLogger(__name__)

MENU_CHOICES = [
    "Start simulation",
    "Stop simulation",
    "Inject hormone",
    "Edit hormone parameter",
    "Show current state",
    "Show recent history",
    "Save checkpoint",
    "Restore latest checkpoint",
    "Reset simulation",
    "Exit",
]


def setup_logging(config: dict) -> None:
    level = config.get("logging", {}).get("level", "INFO")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _prompt_numeric(
    message: str,
    default: Number,
    caster: Callable[[str], Number],
) -> Optional[Number]:
    """Prompt the user for a numeric value. Out-of-range values are accepted and clamped later."""

    default_str = str(default)

    def _validate(text: str):
        if text.strip() == "":
            return True
        try:
            caster(text)
        except (TypeError, ValueError):
            return "Please enter a valid number."
        return True

    answer = questionary.text(
        f"{message} (default: {default_str})",
        default=default_str,
        validate=_validate,
    ).ask()

    if answer is None:
        return None
    if answer.strip() == "":
        return default
    return caster(answer)


def _render_summary_card(title: str, payload: dict, *, subtitle: Optional[str] = None) -> None:
    """Display a bordered summary card for the provided section details."""

    body = Text()

    if not payload:
        body.append("Nothing to show.", style="grey70")
    else:
        for key, value in payload.items():
            body.append(f"{key}: ", style="bold white")
            body.append(f"{value}\n", style="white")

    console.print(
        Panel(
            body,
            title=title,
            subtitle=subtitle,
            border_style="magenta",
            box=box.DOUBLE,
        )
    )


def render_state(clock) -> None:
    """Show the current emotion, VAD triple and hormone parameters."""

    vad = clock.current_vad
    match = clock.current_match
    payload = {
        "clock": clock.state.value,
        "emotion": f"{match.label} ({match.confidence:.2f})" + (" [fallback]" if match.fallback else ""),
        "alternatives": ", ".join(f"{label} ({conf:.2f})" for label, conf in match.alternatives) or "-",
        "arousal": f"{vad.arousal:.1f}",
        "valence": f"{vad.valence:.1f}",
        "dominance": f"{vad.dominance:.1f}",
        "intensity": f"{emotion_intensity(vad):.1f}" + (" (intense)" if is_intense(vad) else ""),
    }
    _render_summary_card("Current State", payload, subtitle=f"{len(clock.history)} history records")

    table = Table(title="Hormones", box=box.ROUNDED)
    table.add_column("hormone", style="cyan")
    table.add_column("current", justify="right")
    table.add_column("force", justify="right")
    table.add_column("decay", justify="right")
    for name, params in clock.hormones.items():
        table.add_row(name, f"{params['current']:.1f}", f"{params['force']:.1f}", f"{params['decay']:.3f}")
    console.print(table)


def render_history(clock, limit: int = 10) -> None:
    records = clock.history[-limit:]
    table = Table(title=f"Last {len(records)} records", box=box.SIMPLE_HEAVY)
    for column in ("time", "emotion", "arousal", "valence", "dominance"):
        table.add_column(column, justify="right" if column != "emotion" else "left")
    for record in records:
        table.add_row(
            str(record.time),
            record.emotion,
            f"{record.arousal:.1f}",
            f"{record.valence:.1f}",
            f"{record.dominance:.1f}",
        )
    console.print(table)


def _choose_hormone() -> Optional[str]:
    return questionary.select(
        "Which hormone?",
        choices=[name.value for name in HORMONE_NAMES],
    ).ask()


def inject(clock) -> None:
    name = _choose_hormone()
    if name is None:
        return
    level = clock.inject_hormone(name)
    console.print(f":syringe: Injected {name} → {level:.1f}", style="green")


def edit_parameter(clock) -> None:
    name = _choose_hormone()
    if name is None:
        return
    field = questionary.select("Which parameter?", choices=list(PARAMETER_FIELDS)).ask()
    if field is None:
        return

    current = clock.hormones[name][field]
    if field == "decay":
        message = f"{name} decay ({DECAY_MIN}–{DECAY_MAX})"
    else:
        message = f"{name} force (0–100)"
    value = _prompt_numeric(message, current, float)
    if value is None:
        return

    stored = clock.set_parameter(name, field, value)
    if stored != value:
        console.print(f"[yellow]{value} is out of range, clamped to {stored}.[/]")
    console.print(f":white_check_mark: Set {name}.{field} → {stored}", style="green")


def save_checkpoint(clock, persistence_manager) -> None:
    if persistence_manager is None:
        console.print("[yellow]Persistence is disabled in the configuration.[/]")
        return
    state = clock.export_state()
    step = state["history"][-1]["time"] if state["history"] else 0
    if persistence_manager.save_checkpoint(state, step):
        console.print(f":floppy_disk: Checkpoint saved at t={step}.", style="green")
    else:
        console.print("[red]Checkpoint could not be written, see the log.[/]")


def restore_checkpoint(clock, persistence_manager) -> None:
    if persistence_manager is None:
        console.print("[yellow]Persistence is disabled in the configuration.[/]")
        return
    state = persistence_manager.load_latest_checkpoint()
    if state is None:
        console.print("[yellow]No usable checkpoint found.[/]")
        return
    clock.restore_state(state)
    console.print(":leftwards_arrow_with_hook: Checkpoint restored; the clock is stopped.", style="green")


def run_session(components: dict) -> None:
    """Interactive loop over the simulation controls."""

    clock = components["clock"]
    persistence_manager = components.get("persistence_manager")

    while True:
        choice = questionary.select("What would you like to do?", choices=MENU_CHOICES).ask()

        if choice is None or choice == "Exit":
            console.print("Exiting.")
            return
        if choice == "Start simulation":
            clock.start()
            console.print(f"[green]Running, one tick every {clock.interval:g}s.[/]")
        elif choice == "Stop simulation":
            clock.stop()
            console.print("[yellow]Stopped.[/]")
        elif choice == "Inject hormone":
            inject(clock)
        elif choice == "Edit hormone parameter":
            edit_parameter(clock)
        elif choice == "Show current state":
            render_state(clock)
        elif choice == "Show recent history":
            render_history(clock)
        elif choice == "Save checkpoint":
            save_checkpoint(clock, persistence_manager)
        elif choice == "Restore latest checkpoint":
            restore_checkpoint(clock, persistence_manager)
        elif choice == "Reset simulation":
            clock.reset()
            console.print("[yellow]Simulation reset to defaults.[/]")


def main(config_path="config.yaml"):
    """
    Main entry point with an interactive CLI.
    """
    console.print(Panel("Hormone–VAD Emotion Simulator", border_style="cyan", box=box.HEAVY))

    if not os.path.exists(config_path):
        console.print(f"[red]Error: `{config_path}` not found. Please ensure it exists in the root directory.[/]")
        return

    config = load_and_validate_config(config_path)
    setup_logging(config)

    factory = ComponentFactory(config=config)
    components = factory.get_all_components()
    if components.get("telemetry_manager"):
        components["telemetry_manager"].start_server()

    clock = components["clock"]
    try:
        render_state(clock)
        run_session(components)
    except KeyboardInterrupt:
        console.print("\n--- Interrupted by user ---")
    finally:
        clock.close()


if __name__ == "__main__":
    main()
