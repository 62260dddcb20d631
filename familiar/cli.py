import argparse
import logging
import os
import random
import sys
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from familiar import __version__, storage, templates
from familiar.art import choose_animation_key
from familiar.conditions import Condition, ConditionSet
from familiar.decay import apply_time_step
from familiar.errors import FamiliarError, StorageError
from familiar.pet import Pet
from familiar.render import frame_renderable, play_animation, prompt_glyph, show_pet, stat_card

logger = logging.getLogger("familiar")

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: Optional[str] = None):
    level = (level or os.environ.get("FAMILIAR_LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING), format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)], force=True,
    )


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="familiar", description="A terminal pet that lives in your prompt")
    parser.add_argument("--config", help="Path to the pet state file")
    parser.add_argument("--log-level", help="Logging level (default WARNING)")
    parser.add_argument("-v", "--version", action="store_true", help="Print version information")
    sub = parser.add_subparsers(dest="command")

    summon = sub.add_parser("summon", help="Summon a familiar (create new or restore dismissed)")
    summon.add_argument("args", nargs="*", metavar="[type] [name]")
    summon.add_argument("--global", dest="use_global", action="store_true", help="Create global familiar")

    status = sub.add_parser("status", help="Show familiar status")
    status.add_argument("-v", "--verbose", action="store_true", help="Show verbose stats card")

    sub.add_parser("feed", help="Feed your familiar")
    sub.add_parser("play", help="Play with your familiar")
    sub.add_parser("rest", help="Put your familiar to sleep (restorative sleep)")
    sub.add_parser("heal", help="Heal your familiar (boost energy and happiness, remove infirm)")
    message = sub.add_parser("message", help="Set a message for your familiar")
    message.add_argument("text", nargs="+")
    ack = sub.add_parser("acknowledge", help="Acknowledge your familiar (clears message, improves mood)")
    ack.add_argument("-s", "--silent", action="store_true", help="Silent mode: no output")
    sub.add_parser("awaken", help="Awaken your familiar from stone or sleep state")
    sub.add_parser("ossify", help="Turn your familiar to stone")
    sub.add_parser("dismiss", help="Dismiss your familiar (soft delete - can be restored)")
    sub.add_parser("banish", help="Banish your familiar (permanent delete)")

    admin = sub.add_parser("admin", help="Administrative commands")
    admin_sub = admin.add_subparsers(dest="admin_command")
    admin_sub.add_parser("health", help="Health glyph for shell prompts")
    art_cmd = admin_sub.add_parser("art", help="Show art for a state, or 'list' the available ones")
    art_cmd.add_argument("state")
    art_cmd.add_argument("-e", "--evolution", type=int, default=-1, help="Evolution level to preview")
    art_cmd.add_argument("-t", "--type", dest="pet_type", help="Built-in pet type to preview")
    update = admin_sub.add_parser("update", help="Refresh the config from its built-in template (keeps customizations)")
    update.add_argument("pet_type", nargs="?", help="Template to use (default: the pet's own type)")

    return parser.parse_args(argv)


# --- Loading / saving ---
def load_current(args):
    state_path = storage.locate_state_file(Path.cwd(), args.config)
    pet = storage.load_pet(storage.config_path_for(state_path), state_path)
    return pet, state_path


def run_stateful(args, command):
    """Load, decay, run ``command(pet, now)``, save."""
    pet, state_path = load_current(args)
    now = time.time()
    apply_time_step(pet, now)
    message, _ = command(pet, now)
    # decay always moves the checkpoint, so the state is always written
    storage.save_pet_state(pet, state_path)
    if message: console.print(message)
    return 0


def cmd_summon(args):
    base_dir = storage.home_dir() if args.use_global else Path.cwd()
    pet_dir = storage.pet_dir_for(base_dir)
    if (pet_dir / storage.STATE_FILE).exists():
        raise FamiliarError("a familiar already exists. Use 'dismiss' to soft-delete it first")

    if not args.args:
        released = storage.find_released(pet_dir)
        if released:
            storage.restore_released(pet_dir, released[0])
            pet = storage.load_pet(pet_dir / storage.CONFIG_FILE, pet_dir / storage.STATE_FILE)
            console.print(f"[bold green]Familiar '{pet.display_name}' restored![/bold green]")
            return 0
        pet_type, name = templates.DEFAULT_PET_TYPE, random.choice(templates.FAMILIAR_NAMES)
    elif len(args.args) == 1:
        released = storage.find_released_by_name(pet_dir, args.args[0])
        if released:
            storage.restore_released(pet_dir, released)
            console.print(f"[bold green]Familiar '{escape(args.args[0])}' restored![/bold green]")
            return 0
        pet_type, name = templates.DEFAULT_PET_TYPE, args.args[0]
    else:
        pet_type, name = args.args[0], " ".join(args.args[1:])

    storage.init_pet(base_dir, pet_type, name, time.time())
    console.print(f"[bold green]Familiar '{escape(name)}' summoned![/bold green]")
    return 0


def cmd_status(args):
    pet, state_path = load_current(args)
    now = time.time()
    # boost before decay so decay does not eat it
    pet.status_boost()
    apply_time_step(pet, now)
    pet.visit(now)
    status = pet.status(now)
    if args.verbose:
        console.print(stat_card(pet, status))
    else:
        console.print(f"{pet.display_name} is {status.primary}\n")
    show_pet(console, pet, status)
    if pet.state.message:
        console.print(f"\n[bold]Message:[/bold] {escape(pet.state.message)}")
    storage.save_pet_state(pet, state_path)
    return 0


def cmd_acknowledge(args):
    def command(pet, now):
        msg, changed = pet.acknowledge()
        if args.silent:
            return None, changed
        status = pet.status(now)
        shown = status.primary
        if pet.state.hunger < 30 and pet.state.happiness > 70 and pet.state.energy > 50:
            shown = Condition.HAPPY
        console.print(f"{pet.display_name}\n{shown}\n")
        show_pet(console, pet, status)
        return msg, changed
    return run_stateful(args, command)


def cmd_refusable(args, command):
    """Stateful command whose refusal is an error (exit 1) rather than a note."""
    result = {}

    def wrapped(pet, now):
        msg, changed = command(pet, now)
        result["ok"] = changed
        return msg, changed

    run_stateful(args, wrapped)
    return 0 if result.get("ok") else 1


def cmd_dismiss(args):
    pet, state_path = load_current(args)
    released = storage.release_pet(state_path.parent, pet.name)
    logger.info("released to %s", released.state_path)
    console.print(f"Familiar '{pet.display_name}' has been dismissed (can be restored with 'summon')")
    return 0


def cmd_banish(args):
    state_path = storage.locate_state_file(Path.cwd(), args.config)
    try:
        name = storage.load_pet(storage.config_path_for(state_path), state_path).display_name
    except StorageError as e:
        # unreadable pets can still be banished
        logger.warning("banishing unreadable familiar: %s", e)
        name = "your familiar"
    storage.banish_pet(storage.config_path_for(state_path), state_path)
    console.print(f"[red]Familiar '{name}' has been banished (permanently deleted)[/red]")
    return 0


def cmd_admin_health(args):
    def command(pet, now):
        console.print(prompt_glyph(pet), end="")
        return None, False
    return run_stateful(args, command)


def cmd_admin_art(args):
    if args.pet_type:
        if args.pet_type not in templates.TEMPLATES:
            raise FamiliarError(f"unknown pet type '{args.pet_type}'")
        pet = Pet(templates.template_config(args.pet_type, "TemplatePet", time.time()))
        evolution = args.evolution if args.evolution >= 0 else 1
    else:
        pet, _ = load_current(args)
        evolution = args.evolution if args.evolution >= 0 else pet.state.evolution
    animations = pet.config.animations

    if args.state == "list":
        if not animations:
            console.print("No animations available")
            return 0
        console.print("Available animation states:")
        for key in sorted(animations):
            anim = animations[key]
            console.print(f"  {key} ({anim.source}, {len(anim.frames)} frame(s))")
        return 0

    if evolution == 0:
        key = "egg"
    else:
        try:
            cond = Condition(args.state)
        except ValueError:
            cond = None
        if cond is not None or args.state == "default":
            key = choose_animation_key(ConditionSet([cond] if cond else []), evolution, animations)
        elif args.state in animations:
            key = args.state
        else:
            raise FamiliarError(f"unknown state '{args.state}'. Use 'familiar admin art list' to see available states")
        if key not in animations:
            key = args.state
    anim = animations.get(key)
    if anim is None or not anim.frames:
        raise FamiliarError(f"animation for state '{args.state}' at evolution {evolution} not found")
    if len(anim.frames) > 1:
        play_animation(console, anim)
    else:
        console.print(frame_renderable(anim, anim.frames[0]))
    return 0


def cmd_admin_update(args):
    pet, state_path = load_current(args)
    pet_type = args.pet_type or pet.config.pet_type
    if pet_type not in templates.TEMPLATES:
        raise FamiliarError(f"unknown pet type '{pet_type}'. Try: {', '.join(templates.available_types())}")
    template = templates.template_config(pet_type, pet.config.name, pet.config.created_at)
    pet.config = templates.merge_config(pet.config, template)
    storage.save_pet_config(pet, storage.config_path_for(state_path))
    logger.info("config for %s refreshed from %s", pet.name, pet_type)
    console.print(f"{pet.display_name}'s config has been updated from {pet_type} template")
    return 0


SIMPLE_COMMANDS = {
    "feed": lambda pet, now: pet.feed(now),
    "play": lambda pet, now: pet.play(now),
    "rest": lambda pet, now: pet.rest(now),
    "heal": lambda pet, now: pet.heal(),
}
REFUSABLE_COMMANDS = {
    "awaken": lambda pet, now: pet.awaken(now),
    "ossify": lambda pet, now: pet.ossify(),
}


def dispatch(args) -> int:
    if args.command == "summon": return cmd_summon(args)
    if args.command == "status": return cmd_status(args)
    if args.command in SIMPLE_COMMANDS: return run_stateful(args, SIMPLE_COMMANDS[args.command])
    if args.command in REFUSABLE_COMMANDS: return cmd_refusable(args, REFUSABLE_COMMANDS[args.command])
    if args.command == "message":
        text = " ".join(args.text)
        return run_stateful(args, lambda pet, now: pet.set_message(text))
    if args.command == "acknowledge": return cmd_acknowledge(args)
    if args.command == "dismiss": return cmd_dismiss(args)
    if args.command == "banish": return cmd_banish(args)
    if args.command == "admin":
        if args.admin_command == "health": return cmd_admin_health(args)
        if args.admin_command == "art": return cmd_admin_art(args)
        if args.admin_command == "update": return cmd_admin_update(args)
        console.print("Usage: familiar admin {health,art,update}")
        return 2
    console.print("[cyan]Commands: summon, status, feed, play, rest, heal, message, acknowledge, awaken, ossify, dismiss, banish, admin[/cyan]")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.log_level)
    if args.version:
        console.print(__version__)
        return 0
    try:
        return dispatch(args)
    except FamiliarError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
