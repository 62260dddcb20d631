"""Terminal output with rich: pet art, animations, the stat card and the prompt glyph."""
import time

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.style import Style
from rich.text import Text

from familiar import art
from familiar.conditions import Condition, format_conditions

UPPER_HALF = "▀"
LOWER_HALF = "▄"
FULL_BLOCK = "█"

PAW = "🐾"
MESSAGE_GLYPH = "▲"
HEALTH_GLYPH = "●"
# (minimum health, colour)
HEALTH_BANDS = ((80, "green"), (60, "yellow"), (40, "bright_yellow"), (20, "dark_orange"), (0, "red"))
STONE_COLOR = "bright_black"


def is_transparent(pixel) -> bool:
    if not pixel or pixel == "transparent":
        return True
    return set(pixel) <= {" "} or set(pixel) <= {"#"}


def hex_color(pixel: str) -> str:
    """Normalize "#abc"/"aabbcc" to "#aabbcc"; anything unreadable is black."""
    value = pixel.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    try:
        int(value, 16)
    except ValueError:
        return "#000000"
    return f"#{value.lower()}" if len(value) == 6 else "#000000"


def render_pixel_frame(pixels) -> Text:
    """Two pixel rows per terminal row using half-block characters."""
    text = Text()
    for y in range(0, len(pixels), 2):
        top_row = pixels[y]
        bottom_row = pixels[y + 1] if y + 1 < len(pixels) else []
        for x in range(max(len(top_row), len(bottom_row))):
            top = top_row[x] if x < len(top_row) else ""
            bottom = bottom_row[x] if x < len(bottom_row) else ""
            if is_transparent(top) and is_transparent(bottom):
                text.append(" ")
            elif is_transparent(top):
                text.append(LOWER_HALF, Style(color=hex_color(bottom)))
            elif is_transparent(bottom):
                text.append(UPPER_HALF, Style(color=hex_color(top)))
            elif hex_color(top) == hex_color(bottom):
                text.append(FULL_BLOCK, Style(color=hex_color(top)))
            else:
                text.append(UPPER_HALF, Style(color=hex_color(top), bgcolor=hex_color(bottom)))
        if y + 2 < len(pixels):
            text.append("\n")
    return text


def frame_renderable(animation, frame):
    if animation.is_pixel:
        return render_pixel_frame(frame.pixels)
    return Text(frame.art.rstrip("\r\n"))


def play_animation(console: Console, animation, sleep=time.sleep):
    """Cycle through the frames in place with ``rich.live.Live``."""
    frames = art.iter_frames(animation)
    first = next(frames, None)
    if first is None:
        return
    frame, seconds = first
    with Live(frame_renderable(animation, frame), console=console, auto_refresh=False, transient=False) as live:
        for frame, next_seconds in frames:
            sleep(seconds)
            live.update(frame_renderable(animation, frame), refresh=True)
            seconds = next_seconds


def show_pet(console: Console, pet, status, animate=None):
    """Print the art for ``status``; animate only on a terminal and when the pet allows it."""
    animations = pet.config.animations
    key = art.choose_animation_key(status.conditions, pet.state.evolution, animations)
    animation = animations.get(key)
    if animation is None or not animation.frames:
        console.print(Text(art.fallback_art(status.conditions, pet.state.evolution)))
        return key
    if animate is None:
        animate = pet.config.allow_ansi_animations and console.is_terminal
    if animate and len(animation.frames) > 1:
        play_animation(console, animation)
    else:
        console.print(frame_renderable(animation, animation.frames[0]))
    return key


# --- Stat card ---
def create_progress_bar(label, completed, total, low_color, mid_color, high_color, low_threshold, high_threshold, reverse_colors=False):
    progress = Progress(TextColumn(f"{label}:{' '*(10-len(label))}"), BarColumn(bar_width=20), TextColumn("{task.completed:>3.0f}"))
    style = mid_color
    if reverse_colors:
        if completed <= low_threshold: style = high_color
        elif completed >= high_threshold: style = low_color
    else:
        if completed <= low_threshold: style = low_color
        elif completed >= high_threshold: style = high_color
    task_id = progress.add_task(label.lower(), total=total, completed=completed)
    progress.update(task_id, style=style)
    return progress


def stat_card(pet, status):
    """Verbose status panel: condition summary plus one bar per vital."""
    s = pet.state
    bars = Group(
        Text(f"state: {format_conditions(status.ordered)}"),
        create_progress_bar("Health", status.health, 100, "red", "yellow", "green", 20, 80),
        create_progress_bar("Hunger", s.hunger, 100, "red", "yellow", "green", 40, 80, True),
        create_progress_bar("Happiness", s.happiness, 100, "red", "yellow", "green", 30, 70),
        create_progress_bar("Energy", s.energy, 100, "red", "yellow", "green", 30, 75),
        Text(f"evolution: {s.evolution}"),
    )
    border = "bright_black" if Condition.STONE in status.conditions else "blue"
    return Panel(bars, title=f"{pet.display_name} is {status.primary}", border_style=border)


def health_color(health: int, stone: bool) -> str:
    if stone:
        return STONE_COLOR
    for floor, color in HEALTH_BANDS:
        if health >= floor:
            return color
    return HEALTH_BANDS[-1][1]


def prompt_glyph(pet) -> Text:
    """Compact status for shell prompts: a paw and a coloured dot (triangle for a message)."""
    health = pet.health()
    glyph = MESSAGE_GLYPH if pet.state.message else HEALTH_GLYPH
    return Text.assemble(f"{PAW} ", (glyph, health_color(health, pet.is_stone_now())))
