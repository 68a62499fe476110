"""
Theme Module

Rich style strings for every element the renderer draws. The palette is
chosen once at startup from the terminal's background hint and passed to
the renderer, so rendering stays a function of (state, theme).
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional


@dataclass(frozen=True)
class Theme:
    title: str = "bold bright_red"
    tagline: str = "italic bright_black"
    subtitle: str = "bold bright_white"
    menu_item: str = "white"
    menu_desc: str = "bright_black"
    selected: str = "bold bright_yellow"
    selected_desc: str = "magenta"
    bullet: str = "bold bright_red"
    disabled: str = "bright_black"
    help_key: str = "bold black on cyan"
    help_text: str = "bright_black"
    status: str = "bold bright_green"
    error: str = "bold bright_red"
    warning: str = "bright_yellow"
    box: str = "bright_black"
    active_box: str = "bright_cyan"
    placeholder: str = "italic bright_black"
    url: str = "underline bright_blue"
    media_tag: str = "black on green"
    thread_num: str = "bold black on blue"
    dim: str = "bright_black"
    input_label: str = "white"
    commit_time: str = "bright_magenta"
    ai_tag: str = "bold black on magenta"


DARK = Theme()

# Bright foregrounds wash out on a light background
LIGHT = replace(
    DARK,
    subtitle="bold black",
    menu_item="black",
    selected="bold blue",
    selected_desc="magenta",
    warning="yellow",
    status="bold green",
    error="bold red",
    active_box="blue",
    url="underline blue",
    commit_time="magenta",
    input_label="black",
)

# ANSI palette indices that are light backgrounds
_LIGHT_BACKGROUNDS = {7, 9, 10, 11, 12, 13, 14, 15}


def detect_theme(environ: Optional[Mapping[str, str]] = None) -> Theme:
    """
    Pick the light or dark palette from the COLORFGBG hint.

    COLORFGBG is "fg;bg" (sometimes "fg;default;bg"); the last field is the
    background's palette index. Without a usable hint the dark palette is used.

    Args:
        environ: Environment to read (defaults to os.environ)

    Returns:
        Theme: LIGHT or DARK
    """
    environ = os.environ if environ is None else environ
    value = environ.get("COLORFGBG", "")
    if not value:
        return DARK

    try:
        background = int(value.split(";")[-1])
    except ValueError:
        return DARK
    return LIGHT if background in _LIGHT_BACKGROUNDS else DARK
