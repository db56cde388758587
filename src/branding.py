from __future__ import annotations

import shutil
from typing import Literal

# --------------------------------------------------
# Layout constants
# --------------------------------------------------

DEFAULT_WIDTH = 72
LOG_GUTTER_WIDTH = 10  # "INFO      " column rendered by RichHandler

Width = int | Literal["auto"]


def _resolve_width(width: Width) -> int:
    if width == "auto":
        try:
            cols = shutil.get_terminal_size().columns
        except OSError:
            cols = DEFAULT_WIDTH
        return max(DEFAULT_WIDTH, cols - LOG_GUTTER_WIDTH)
    return max(DEFAULT_WIDTH, int(width))


# --------------------------------------------------
# Banner
# --------------------------------------------------

DISCOTUBE_BANNER = r"""

  ____  _                _         _
 |  _ \(_)___  ___ ___ | |_ _   _| |__   ___
 | | | | / __|/ __/ _ \| __| | | | '_ \ / _ \
 | |_| | \__ \ (_| (_) | |_| |_| | |_) |  __/
 |____/|_|___/\___\___/ \__|\__,_|_.__/ \___|

"""


# --------------------------------------------------
# Headers / sections
# --------------------------------------------------


def DISCOTUBE_HEADER(
    title: str,
    *,
    width: Width = DEFAULT_WIDTH,
    pad: int = 6,
    motif: str = "(o)",
) -> str:
    title = title.strip()
    inner = max(_resolve_width(width) - 2, len(title) + pad * 2)

    filler = inner - len(motif)
    left = filler // 2
    right = filler - left

    rule = f"+{'-' * left}{motif}{'-' * right}+"
    mid = f"|{title.center(inner)}|"

    return f"\n{rule}\n{mid}\n{rule}\n\n"


def DISCOTUBE_SECTION_END(
    *,
    width: Width = DEFAULT_WIDTH,
    fill: str = "=",
) -> str:
    return f"\n{fill * _resolve_width(width)}\n"
