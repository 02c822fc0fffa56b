# stringloom/palette.py
# Thread colours: one lane per colour.

import math
import random
from typing import List, NamedTuple, Optional

# Channel sum below which a colour is near invisible on black
DARK_THRESHOLD = 150


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255

    def rgb(self):
        return self.r, self.g, self.b

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
GREY = Color(128, 128, 128)
RED, GREEN, BLUE = Color(255, 0, 0), Color(0, 255, 0), Color(0, 0, 255)
CYAN, MAGENTA, YELLOW = Color(0, 255, 255), Color(255, 0, 255), Color(255, 255, 0)


def _round(v: float) -> int:
    # half up, not half to even
    return int(math.floor(v + 0.5))


def hsl_to_rgb(h: float, s: float, l: float) -> Color:
    """h in degrees [0, 360), s and l in [0, 1]."""
    c = (1 - abs(2 * l - 1)) * s
    hp = h / 60
    x = c * (1 - abs((hp % 2) - 1))
    if 0 <= hp < 1:
        r1, g1, b1 = c, x, 0
    elif 1 <= hp < 2:
        r1, g1, b1 = x, c, 0
    elif 2 <= hp < 3:
        r1, g1, b1 = 0, c, x
    elif 3 <= hp < 4:
        r1, g1, b1 = 0, x, c
    elif 4 <= hp < 5:
        r1, g1, b1 = x, 0, c
    elif 5 <= hp < 6:
        r1, g1, b1 = c, 0, x
    else:
        r1, g1, b1 = 0, 0, 0
    m = l - c / 2
    return Color(_round((r1 + m) * 255), _round((g1 + m) * 255), _round((b1 + m) * 255))


def generate_palette(n: int, black_background: bool = False,
                     rng: Optional[random.Random] = None) -> List[Color]:
    """
    n thread colours for the given background.

    Small counts use fixed high-contrast sets; larger counts sample evenly
    spaced hues and, on black, replace too-dark samples with random bright
    hues drawn from `rng`.
    """
    n = int(n)
    if n <= 0:
        return []
    if n == 1:
        return [WHITE] if black_background else [BLACK]
    if n == 2:
        return [WHITE, GREY] if black_background else [BLACK, WHITE]
    if n == 3:
        return [RED, GREEN, BLUE]
    if n == 5:
        # black is invisible on a black background, grey takes its slot
        return [CYAN, MAGENTA, YELLOW, WHITE, GREY] if black_background else [CYAN, MAGENTA, YELLOW, BLACK, WHITE]

    lightness = 0.6 if black_background else 0.5
    colors = []
    for i in range(n):
        c = hsl_to_rgb(i / n * 360, 1, lightness)
        if black_background and sum(c.rgb()) < DARK_THRESHOLD:
            continue
        colors.append(c)

    rng = rng or random.Random()
    while len(colors) < n:
        colors.append(hsl_to_rgb(rng.random() * 360, 1, 0.7))
    return colors
