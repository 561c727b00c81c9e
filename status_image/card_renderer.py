"""PNG status card drawn with Pillow.

Used by hosts that have no HTML rendering service. Layout, top to bottom:
primary bot header, list of every visible bot, resource bars, footer.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime

from PIL import Image, ImageDraw, ImageFont

from .formatter import format_duration, format_percentage, format_usage
from .models import BotInfo, MemoryUsage, SystemInfo, describe_status, platform_label

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------

_LIGHT_PAL = {
    "bg": (255, 255, 255),       # white background
    "section": (248, 250, 252),  # slate-50
    "border": (226, 232, 240),   # slate-200
    "accent": (37, 99, 235),     # blue-600
    "bar_bg": (226, 232, 240),
    "warn": (202, 138, 4),       # amber-600
    "high": (220, 38, 38),       # red-600
    "text_pri": (15, 23, 42),
    "text_sec": (71, 85, 105),
    "text_mut": (148, 163, 184),
}

_DARK_PAL = {
    "bg": (8, 12, 18),
    "section": (11, 16, 24),
    "border": (30, 45, 61),
    "accent": (0, 245, 212),
    "bar_bg": (30, 45, 61),
    "warn": (240, 185, 11),
    "high": (248, 113, 113),
    "text_pri": (244, 246, 248),
    "text_sec": (148, 163, 184),
    "text_mut": (100, 116, 139),
}

CARD_W = 780
_PAD = 40
_HEADER_H = 130
_ROW_H = 44
_BAR_ROW_H = 46
_FOOTER_H = 56
_AVATAR = 72

# ---------------------------------------------------------------------------
# Font management
# ---------------------------------------------------------------------------
_UBUNTU_DIR = "/usr/share/fonts/truetype/ubuntu/"
_DEJAVU_DIR = "/usr/share/fonts/truetype/dejavu/"
_NOTO_DIR = "/usr/share/fonts/opentype/noto/"
_MAC_SUPP_DIR = "/System/Library/Fonts/Supplemental/"
_MAC_SYS_DIR = "/System/Library/Fonts/"


def _try_font(path: str, size: int) -> ImageFont.FreeTypeFont | None:
    try:
        return ImageFont.truetype(path, size)
    except (OSError, IOError):
        return None


def _load_any(paths: list[str], size: int) -> ImageFont.FreeTypeFont:
    for path in paths:
        f = _try_font(path, size)
        if f is not None:
            return f
    return ImageFont.load_default()


_FONT_CACHE: dict | None = None


def _fonts() -> dict:
    global _FONT_CACHE
    if _FONT_CACHE:
        return _FONT_CACHE

    bold_paths = [
        _NOTO_DIR + "NotoSansCJK-Bold.ttc", _UBUNTU_DIR + "Ubuntu-B.ttf",
        _DEJAVU_DIR + "DejaVuSans-Bold.ttf", _MAC_SUPP_DIR + "Arial Bold.ttf",
        _MAC_SYS_DIR + "Helvetica.ttc",
    ]
    reg_paths = [
        _NOTO_DIR + "NotoSansCJK-Regular.ttc", _UBUNTU_DIR + "Ubuntu-R.ttf",
        _DEJAVU_DIR + "DejaVuSans.ttf", _MAC_SUPP_DIR + "Arial.ttf",
        _MAC_SYS_DIR + "Helvetica.ttc",
    ]

    _FONT_CACHE = {
        "b14": _load_any(bold_paths, 14),
        "b16": _load_any(bold_paths, 16),
        "b28": _load_any(bold_paths, 28),
        "r14": _load_any(reg_paths, 14),
        "r16": _load_any(reg_paths, 16),
    }
    return _FONT_CACHE


# ---------------------------------------------------------------------------
# Low-level drawing helpers
# ---------------------------------------------------------------------------


def _textsize(draw: ImageDraw.ImageDraw, text: str, font) -> tuple[int, int, int, int]:
    return draw.textbbox((0, 0), text, font=font)


def _text(draw: ImageDraw.ImageDraw, x: int, y: int, text: str, font, fill: tuple) -> None:
    """Draw text at (x, y) with bbox-offset correction so (x,y) is true top-left."""
    bb = _textsize(draw, text, font)
    draw.text((x - bb[0], y - bb[1]), text, font=font, fill=fill)


def _text_right(draw: ImageDraw.ImageDraw, rx: int, y: int, text: str, font, fill: tuple) -> None:
    bb = _textsize(draw, text, font)
    _text(draw, rx - (bb[2] - bb[0]), y, text, font, fill)


def _badge(draw: ImageDraw.ImageDraw, x: int, y: int, text: str, color: str, font) -> int:
    """Rounded pill badge with white text. Returns right edge x."""
    bb = _textsize(draw, text, font)
    w = bb[2] - bb[0] + 16
    h = bb[3] - bb[1] + 8
    draw.rounded_rectangle([(x, y), (x + w, y + h)], radius=h // 2, fill=color)
    draw.text((x + 8 - bb[0], y + 4 - bb[1]), text, font=font, fill=(255, 255, 255))
    return x + w


def _divider(draw: ImageDraw.ImageDraw, y: int, p: dict) -> None:
    draw.line([(0, y), (CARD_W, y)], fill=p["border"], width=1)


def _level_color(fraction: float | None, p: dict) -> tuple:
    value = fraction or 0.0
    if value >= 0.9:
        return p["high"]
    if value >= 0.8:
        return p["warn"]
    return p["accent"]


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _draw_header(draw: ImageDraw.ImageDraw, y: int, bot: BotInfo, p: dict) -> int:
    f = _fonts()
    status = describe_status(bot.status)

    ay = y + (_HEADER_H - _AVATAR) // 2
    draw.ellipse([(_PAD, ay), (_PAD + _AVATAR, ay + _AVATAR)], fill=p["section"],
                 outline=status.color, width=3)
    initial = (bot.name[:1] or "?").upper()
    bb = _textsize(draw, initial, f["b28"])
    _text(draw, _PAD + (_AVATAR - (bb[2] - bb[0])) // 2,
          ay + (_AVATAR - (bb[3] - bb[1])) // 2, initial, f["b28"], p["text_pri"])

    tx = _PAD + _AVATAR + 20
    name = bot.name or bot.sid
    _text(draw, tx, y + 30, name, f["b28"], p["text_pri"])
    name_w = _textsize(draw, name, f["b28"])[2]
    _badge(draw, tx + name_w + 12, y + 34, status.text, status.color, f["b14"])

    sub = f"{platform_label(bot.platform)}  ·  up {format_duration(bot.running_time)}"
    _text(draw, tx, y + 72, sub, f["r16"], p["text_sec"])
    msgs = f"yesterday  received {bot.messages.receive}  ·  sent {bot.messages.send}"
    _text(draw, tx, y + 96, msgs, f["r14"], p["text_mut"])

    end_y = y + _HEADER_H
    _divider(draw, end_y, p)
    return end_y + 1


def _draw_bot_rows(draw: ImageDraw.ImageDraw, y: int, bots: list[BotInfo], p: dict) -> int:
    f = _fonts()
    for bot in bots:
        status = describe_status(bot.status)
        cy = y + _ROW_H // 2
        draw.ellipse([(_PAD, cy - 5), (_PAD + 10, cy + 5)], fill=status.color)
        _text(draw, _PAD + 22, cy - 9, bot.name or bot.sid, f["b16"], p["text_pri"])
        detail = (
            f"{platform_label(bot.platform)}  ·  {status.text}  ·  "
            f"{format_duration(bot.running_time)}"
        )
        _text_right(draw, CARD_W - _PAD, cy - 8, detail, f["r14"], p["text_sec"])
        y += _ROW_H
    _divider(draw, y, p)
    return y + 1


def _draw_bar(draw: ImageDraw.ImageDraw, y: int, label: str, fraction: float | None,
              detail: str, p: dict) -> int:
    f = _fonts()
    _text(draw, _PAD, y + 14, label, f["b16"], p["text_pri"])
    bar_x0 = _PAD + 110
    bar_x1 = CARD_W - _PAD - 190
    bar_y = y + 18
    draw.rounded_rectangle([(bar_x0, bar_y), (bar_x1, bar_y + 10)], radius=5, fill=p["bar_bg"])
    filled = int((bar_x1 - bar_x0) * min(1.0, max(0.0, fraction or 0.0)))
    if filled > 0:
        draw.rounded_rectangle([(bar_x0, bar_y), (bar_x0 + filled, bar_y + 10)],
                               radius=5, fill=_level_color(fraction, p))
    _text_right(draw, CARD_W - _PAD, y + 8, format_percentage(fraction), f["b16"], p["text_pri"])
    if detail:
        _text_right(draw, CARD_W - _PAD, y + 28, detail, f["r14"], p["text_mut"])
    return y + _BAR_ROW_H


def _draw_metrics(draw: ImageDraw.ImageDraw, y: int, snapshot: SystemInfo, p: dict) -> int:
    s = snapshot.system
    rows: list[tuple[str, float | None, MemoryUsage | None]] = [
        ("CPU", s.cpu_usage, None),
        ("Memory", s.memory.percentage, s.memory),
        ("Swap", s.swap.percentage, s.swap),
        ("Disk", s.disk.percentage, s.disk),
    ]
    y += 8
    for label, fraction, usage in rows:
        detail = format_usage(usage.used, usage.total) if usage else ""
        y = _draw_bar(draw, y, label, fraction, detail, p)
    y += 8
    _divider(draw, y, p)
    return y + 1


def _draw_footer(draw: ImageDraw.ImageDraw, y: int, snapshot: SystemInfo, p: dict) -> None:
    f = _fonts()
    s = snapshot.system
    left = f"{s.os}  ·  Python {s.python_version}"
    _text(draw, _PAD, y + 20, left, f["r14"], p["text_sec"])
    ts = datetime.now().strftime("%Y-%m-%d %H:%M")
    _text_right(draw, CARD_W - _PAD, y + 20, ts, f["r14"], p["text_mut"])


def card_height(bot_count: int) -> int:
    return _HEADER_H + 1 + bot_count * _ROW_H + 1 + 4 * _BAR_ROW_H + 16 + 1 + _FOOTER_H


def build_status_card(
    snapshot: SystemInfo,
    primary: BotInfo,
    ordered: list[BotInfo],
    theme: str = "light",
) -> io.BytesIO:
    """Draw the status card and return it as PNG bytes positioned at 0."""
    p = _DARK_PAL if theme == "dark" else _LIGHT_PAL
    height = card_height(len(ordered))
    img = Image.new("RGB", (CARD_W, height), p["bg"])
    draw = ImageDraw.Draw(img)

    draw.rectangle([(0, 0), (CARD_W, 3)], fill=p["accent"])
    y = _draw_header(draw, 0, primary, p)
    y = _draw_bot_rows(draw, y, ordered, p)
    y = _draw_metrics(draw, y, snapshot, p)
    _draw_footer(draw, y, snapshot, p)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    logger.debug("Rendered %dx%d status card for %s", CARD_W, height, primary.sid)
    return buf
