"""HTML themes for the status card.

Each theme turns a snapshot into a self-contained HTML document that the
host's rendering service rasterizes. Themes only lay out data; choosing the
primary bot is done here via select_primary so every theme agrees on it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from html import escape
from typing import Callable

from .formatter import format_bytes, format_duration, format_percentage, format_usage
from .models import BotInfo, SystemInfo, describe_status, platform_label
from .selector import select_primary

HTML_THEMES = ("default", "nightdream", "yenai")

_DARK_MASK = "0, 0, 0"
_LIGHT_MASK = "220, 224, 232"

_OS_ICONS = (
    ("windows", "\U0001fa9f"),
    ("android", "\U0001f916"),
    ("macos", "\U0001f34e"),
    ("darwin", "\U0001f34e"),
    ("linux", "\U0001f427"),
)


@dataclass(frozen=True)
class TemplateOptions:
    snapshot: SystemInfo
    background: str | None = None
    active_sid: str | None = None
    active_platform: str | None = None
    mask_opacity: float = 0.5
    dark_mode: bool = False


def generate(theme: str, options: TemplateOptions) -> str:
    try:
        render = _THEMES[theme]
    except KeyError:
        raise ValueError(f"Unknown HTML theme: {theme}") from None
    primary, ordered = select_primary(
        options.snapshot.bots, options.active_sid, options.active_platform
    )
    return render(options, primary, ordered)


# ---------------------------------------------------------------------------
#  Shared pieces
# ---------------------------------------------------------------------------


def _page(body: str, css: str, options: TemplateOptions) -> str:
    if options.background:
        bg = f"background: url('{escape(options.background, quote=True)}') center / cover;"
    else:
        bg = "background: linear-gradient(135deg, #1e3c72, #2a5298);"
    return (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="utf-8">\n'
        f"<style>body {{ margin: 0; width: 720px; {bg} "
        "font-family: 'Noto Sans', 'Segoe UI', sans-serif; }\n"
        f"{css}</style></head>\n"
        f"<body>{body}</body></html>"
    )


def _ring(fraction: float | None, gradient_id: str, start: str, end: str) -> str:
    """SVG progress ring for a 0-1 fraction."""
    radius = 30
    circumference = 2 * math.pi * radius
    offset = circumference - (fraction or 0.0) * circumference
    return (
        '<svg class="ring" viewBox="0 0 80 80">'
        f'<defs><linearGradient id="{gradient_id}" x1="0%" y1="0%" x2="100%" y2="0%">'
        f'<stop offset="0%" stop-color="{start}"/><stop offset="100%" stop-color="{end}"/>'
        "</linearGradient></defs>"
        '<circle cx="40" cy="40" r="30" fill="none" stroke="rgba(127,127,127,0.25)" stroke-width="6"/>'
        f'<circle cx="40" cy="40" r="30" fill="none" stroke="url(#{gradient_id})" '
        f'stroke-width="6" stroke-linecap="round" stroke-dasharray="{circumference:.2f}" '
        f'stroke-dashoffset="{offset:.2f}" transform="rotate(-90 40 40)"/>'
        "</svg>"
    )


def _avatar(bot: BotInfo) -> str:
    if bot.avatar:
        return f'<img class="avatar" src="{escape(bot.avatar, quote=True)}">'
    initial = escape(bot.name[:1].upper() or "?")
    return f'<div class="avatar placeholder">{initial}</div>'


def _mask_rgb(options: TemplateOptions) -> str:
    return _DARK_MASK if options.dark_mode else _LIGHT_MASK


def _fg(options: TemplateOptions) -> str:
    return "#fff" if options.dark_mode else "#1f2430"


def _os_icon(os_name: str) -> str:
    lowered = os_name.lower()
    for key, icon in _OS_ICONS:
        if key in lowered:
            return icon
    return "\U0001f5a5"


# ---------------------------------------------------------------------------
#  default theme — primary hero, bot tabs, resource meters
# ---------------------------------------------------------------------------

_DEFAULT_CSS = """
.card { margin: 24px; padding: 28px; border-radius: 24px; color: %(fg)s;
        background: rgba(%(mask_rgb)s, %(mask)s); backdrop-filter: blur(12px); }
.hero { display: flex; align-items: center; gap: 20px; }
.avatar { width: 88px; height: 88px; border-radius: 50%%; object-fit: cover; }
.placeholder { display: flex; align-items: center; justify-content: center;
               background: #555; font-size: 40px; }
.name { font-size: 30px; font-weight: 700; }
.sub { opacity: .8; font-size: 15px; margin-top: 4px; }
.badge { display: inline-block; padding: 2px 10px; border-radius: 999px;
         font-size: 13px; margin-left: 8px; }
.tabs { display: flex; flex-wrap: wrap; gap: 8px; margin: 20px 0; }
.tab { padding: 6px 12px; border-radius: 12px; background: rgba(127,127,127,.18);
       font-size: 13px; }
.tab.active { background: rgba(127,127,127,.4); font-weight: 700; }
.dot { display: inline-block; width: 8px; height: 8px; border-radius: 50%%;
       margin-right: 6px; }
.meters { display: flex; justify-content: space-between; }
.meter { width: 30%%; text-align: center; position: relative; }
.ring { width: 110px; height: 110px; }
.value { position: absolute; top: 40px; left: 0; right: 0; font-size: 22px;
         font-weight: 700; }
.label { font-size: 14px; opacity: .85; }
.detail { font-size: 12px; opacity: .7; }
.footer { margin-top: 20px; font-size: 12px; opacity: .75;
          display: flex; justify-content: space-between; }
"""


def _default_theme(options: TemplateOptions, primary: BotInfo, ordered: list[BotInfo]) -> str:
    system = options.snapshot.system
    status = describe_status(primary.status)

    tabs = []
    for bot in ordered:
        s = describe_status(bot.status)
        active = " active" if bot is primary else ""
        tabs.append(
            f'<div class="tab{active}"><span class="dot" style="background:{s.color}"></span>'
            f"{escape(bot.name or bot.sid)} · {escape(platform_label(bot.platform))}</div>"
        )

    meters = [
        ("CPU", system.cpu_usage, "", "cpu", "#4facfe", "#00f2fe"),
        ("Memory", system.memory.percentage,
         format_usage(system.memory.used, system.memory.total), "mem", "#43e97b", "#38f9d7"),
        ("Swap", system.swap.percentage,
         format_usage(system.swap.used, system.swap.total), "swap", "#fa709a", "#fee140"),
    ]
    meter_html = "".join(
        f'<div class="meter">{_ring(value, gid, start, end)}'
        f'<div class="value">{format_percentage(value)}</div>'
        f'<div class="label">{label}</div><div class="detail">{escape(detail)}</div></div>'
        for label, value, detail, gid, start, end in meters
    )

    body = (
        '<div class="card">'
        f'<div class="hero">{_avatar(primary)}<div>'
        f'<div class="name">{escape(primary.name)}'
        f'<span class="badge" style="background:{status.color}">{escape(status.text)}</span></div>'
        f'<div class="sub">{escape(platform_label(primary.platform))} · '
        f"up {format_duration(primary.running_time)}</div>"
        f'<div class="sub">yesterday: received {primary.messages.receive} · '
        f"sent {primary.messages.send}</div>"
        "</div></div>"
        f'<div class="tabs">{"".join(tabs)}</div>'
        f'<div class="meters">{meter_html}</div>'
        f'<div class="footer"><span>{_os_icon(system.os)} {escape(system.os)}</span>'
        f"<span>Python {escape(system.python_version)} · {escape(system.implementation)}</span>"
        f"<span>process up {format_duration(system.uptime)}</span></div>"
        "</div>"
    )
    css = _DEFAULT_CSS % {
        "mask": f"{options.mask_opacity:.2f}",
        "mask_rgb": _mask_rgb(options),
        "fg": _fg(options),
    }
    return _page(body, css, options)


# ---------------------------------------------------------------------------
#  nightdream theme — primary bot only, with disk usage
# ---------------------------------------------------------------------------

_NIGHTDREAM_CSS = """
.panel { margin: 32px; padding: 32px; border-radius: 20px;
         background: rgba(%(mask_rgb)s, %(mask)s); color: %(fg)s; }
.head { display: flex; align-items: center; gap: 18px; }
.avatar { width: 72px; height: 72px; border-radius: 50%%;
          border: 3px solid %(status)s; object-fit: cover; }
.placeholder { display: flex; align-items: center; justify-content: center;
               background: #666; font-size: 32px; }
.title { font-size: 26px; font-weight: 700; }
.uptime { font-size: 14px; opacity: .75; }
.rows { margin-top: 24px; }
.row { display: flex; align-items: center; margin: 10px 0; font-size: 15px; }
.row .key { width: 80px; }
.bar { flex: 1; height: 10px; border-radius: 5px; background: rgba(127,127,127,.3);
       margin: 0 12px; overflow: hidden; }
.fill { height: 100%%; background: %(status)s; }
.foot { margin-top: 20px; font-size: 13px; opacity: .7; }
"""


def _nightdream_theme(options: TemplateOptions, primary: BotInfo, ordered: list[BotInfo]) -> str:
    system = options.snapshot.system
    status = describe_status(primary.status)

    rows = "".join(
        f'<div class="row"><span class="key">{key}</span>'
        f'<div class="bar"><div class="fill" style="width:{(value or 0) * 100:.1f}%"></div></div>'
        f"<span>{format_percentage(value)}</span></div>"
        for key, value in (
            ("CPU", system.cpu_usage),
            ("Memory", system.memory.percentage),
            ("Disk", system.disk.percentage),
        )
    )

    body = (
        '<div class="panel">'
        f'<div class="head">{_avatar(primary)}<div>'
        f'<div class="title">{escape(primary.name)} | {escape(platform_label(primary.platform))}</div>'
        f'<div class="uptime">{escape(status.text)} · {format_duration(primary.running_time)}</div>'
        "</div></div>"
        f'<div class="rows">{rows}</div>'
        f'<div class="foot">{_os_icon(system.os)} {escape(system.os)} · '
        f"Python {escape(system.python_version)} · "
        f"disk {format_bytes(system.disk.used)} of {format_bytes(system.disk.total)}</div>"
        "</div>"
    )
    css = _NIGHTDREAM_CSS % {
        "mask": f"{options.mask_opacity:.2f}",
        "mask_rgb": "0, 0, 0" if options.dark_mode else "255, 255, 255",
        "fg": "#eee" if options.dark_mode else "#222",
        "status": status.color,
    }
    return _page(body, css, options)


# ---------------------------------------------------------------------------
#  yenai theme — one box per bot with message counts, CPU/RAM circles
# ---------------------------------------------------------------------------

_YENAI_CSS = """
.container { margin: 20px; color: %(fg)s; }
.box { margin-bottom: 14px; padding: 18px 22px; border-radius: 16px;
       background: rgba(%(mask_rgb)s, %(mask)s); }
.botInfo { display: flex; align-items: center; gap: 22px; }
.avatar-box { text-align: center; width: 96px; }
.avatar { width: 84px; height: 84px; border-radius: 50%%; object-fit: cover; }
.placeholder { display: flex; align-items: center; justify-content: center;
               background: #888; font-size: 36px; margin: 0 auto; }
.status-light { display: inline-block; width: 10px; height: 10px;
                border-radius: 50%%; margin-right: 6px; }
.status-text { display: inline; font-size: 13px; }
.header { flex: 1; }
.header h1 { margin: 0; font-size: 24px; }
.header hr { border: 0; height: 1px; background: rgba(127,127,127,.5); margin: 8px 0; }
.header p { margin: 4px 0; font-size: 14px; display: flex; gap: 18px; }
.mainHardware { display: flex; justify-content: space-around; list-style: none;
                margin: 0; padding: 0; }
.li { text-align: center; position: relative; width: 120px; }
.ring { width: 110px; height: 110px; }
.num { position: absolute; top: 40px; left: 0; right: 0; font-size: 20px;
       font-weight: 700; }
.speed { display: flex; justify-content: space-between; font-size: 15px; }
.copyright { text-align: center; font-size: 12px; opacity: .8; }
.version { font-weight: 700; }
"""

_LEVEL_COLORS = (
    (0.9, "#e74c3c"),
    (0.8, "#f39c12"),
)
_LOW_COLOR = "#2ecc71"


def _level_color(fraction: float | None) -> str:
    for threshold, color in _LEVEL_COLORS:
        if (fraction or 0.0) >= threshold:
            return color
    return _LOW_COLOR


def _yenai_bot_box(bot: BotInfo) -> str:
    status = describe_status(bot.status)
    return (
        '<div class="box"><div class="botInfo">'
        f'<div class="avatar-box">{_avatar(bot)}<div>'
        f'<span class="status-light {status.key}" style="background:{status.color}"></span>'
        f'<div class="status-text">{escape(status.text)}</div></div></div>'
        f'<div class="header"><h1>{escape(bot.name)}</h1><hr>'
        f'<p><span class="platform">{escape(platform_label(bot.platform))}</span>'
        f'<span class="running-time">up {format_duration(bot.running_time)}</span></p>'
        f'<p><span class="sent">yesterday sent {bot.messages.send}</span>'
        f'<span class="received">yesterday received {bot.messages.receive}</span></p>'
        "</div></div></div>"
    )


def _yenai_theme(options: TemplateOptions, primary: BotInfo, ordered: list[BotInfo]) -> str:
    system = options.snapshot.system

    circles = "".join(
        f'<li class="li">{_ring(value, gid, _level_color(value), _level_color(value))}'
        f'<div class="num">{format_percentage(value)}</div>'
        f"<summary>{label}</summary></li>"
        for label, value, gid in (
            ("CPU", system.cpu_usage, "yenai-cpu"),
            ("RAM", system.memory.percentage, "yenai-ram"),
        )
    )

    body = (
        '<div class="container">'
        + "".join(_yenai_bot_box(bot) for bot in options.snapshot.bots)
        + f'<div class="box"><ul class="mainHardware">{circles}</ul></div>'
        f'<div class="box"><div class="speed"><span>System</span>'
        f"<span>{_os_icon(system.os)} {escape(system.os)}</span></div></div>"
        f'<div class="copyright">Python <span class="version">{escape(system.python_version)}</span>'
        f' &amp; <span class="version">{escape(system.implementation)}</span></div>'
        "</div>"
    )
    css = _YENAI_CSS % {
        "mask": f"{options.mask_opacity:.2f}",
        "mask_rgb": _mask_rgb(options),
        "fg": _fg(options),
    }
    return _page(body, css, options)


_THEMES: dict[str, Callable[[TemplateOptions, BotInfo, list[BotInfo]], str]] = {
    "default": _default_theme,
    "nightdream": _nightdream_theme,
    "yenai": _yenai_theme,
}
