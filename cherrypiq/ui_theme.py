"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes (list/stats/help/chrome). Syntax
highlighting style for previews remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    border: str
    header: str
    cursor: str
    directory: str
    ignored: str
    selected_marker: str
    selected_name: str
    heading: str
    help_key: str
    help_dim: str
    status_error: str
    prompt_border: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    border="\033[38;5;252m",
    header="\033[44;37m",
    cursor="\033[44m",
    directory="\033[1m",
    ignored="\033[38;5;244m",
    selected_marker="\033[31m",
    selected_name="\033[33m",
    heading="\033[1m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
    status_error="\033[41;37m",
    prompt_border="\033[32m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    border="\033[2;38;5;31m",
    header="\033[48;5;24;38;5;255m",
    cursor="\033[48;5;24m",
    directory="\033[1;38;5;45m",
    ignored="\033[2;38;5;110m",
    selected_marker="\033[38;5;214m",
    selected_name="\033[38;5;117m",
    heading="\033[1;38;5;45m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
    status_error="\033[48;5;88;38;5;255m",
    prompt_border="\033[38;5;45m",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> list[str]:
    return sorted(_THEMES)


def get_theme(name: str | None) -> UITheme:
    """Return the named theme, falling back to the default for unknown names."""
    if name is None:
        return DEFAULT_THEME
    return _THEMES.get(name.strip().lower(), DEFAULT_THEME)


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "available_theme_names",
    "get_theme",
]
