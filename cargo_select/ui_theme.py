"""ANSI palettes for the selector screen."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the renderer."""

    name: str
    reset: str
    selected: str
    prompt: str
    kind_binary: str
    kind_example: str
    kind_test: str
    count: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    selected="\033[7m",
    prompt="\033[48;5;238;38;5;252m",
    kind_binary="\033[38;5;110m",
    kind_example="\033[38;5;229m",
    kind_test="\033[38;5;42m",
    count="\033[2;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    selected="\033[1;48;5;24;38;5;255m",
    prompt="\033[48;5;23;38;5;153m",
    kind_binary="\033[38;5;45m",
    kind_example="\033[38;5;117m",
    kind_test="\033[38;5;84m",
    count="\033[2;38;5;110m",
)

MONO_THEME = UITheme(
    name="mono",
    reset="\033[0m",
    selected="\033[7m",
    prompt="\033[4m",
    kind_binary="",
    kind_example="",
    kind_test="",
    count="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
    MONO_THEME.name: MONO_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def resolve_theme(name: str | None) -> UITheme:
    """Return the theme for ``name``, falling back to default for unknown names."""
    if not name:
        return DEFAULT_THEME
    return _THEMES.get(str(name).strip().lower(), DEFAULT_THEME)


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "MONO_THEME",
    "available_theme_names",
    "resolve_theme",
]
