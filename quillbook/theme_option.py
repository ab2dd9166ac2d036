"""Label for an entry of the theme picker."""

from __future__ import annotations


def theme_option(param: str, default_theme: str) -> str:
    """Return ``param``, marked ``(default)`` when it names the default theme."""
    if not isinstance(param, str):
        raise TypeError("Param 0 with String type is required for theme_option helper.")
    if not isinstance(default_theme, str):
        raise TypeError("Type error for `default_theme`, string expected")
    if param.lower() == default_theme.lower():
        return f"{param} (default)"
    return param