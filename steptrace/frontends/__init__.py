"""Tree-sitter frontends that build the syntax node model, one per language."""

from __future__ import annotations

import importlib

from ._base import BaseFrontend, Frontend

# language -> (module, class); modules load on first use
_FRONTENDS: dict[str, tuple[str, str]] = {
    "javascript": ("javascript", "JavaScriptFrontend"),
}

SUPPORTED_FRONTEND_LANGUAGES: tuple[str, ...] = tuple(_FRONTENDS)


def get_frontend(language: str) -> BaseFrontend:
    """Return a fresh frontend for *language*.

    Raises ``ValueError`` when no frontend is registered for it.
    """
    try:
        module_name, class_name = _FRONTENDS[language]
    except KeyError:
        raise ValueError(
            f"No frontend for language {language!r};"
            f" supported: {', '.join(SUPPORTED_FRONTEND_LANGUAGES)}"
        ) from None
    module = importlib.import_module(f".{module_name}", package=__package__)
    return getattr(module, class_name)()


__all__ = [
    "BaseFrontend",
    "Frontend",
    "get_frontend",
    "SUPPORTED_FRONTEND_LANGUAGES",
]
