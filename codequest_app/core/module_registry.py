"""Utilities for declaratively registering application modules.

Each blueprint-backed module is described with metadata so that registration
is automated. A module package may expose ``setup_module(app)``, which is
called once after its blueprint is registered (routes and event handlers are
imported there).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """Describe how a blueprint-backed module is registered with the app."""

    import_path: str
    attribute: str
    url_prefix: Optional[str] = None
    version: str = "1.0"

    def load_module(self):
        return import_string(self.import_path)

    def load_blueprint(self) -> Blueprint:
        """Import and return the blueprint described by this definition."""

        module = self.load_module()
        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                "Expected attribute '%s' in '%s' to be a Flask Blueprint, got %r instead"
                % (self.attribute, self.import_path, type(blueprint))
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> None:
    """Register all modules in the provided iterable with the Flask app."""

    for module in modules:
        package = module.load_module()
        setup_module = getattr(package, 'setup_module', None)
        if callable(setup_module):
            setup_module(app)

        blueprint = module.load_blueprint()
        app.register_blueprint(blueprint, url_prefix=module.url_prefix)
        app.logger.debug(
            "Registered module %s (version %s) at prefix %s",
            module.import_path,
            module.version,
            module.url_prefix or blueprint.url_prefix or "<root>",
        )


def register_default_modules(app: Flask) -> None:
    """Convenience helper that registers the built-in CodeQuest modules."""

    register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Iterable[ModuleDefinition] = (
    ModuleDefinition("codequest_app.modules.auth", "auth_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.progression", "progression_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.course", "course_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.flashcard", "flashcard_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.assessment", "assessment_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.gamification", "gamification_api_bp", version="1.0"),
    ModuleDefinition("codequest_app.modules.notification", "notification_api_bp", version="1.0"),
)
