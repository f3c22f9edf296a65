"""Prompt service - read-only registry of named templates."""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..exceptions import TemplateError
from ..models.template import PromptTemplate
from ..prompts import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)


class PromptService:
    """Templates are registered once at startup and only read afterwards."""

    def __init__(self, templates: Iterable[PromptTemplate] = ()):
        registry: dict[str, PromptTemplate] = {}
        for template in templates:
            if template.name in registry:
                raise TemplateError(f"Duplicate template: {template.name}")
            registry[template.name] = template
        self._templates: Mapping[str, PromptTemplate] = MappingProxyType(registry)
        logger.debug(f"Registered templates: {', '.join(self._templates)}")

    @property
    def names(self) -> list[str]:
        return list(self._templates)

    def get(self, name: str) -> PromptTemplate:
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateError(f"Unknown template: {name}") from None

    def render(self, name: str, variables: Mapping[str, Any]) -> str:
        """Render a template; every placeholder must have a value."""
        return self.get(name).render(variables)


def default_prompt_service() -> PromptService:
    return PromptService(DEFAULT_TEMPLATES)
