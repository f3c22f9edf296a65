"""Prompt template model."""
from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Mapping

from ..exceptions import TemplateError


def _placeholders(template: str) -> tuple[str, ...]:
    names: list[str] = []
    for _, field_name, _, _ in Formatter().parse(template):
        if field_name is None:
            continue
        if not field_name.isidentifier():
            raise TemplateError(
                f"Invalid placeholder {{{field_name}}}", details={"placeholder": field_name}
            )
        if field_name not in names:
            names.append(field_name)
    return tuple(names)


@dataclass(frozen=True)
class PromptTemplate:
    """Named template with a fixed, ordered set of required variables.

    `input_variables` must list exactly the placeholders found in `template`,
    so a template cannot silently change shape.
    """
    name: str
    template: str
    input_variables: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        found = _placeholders(self.template)
        declared = tuple(self.input_variables)
        if set(found) != set(declared):
            raise TemplateError(
                f"Template '{self.name}' placeholders do not match its variables",
                details={"declared": list(declared), "found": list(found)},
            )
        object.__setattr__(self, "input_variables", declared)

    def render(self, variables: Mapping[str, Any]) -> str:
        missing = [v for v in self.input_variables if v not in variables]
        if missing:
            raise TemplateError(
                f"Missing variables for template '{self.name}': {', '.join(missing)}",
                details={"template": self.name, "missing": missing},
            )
        return self.template.format(**{v: variables[v] for v in self.input_variables})
