"""OpenNebula template rendering for the machine driver."""

from __future__ import annotations

from typing import Any, List, Tuple, Union


def _quote(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class TemplateVector:
    """A ``NAME=[ ... ]`` block inside a template."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.values: List[Tuple[str, Any]] = []

    def add_value(self, key: str, value: Any) -> "TemplateVector":
        self.values.append((key, value))
        return self

    def __str__(self) -> str:
        body = ",\n".join(f"  {key}={_quote(value)}" for key, value in self.values)
        return f"{self.name}=[\n{body} ]"


class TemplateBuilder:
    """Collects attributes and vectors in insertion order and renders them."""

    def __init__(self) -> None:
        self.elements: List[Union[Tuple[str, Any], TemplateVector]] = []

    def add_value(self, key: str, value: Any) -> "TemplateBuilder":
        self.elements.append((key, value))
        return self

    def new_vector(self, name: str) -> TemplateVector:
        vector = TemplateVector(name)
        self.elements.append(vector)
        return vector

    def __str__(self) -> str:
        lines = []
        for element in self.elements:
            if isinstance(element, TemplateVector):
                lines.append(str(element))
            else:
                key, value = element
                lines.append(f"{key}={_quote(value)}")
        return "\n".join(lines)

    render = __str__
