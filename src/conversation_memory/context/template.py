"""Prompt template rendering.

Templates use ``str.format`` placeholders (``{history}``, ``{input}``).
Literal braces are written doubled (``{{`` / ``}}``).

Classes
-------
- PromptTemplate  — validated template with named input variables
"""
from __future__ import annotations

import string

from conversation_memory.errors import TemplateError

_FORMATTER = string.Formatter()


def _parse_variables(template: str) -> tuple[str, ...]:
    """Return the distinct top-level field names in ``template``, in order."""
    try:
        fields = [name for _, name, _, _ in _FORMATTER.parse(template) if name is not None]
    except ValueError as exc:
        raise TemplateError(f"Malformed template: {exc}") from exc

    names: list[str] = []
    for field_name in fields:
        if not field_name or field_name.isdigit():
            raise TemplateError(
                "Positional placeholders are not supported; use named variables."
            )
        root = field_name.split(".", 1)[0].split("[", 1)[0]
        if root not in names:
            names.append(root)
    return tuple(names)


class PromptTemplate:
    """A prompt with named placeholders, checked when constructed.

    Parameters
    ----------
    template:
        Template text.

    Raises
    ------
    TemplateError
        If the template text cannot be parsed.

    Example
    -------
    >>> PromptTemplate("History:\\n{history}\\nInput: {input}").input_variables
    ('history', 'input')
    """

    def __init__(self, template: str) -> None:
        self.template = template
        self.input_variables: tuple[str, ...] = _parse_variables(template)

    def render(self, **variables: object) -> str:
        """Substitute ``variables`` into the template.

        Extra variables are ignored.

        Raises
        ------
        TemplateError
            If any required variable is missing.
        """
        missing = tuple(name for name in self.input_variables if name not in variables)
        if missing:
            raise TemplateError(
                f"Missing template variable(s): {', '.join(missing)}",
                missing=missing,
            )
        try:
            return self.template.format(**variables)
        except (AttributeError, IndexError, KeyError, ValueError) as exc:
            raise TemplateError(f"Could not render template: {exc}") from exc

    def __repr__(self) -> str:
        return f"PromptTemplate(input_variables={list(self.input_variables)!r})"
