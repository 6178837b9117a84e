"""Dockerfile templates with ``{variable}`` placeholders."""

from __future__ import annotations

import re

from container_service.core.exceptions import PreviewError


class DockerfileTemplate:
    """A Dockerfile skeleton with ``{name}`` placeholders.

    Only ``{word}`` placeholders are substituted, so exec-form instructions
    such as ``CMD ["nginx", "-g", "daemon off;"]`` pass through untouched.

    Example::

        t = DockerfileTemplate("FROM python:{tag}\\nEXPOSE {port}", tag="alpine")
        dockerfile = t.render(port="8000")
    """

    _VAR_PATTERN = re.compile(r"\{(\w+)\}")

    def __init__(self, template: str, **defaults: str) -> None:
        self._template = template
        self._defaults: dict[str, str] = dict(defaults)

    @property
    def template(self) -> str:
        return self._template

    @property
    def variables(self) -> set[str]:
        """Placeholder names used in the template."""
        return set(self._VAR_PATTERN.findall(self._template))

    def render(self, **kwargs: str) -> str:
        """Substitute every placeholder.

        Raises:
            PreviewError: If a placeholder has neither a value nor a default.
        """
        merged = {**self._defaults, **kwargs}

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in merged:
                raise PreviewError(
                    f"missing value for template variable '{key}'",
                    code="MISSING_TEMPLATE_VARIABLE",
                    details={"variable": key},
                )
            return merged[key]

        return self._VAR_PATTERN.sub(_replace, self._template)

    def __repr__(self) -> str:
        return f"DockerfileTemplate({self._template!r})"
