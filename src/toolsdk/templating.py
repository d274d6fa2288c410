# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Minimal mustache-style template rendering for descriptor values."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Final

TemplateVariables = Mapping[str, object]
TemplateRenderer = Callable[[str, TemplateVariables], str]

_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(r"\{\{\s*([A-Za-z_][\w.-]*)\s*\}\}")


class _TemplateProxy(dict[str, str]):
    """Dictionary proxy rendering unknown placeholders as empty strings."""

    def __init__(self, variables: TemplateVariables) -> None:
        super().__init__({key: "" if value is None else str(value) for key, value in variables.items()})

    def __missing__(self, key: str) -> str:
        return ""


def render_template(template: str | None, variables: TemplateVariables) -> str:
    """Substitute ``{{ name }}`` placeholders in ``template``.

    Args:
        template: Template text; ``None`` renders as an empty string.
        variables: Values available to the template.

    Returns:
        str: Rendered text with every placeholder replaced.
    """

    if not template:
        return ""
    proxy = _TemplateProxy(variables)
    return _PLACEHOLDER.sub(lambda match: proxy[match.group(1)], template)


__all__ = ["TemplateRenderer", "TemplateVariables", "render_template"]
