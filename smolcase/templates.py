"""Template substitution for `smolcase apply`.

Placeholders look like {{SECRET_NAME}}. Names with no readable secret are
left as {{MISSING:SECRET_NAME}} so the gap is visible in the output.
"""

import re
from dataclasses import dataclass, field
from typing import Mapping

PLACEHOLDER = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")


@dataclass
class TemplateResult:
    """Rendered template and the placeholders that could not be filled."""

    content: str
    substituted: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def apply_template(template: str, secrets: Mapping[str, str]) -> TemplateResult:
    """
    Replace {{NAME}} placeholders with secret values.

    Args:
        template: Template text
        secrets: Readable secrets by key

    Returns:
        TemplateResult with the rendered text
    """
    result = TemplateResult(content="")

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in secrets:
            if name not in result.substituted:
                result.substituted.append(name)
            return secrets[name]
        if name not in result.missing:
            result.missing.append(name)
        return f"{{{{MISSING:{name}}}}}"

    result.content = PLACEHOLDER.sub(replace, template)
    return result
