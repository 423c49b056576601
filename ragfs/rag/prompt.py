"""Prompt template for assembling retrieved context and the user query."""
from dataclasses import dataclass, field
from pathlib import Path
from string import Template

from ragfs import config
from ragfs.errors import PromptTemplateError

PROMPT_FIELDS = frozenset({"context", "user_query"})


@dataclass(frozen=True)
class PromptTemplate:
    """Parsed and validated prompt template.

    Uses string.Template syntax: ``$context`` and ``$user_query``. Validation
    happens once, at construction, so rendering cannot fail on the template.
    """

    source: str
    _template: Template = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        template = Template(self.source)
        if not template.is_valid():
            raise PromptTemplateError("Prompt template contains an invalid placeholder")

        identifiers = set(template.get_identifiers())
        unknown = identifiers - PROMPT_FIELDS
        if unknown:
            raise PromptTemplateError(
                f"Prompt template has unknown fields: {', '.join(sorted(unknown))}"
            )
        missing = PROMPT_FIELDS - identifiers
        if missing:
            raise PromptTemplateError(
                f"Prompt template is missing fields: {', '.join(sorted(missing))}"
            )

        object.__setattr__(self, "_template", template)

    def render(self, context: str, user_query: str) -> str:
        return self._template.substitute(context=context, user_query=user_query)


def load_prompt_template(path: Path = None) -> PromptTemplate:
    """Read and validate the prompt template file.

    Raises:
        PromptTemplateError: If the file cannot be read or is malformed
    """
    path = Path(path or config.PROMPT_TEMPLATE_PATH)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PromptTemplateError(f"Cannot read prompt template {path}: {e}") from e
    return PromptTemplate(source)
