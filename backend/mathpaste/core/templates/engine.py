from jinja2 import BaseLoader, Environment, select_autoescape

# Word-pasteable HTML document. ``body`` is pre-rendered markup and must not
# be escaped; every other variable is.
WORD_DOCUMENT_TEMPLATE = (
    "<!DOCTYPE html>"
    '<html xmlns:m="{{ math_ns }}">'
    '<head><meta charset="UTF-8"><title>{{ title }}</title></head>'
    "<body>{{ body | safe }}</body>"
    "</html>"
)


def create_jinja_env(loader: BaseLoader | None = None) -> Environment:
    """Create the Jinja2 environment used for HTML envelopes."""
    return Environment(
        loader=loader,
        autoescape=select_autoescape(default_for_string=True, default=True),
        keep_trailing_newline=False,
    )


def render_string(template_string: str, variables: dict) -> str:
    """Render a template string with the given variables."""
    env = create_jinja_env()
    template = env.from_string(template_string)
    return template.render(**variables)
