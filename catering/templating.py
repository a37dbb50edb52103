from fastapi.templating import Jinja2Templates

from catering import config

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))


def render(name: str, **context) -> str:
    """Render a template to a string (email bodies, print sheets)."""
    return templates.env.get_template(name).render(**context)
