"""SVG fragment preparation and template rendering for the vector generators.

Vector avatars are assembled from two kinds of markup:

- **Templates** (``assets/templates/*.svg``) are Jinja2 templates with
  autoescaping on, so colors and paths are always attribute-safe.
- **Fragments** are single-part SVG files (one robot body, one pair of eyes,
  ...).  :func:`prepare_fragment` strips the outer ``<svg>`` element, turns
  the artwork's stroke/fill token into ``currentColor`` so the template can
  recolor it, and wraps it in a group shifted down by the template's header
  space.  Prepared fragments are trusted bundled assets and are inserted into
  templates without escaping.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from markupsafe import Markup

from avatarforge.core.config import ASSETS_DIR

TEMPLATES_DIR = ASSETS_DIR / "templates"

# Color the fragment artwork is drawn in.
FRAGMENT_COLOR_TOKEN = "#26a9e0"
FRAGMENT_TRANSFORM = "translate(0,20)"

_SVG_ELEMENT = re.compile(r"<svg[^>]*>(.*)</svg>", re.DOTALL)
_XML_PROLOG = re.compile(r"<\?xml[^>]*\?>\s*")


def prepare_fragment(markup: str) -> str:
    """Turn a standalone fragment file into an embeddable, recolorable group.

    Example:
        >>> prepare_fragment('<svg viewBox="0 0 10 10"><path fill="#26a9e0" d="M0 0"/></svg>')
        '<g transform="translate(0,20)"><path fill="currentColor" d="M0 0"/></g>'
    """
    markup = _XML_PROLOG.sub("", markup).strip()
    markup = _SVG_ELEMENT.sub(r"\1", markup)
    markup = re.sub(re.escape(FRAGMENT_COLOR_TOKEN), "currentColor", markup, flags=re.IGNORECASE)

    return f'<g transform="{FRAGMENT_TRANSFORM}">{markup}</g>'


def read_fragment(path: Path) -> str:
    """Read and prepare one fragment file (catalog reader)."""
    return prepare_fragment(Path(path).read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def _environment(templates_dir: str) -> Environment:
    return Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=True,
        undefined=StrictUndefined,
        keep_trailing_newline=False,
    )


def render_template(name: str, templates_dir: Path = TEMPLATES_DIR, **values) -> str:
    """Render an SVG template.

    Values of type :class:`markupsafe.Markup` are inserted verbatim, anything
    else is escaped.

    Raises:
        jinja2.TemplateError: If the template is missing or references an
            undefined value.
    """
    return _environment(str(templates_dir)).get_template(name).render(**values)


def trusted(markup: str) -> Markup:
    """Mark prepared fragment markup as safe for template insertion."""
    return Markup(markup)


def svg_number(value: float) -> str:
    """Format a coordinate rounded half up to one decimal, e.g. ``12`` or ``12.5``."""
    rounded = math.floor(value * 10 + 0.5) / 10
    if rounded == int(rounded):
        return str(int(rounded))

    return f"{rounded:.1f}"
