"""Origin detection: which reconstructor should handle a piece of HTML."""

import re
from typing import Literal

Origin = Literal["web", "email", "generic"]

ORIGINS: tuple[Origin, ...] = ("web", "email", "generic")

# Any class token following the mkly-* convention, mkly-document included
_MKLY_CLASS_PATTERN = re.compile(r"""(?<![\w-])class\s*=\s*["'](?:[^"']*\s)?mkly-[\w-]+""", re.IGNORECASE)

_MSO_CONDITIONAL = "<!--[if mso]>"
_PRESENTATION_ROLE = 'role="presentation"'


def detect_origin(html: str) -> Origin:
    """Classify HTML as mkly web output, mkly email output, or foreign.

    Args:
        html: HTML text.

    Returns:
        "web" if mkly classes are present, "email" if the Outlook
        conditional comment and presentation tables are both present,
        "generic" otherwise.
    """
    if _MKLY_CLASS_PATTERN.search(html):
        return "web"
    if _MSO_CONDITIONAL in html and _PRESENTATION_ROLE in html:
        return "email"
    return "generic"
