"""Pattern predicates for classifying foreign HTML segments."""

from mkly.patterns.content import is_footer, is_list, is_quote, is_tip
from mkly.patterns.layout import is_card, is_cta, is_header, is_hero

__all__ = [
    "is_card",
    "is_cta",
    "is_footer",
    "is_header",
    "is_hero",
    "is_list",
    "is_quote",
    "is_tip",
]
