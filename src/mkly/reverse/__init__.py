"""Reverse pipeline: HTML back to mkly documents."""

from mkly.reverse.boilerplate import BoilerplateStripper, StrippedHtml
from mkly.reverse.classifier import ClassificationRule, PatternClassifier
from mkly.reverse.detector import ORIGINS, Origin, detect_origin
from mkly.reverse.email import EmailReconstructor
from mkly.reverse.generic import GenericReconstructor
from mkly.reverse.markdown import html_to_markdown
from mkly.reverse.segments import SegmentSplitter
from mkly.reverse.tables import TableUnwrapper, UnwrappedHtml
from mkly.reverse.web import WebReconstructor, parse_core_block

__all__ = [
    "BoilerplateStripper",
    "ClassificationRule",
    "detect_origin",
    "EmailReconstructor",
    "GenericReconstructor",
    "html_to_markdown",
    "Origin",
    "ORIGINS",
    "parse_core_block",
    "PatternClassifier",
    "SegmentSplitter",
    "StrippedHtml",
    "TableUnwrapper",
    "UnwrappedHtml",
    "WebReconstructor",
]
