"""
Content steps for the pipeline.

Handles gating on the content type and delivering the body:
- ensure_content_type: specificity match against a required type
- html: full specificity gate against text/html
- text: any text/* type
- json: specificity gate against application/json, then json.loads
- xml: any */xml type, then xmltodict.parse
"""

from __future__ import annotations

import json
import logging
from typing import Any
from typing import Callable
from typing import TYPE_CHECKING
from xml.parsers.expat import ExpatError

import xmltodict

from httpreader import media_type
from httpreader.media_type import MediaType
from httpreader.pipeline.step import Step

if TYPE_CHECKING:
    from httpreader.pipeline.context import StepContext

logger = logging.getLogger(__name__)


def _matches(context: StepContext, required: MediaType) -> bool:
    actual = context.message.content_type
    if actual is None:
        logger.debug(f"No usable content-type, expected {required}")
        return False
    if not actual.is_more_specific(required):
        logger.debug(f"Content-type {actual} does not satisfy {required}")
        return False
    return True


def ensure_content_type(required: MediaType | str) -> Step:
    """Require the content type to be at least as specific as `required`."""
    if isinstance(required, str):
        required = MediaType.parse(required)

    def run(context: StepContext) -> bool:
        return _matches(context, required)

    return Step.predicate(f"ensure_content_type:{required}", run)


def use_content_type(action: Callable[..., Any]) -> Step:
    """Hand the parsed content type (or None) to `action`."""

    def run(context: StepContext) -> None:
        context.deliver(action, context.message.content_type)

    return Step.action("use_content_type", run)


def ensure_html_content(action: Callable[..., Any]) -> Step:
    """Require text/html content and hand its text to `action`."""

    def run(context: StepContext) -> bool:
        if not _matches(context, media_type.HTML):
            return False
        context.deliver(action, context.read_text())
        return True

    return Step.predicate("ensure_html_content", run)


def ensure_text_content(action: Callable[..., Any]) -> Step:
    """Require any text/* content and hand its text to `action`."""

    def run(context: StepContext) -> bool:
        actual = context.message.content_type
        if actual is None or actual.type != "text":
            logger.debug(f"ensure_text_content: {actual} is not text")
            return False
        context.deliver(action, context.read_text())
        return True

    return Step.predicate("ensure_text_content", run)


def ensure_json_content(
    action: Callable[..., Any],
    factory: Callable[[Any], Any] | None = None,
) -> Step:
    """
    Require application/json content and hand the decoded value to `action`.

    Args:
        action: Receives the decoded value
        factory: Optional conversion of the decoded value into a caller type,
            e.g. a dataclass constructor. Errors it raises fail the step.
    """

    def run(context: StepContext) -> bool:
        if not _matches(context, media_type.JSON):
            return False

        try:
            value = json.loads(context.read_text())
            if factory is not None:
                value = factory(value)
        except (ValueError, TypeError, KeyError) as e:
            logger.debug(f"ensure_json_content: failed to decode body: {e}")
            return False

        context.deliver(action, value)
        return True

    return Step.predicate("ensure_json_content", run)


def ensure_xml_content(action: Callable[..., Any]) -> Step:
    """Require */xml content and hand the parsed document to `action`."""

    def run(context: StepContext) -> bool:
        actual = context.message.content_type
        if actual is None or actual.sub_type != "xml":
            logger.debug(f"ensure_xml_content: {actual} is not xml")
            return False

        try:
            document = xmltodict.parse(context.read_text())
        except (ExpatError, ValueError) as e:
            logger.debug(f"ensure_xml_content: failed to parse body: {e}")
            return False

        context.deliver(action, document)
        return True

    return Step.predicate("ensure_xml_content", run)


def use_content(action: Callable[..., Any]) -> Step:
    """Hand the content type and raw body bytes to `action`."""

    def run(context: StepContext) -> None:
        message = context.message
        context.deliver(action, message.content_type, message.content.read())

    return Step.action("use_content", run)
