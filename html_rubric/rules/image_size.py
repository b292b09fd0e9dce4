"""Image weight rule backed by asynchronous size probes."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from bs4 import Tag

from html_rubric.document import Document
from html_rubric.rules.base import ImageProbe, Outcome

logger = logging.getLogger(__name__)

SIZE_LIMIT_KB = 500
SIZE_LIMIT_BYTES = SIZE_LIMIT_KB * 1024

SKIPPED = "skipped"
WITHIN_LIMIT = "within_limit"
OVERSIZED = "oversized"
UNVERIFIABLE = "unverifiable"


class ImageSizeRule:
    """Requires referenced images to weigh at most 500 KB."""

    rule_id = "image-size"
    description = "Images <= 500 KB"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def __init__(self, *, timeout_seconds: float = 5.0, max_concurrency: int = 8) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency

    def detect(self, document: Document, raw_text: str) -> Outcome:
        return Outcome(passed=True, message="Image size verification pending.")

    async def resolve(self, document: Document, raw_text: str, probe: ImageProbe) -> Outcome:
        images = [image for image in document.find_all("img") if _src(image)]
        if not images:
            return Outcome(passed=True, message="No images to verify.")

        semaphore = asyncio.Semaphore(self.max_concurrency)
        verdicts = await asyncio.gather(
            *(self._classify(_src(image), probe, semaphore) for image in images)
        )
        oversized = [image for image, verdict in zip(images, verdicts) if verdict == OVERSIZED]
        checked = sum(1 for verdict in verdicts if verdict in (WITHIN_LIMIT, OVERSIZED))
        unverifiable = sum(1 for verdict in verdicts if verdict == UNVERIFIABLE)

        passed = not oversized
        if checked == 0:
            message = "Image sizes could not be verified."
        elif passed:
            message = f"All verified images ({checked}) are <= {SIZE_LIMIT_KB} KB."
        else:
            message = f"{len(oversized)} images exceed {SIZE_LIMIT_KB} KB."
        if unverifiable:
            message += f" {unverifiable} images could not be verified."

        return Outcome(
            passed=passed,
            message=message,
            suggestion=None
            if passed
            else (
                f"Optimize images to weigh less than {SIZE_LIMIT_KB} KB. Use compression tools "
                "or more efficient formats such as WebP."
            ),
            matches=document.refs(oversized),
        )

    async def _classify(self, src: str, probe: ImageProbe, semaphore: asyncio.Semaphore) -> str:
        if src.startswith("data:"):
            return SKIPPED
        if not is_probeable(src):
            return UNVERIFIABLE

        async with semaphore:
            try:
                size = await asyncio.wait_for(
                    probe.content_length(src), timeout=self.timeout_seconds
                )
            except TimeoutError:
                logger.debug("Size probe for %s timed out.", src)
                return UNVERIFIABLE
            except (aiohttp.ClientError, OSError, ValueError) as exc:
                logger.debug("Size probe for %s failed: %s", src, exc)
                return UNVERIFIABLE
            except Exception as exc:
                logger.debug("Unexpected error probing %s: %s", src, exc)
                return UNVERIFIABLE

        if size is None:
            return UNVERIFIABLE
        return OVERSIZED if size > SIZE_LIMIT_BYTES else WITHIN_LIMIT


def is_probeable(src: str) -> bool:
    """HTTPS URLs and relative paths can be sized; other absolute URLs cannot."""
    if src.startswith("https://"):
        return True
    if src.startswith("//"):
        return False
    return ":" not in src.split("/", 1)[0]


def _src(image: Tag) -> str:
    value = image.get("src")
    return value.strip() if isinstance(value, str) else ""
