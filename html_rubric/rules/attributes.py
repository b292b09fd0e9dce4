"""Attribute presence and placement rules."""

from __future__ import annotations

from pathlib import PurePosixPath

from bs4 import Tag

from html_rubric.document import Document
from html_rubric.rules.base import Outcome

IMAGE_EXTENSIONS = {
    ".apng",
    ".avif",
    ".bmp",
    ".gif",
    ".ico",
    ".jpeg",
    ".jpg",
    ".png",
    ".svg",
    ".tif",
    ".tiff",
    ".webp",
}


class HrefRestrictedToAnchorRule:
    """Allows the href attribute on <a> elements only."""

    rule_id = "href-restricted-to-anchor"
    description = "href only on <a> elements"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        with_href = document.with_attribute("href")
        invalid = [element for element in with_href if element.name != "a"]

        if not invalid:
            return Outcome(
                passed=True,
                message=f"All href attributes ({len(with_href)}) are on <a> elements.",
                matches=document.refs(with_href),
            )
        return Outcome(
            passed=False,
            message=f"{len(invalid)} elements with href are not <a> elements.",
            suggestion=(
                "Use href only on <a> elements. Other elements take their own attributes "
                "such as src or data-*."
            ),
            matches=document.refs(invalid),
        )


class SrcRestrictedToImageRule:
    """Allows src on <img> only and requires every <img> to have one."""

    rule_id = "src-restricted-to-image"
    description = "src only on <img> elements"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        with_src = document.with_attribute("src")
        invalid = [element for element in with_src if element.name != "img"]
        missing_src = [image for image in document.find_all("img") if not _attr(image, "src")]

        if not invalid and not missing_src:
            return Outcome(
                passed=True,
                message="All src attributes are on valid <img> elements.",
                matches=document.refs(with_src),
            )

        errors: list[str] = []
        if invalid:
            errors.append(f"{len(invalid)} elements with src are not <img>")
        if missing_src:
            errors.append(f"{len(missing_src)} <img> elements without a valid src")
        return Outcome(
            passed=False,
            message=f"{', '.join(errors)}.",
            suggestion=(
                "Use src only on <img> elements, and give every <img> a valid, non-empty src."
            ),
            matches=document.refs([*invalid, *missing_src]),
        )


class ImageAltRequiredRule:
    """Requires alt text on every image."""

    rule_id = "image-alt-required"
    description = "Images with alt text"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        images = document.find_all("img")
        if not images:
            return Outcome(passed=True, message="No <img> elements to validate.")

        missing: list[Tag] = []
        suspect: list[Tag] = []
        for image in images:
            if not image.has_attr("alt"):
                missing.append(image)
            elif not _attr(image, "alt") and has_image_extension(_attr(image, "src")):
                suspect.append(image)

        if not missing and not suspect:
            return Outcome(
                passed=True,
                message=f"All images ({len(images)}) have alt text.",
                matches=document.refs(images),
            )

        errors: list[str] = []
        if missing:
            errors.append(f"{len(missing)} images missing the alt attribute")
        if suspect:
            errors.append(f"{len(suspect)} images with a suspicious empty alt")
        offending = {id(image) for image in [*missing, *suspect]}
        return Outcome(
            passed=False,
            message=f"{', '.join(errors)}.",
            suggestion=(
                "Describe every image in its alt attribute. An empty alt is only acceptable "
                "for purely decorative images."
            ),
            matches=document.refs(image for image in images if id(image) in offending),
        )


class MediaRequiresControlsRule:
    """Requires controls on audio and controls plus muted on video."""

    rule_id = "media-requires-controls"
    description = "Media elements with controls"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        audios = document.find_all("audio")
        videos = document.find_all("video")
        invalid = [audio for audio in audios if not audio.has_attr("controls")]
        invalid.extend(
            video
            for video in videos
            if not video.has_attr("controls") or not video.has_attr("muted")
        )
        total = len(audios) + len(videos)

        if total == 0:
            return Outcome(passed=True, message="No multimedia elements found.")
        if not invalid:
            return Outcome(
                passed=True,
                message=f"All multimedia elements ({total}) have the required attributes.",
                matches=document.refs([*audios, *videos]),
            )
        return Outcome(
            passed=False,
            message=f"{len(invalid)} multimedia elements lack required attributes.",
            suggestion=(
                '<audio> and <video> elements need "controls". <video> elements also need "muted".'
            ),
            matches=document.refs(invalid),
        )


def has_image_extension(src: str) -> bool:
    """True when the src path ends in a known raster/vector image extension."""
    path = src.split("?", 1)[0].split("#", 1)[0]
    return PurePosixPath(path.lower()).suffix in IMAGE_EXTENSIONS


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()
