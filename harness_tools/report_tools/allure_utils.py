"""
================================================================================
Allure Report Utilities
================================================================================

Allure-backed sink for evidence bundles, screenshots and log snapshots.

Artifacts arrive as raw bytes plus a MIME type; the MIME type picks the Allure
attachment type so screenshots render inline and markup opens as HTML.

================================================================================
"""

from typing import Dict

import allure
from allure_commons.types import AttachmentType
from loguru import logger


# MIME type -> Allure attachment type
ATTACHMENT_TYPES: Dict[str, AttachmentType] = {
    "image/png": AttachmentType.PNG,
    "text/html": AttachmentType.HTML,
    "application/json": AttachmentType.JSON,
    "text/plain": AttachmentType.TEXT,
}


def attach_bytes(content: bytes, name: str, mime_type: str, extension: str = ""):
    """
    Attach raw bytes, mapping the MIME type to an Allure attachment type.

    Unknown MIME types are attached as text/plain with the given extension.
    """
    attachment_type = ATTACHMENT_TYPES.get(mime_type)
    if attachment_type is None:
        allure.attach(content, name=name, attachment_type=AttachmentType.TEXT, extension=extension)
    else:
        allure.attach(content, name=name, attachment_type=attachment_type)


class AllureEvidenceSink:
    """Evidence sink attaching every artifact to the running Allure test."""

    def add_attachment(self, name: str, mime_type: str, content: bytes, extension: str) -> None:
        attach_bytes(content, name=name, mime_type=mime_type, extension=extension)
        logger.debug(f"Attached to Allure: {name} ({mime_type}, {len(content)} bytes)")


__all__ = [
    "ATTACHMENT_TYPES",
    "AllureEvidenceSink",
    "attach_bytes",
]
