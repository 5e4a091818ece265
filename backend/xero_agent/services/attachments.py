"""Attachment normalization and upload.

Two policies apply:

- process_attachments is fail-fast: the first bad item aborts the batch
  with an AttachmentProcessingError.
- upload_attachments isolates each item: a failed upload is recorded and
  the remaining attachments are still attempted.

attach_files chains both and turns a batch-level normalization failure into
a single synthetic "unknown" result. attach_inline_files skips the
normalizer for tools that only accept inline base64 attachments.
"""

import base64
import binascii
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from xero_agent.core.errors import (
    AttachmentError,
    AttachmentProcessingError,
    MissingFileNameError,
    MissingSourceError,
    format_error,
)
from xero_agent.models.attachment import (
    AttachmentInput,
    AttachmentStatus,
    AttachmentUploadResult,
    InlineAttachment,
    ProcessedAttachment,
)
from xero_agent.services.file_loader import load_file
from xero_agent.services.mime_type import detect_mime_type

logger = logging.getLogger(__name__)

# (resource_id, file_name, content) -> awaitable
UploadFn = Callable[[str, str, bytes], Awaitable[object]]

UNKNOWN_ATTACHMENT = "unknown"


# =============================================================================
# Normalization
# =============================================================================


async def _process_attachment(attachment: AttachmentInput) -> ProcessedAttachment:
    if attachment.file_path:
        loaded = await load_file(attachment.file_path)
        return ProcessedAttachment(
            file_name=attachment.file_name or loaded.file_name,
            mime_type=attachment.mime_type or loaded.mime_type,
            base64_content=loaded.base64_content,
        )

    if attachment.base64_content:
        if not attachment.file_name:
            raise MissingFileNameError("fileName is required when using base64Content")
        return ProcessedAttachment(
            file_name=attachment.file_name,
            mime_type=attachment.mime_type or detect_mime_type(attachment.file_name),
            base64_content=attachment.base64_content,
        )

    raise MissingSourceError("Either filePath or base64Content must be provided")


async def process_attachments(
    attachments: Optional[Sequence[AttachmentInput]],
) -> List[ProcessedAttachment]:
    """Turn attachment inputs into upload-ready attachments.

    Files given by path are loaded and base64 encoded; explicit fileName and
    mimeType values on the input win over the derived ones. Inline content is
    used as-is.

    Args:
        attachments: Attachment inputs, may be None or empty

    Returns:
        Processed attachments in input order

    Raises:
        AttachmentProcessingError: On the first item that cannot be processed.
            The original error is chained as the cause.
    """
    if not attachments:
        return []

    processed: List[ProcessedAttachment] = []
    for attachment in attachments:
        try:
            processed.append(await _process_attachment(attachment))
        except AttachmentError as e:
            raise AttachmentProcessingError(
                f"Failed to process attachment: {e.message}", cause=e
            ) from e
        except Exception as e:
            raise AttachmentProcessingError(
                f"Failed to process attachment: {format_error(e)}", cause=e
            ) from e

    return processed


# =============================================================================
# Upload
# =============================================================================


async def upload_attachments(
    resource_id: str,
    attachments: Sequence[ProcessedAttachment],
    upload_fn: UploadFn,
) -> List[AttachmentUploadResult]:
    """Upload attachments one at a time, recording an outcome for each.

    Args:
        resource_id: ID of the Xero resource the files belong to
        attachments: Upload-ready attachments
        upload_fn: Coroutine called as upload_fn(resource_id, file_name, content)

    Returns:
        One result per attachment, in input order
    """
    results: List[AttachmentUploadResult] = []

    for attachment in attachments:
        try:
            content = base64.b64decode(attachment.base64_content, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Attachment {attachment.file_name} has invalid base64 content: {e}")
            results.append(
                AttachmentUploadResult(
                    file_name=attachment.file_name,
                    status=AttachmentStatus.FAILED,
                    error=f"Invalid base64 content: {e}",
                )
            )
            continue

        try:
            await upload_fn(resource_id, attachment.file_name, content)
        except Exception as e:
            logger.error(f"Attachment failed for {attachment.file_name}: {e}")
            results.append(
                AttachmentUploadResult(
                    file_name=attachment.file_name,
                    status=AttachmentStatus.FAILED,
                    error=format_error(e),
                )
            )
            continue

        logger.info(f"Attached {attachment.file_name} to {resource_id}")
        results.append(
            AttachmentUploadResult(
                file_name=attachment.file_name,
                status=AttachmentStatus.SUCCESS,
            )
        )

    return results


async def attach_files(
    resource_id: Optional[str],
    attachments: Optional[Sequence[AttachmentInput]],
    upload_fn: UploadFn,
) -> List[AttachmentUploadResult]:
    """Normalize and upload attachments for a saved resource.

    Nothing happens unless the resource has an ID and attachments were given.
    A normalization failure is reported as one failed "unknown" entry instead
    of being raised.
    """
    if not resource_id or not attachments:
        return []

    try:
        processed = await process_attachments(attachments)
    except AttachmentProcessingError as e:
        logger.error(f"Failed to process attachments for {resource_id}: {e.message}")
        return [
            AttachmentUploadResult(
                file_name=UNKNOWN_ATTACHMENT,
                status=AttachmentStatus.FAILED,
                error=f"Processing failed: {e.message}",
            )
        ]

    return await upload_attachments(resource_id, processed, upload_fn)


async def attach_inline_files(
    resource_id: Optional[str],
    attachments: Optional[Sequence[InlineAttachment]],
    upload_fn: UploadFn,
) -> List[AttachmentUploadResult]:
    """Upload inline base64 attachments without going through the normalizer."""
    if not resource_id or not attachments:
        return []

    processed = [
        ProcessedAttachment(
            file_name=attachment.file_name,
            mime_type=attachment.mime_type or detect_mime_type(attachment.file_name),
            base64_content=attachment.base64_content,
        )
        for attachment in attachments
    ]
    return await upload_attachments(resource_id, processed, upload_fn)


def describe_results(results: Sequence[AttachmentUploadResult]) -> Optional[str]:
    """Summarise upload results as a report line, or None if there are none."""
    if not results:
        return None
    return "Attachments: " + ", ".join(result.describe() for result in results)
