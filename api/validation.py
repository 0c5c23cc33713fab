"""Field and attachment rules for contact submissions."""

from api.models import ContactSubmission
from core.error_handling import AttachmentTooLarge, MissingField, TooManyAttachments

MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_SIZE = 1 * 1024 * 1024  # 1 MiB


def validate_submission(submission: ContactSubmission) -> ContactSubmission:
    """
    Check a parsed submission, reporting only the first broken rule.

    Order: required fields, then attachment count, then per-attachment size.

    Raises:
        MissingField: name, email or message is empty or absent
        TooManyAttachments: more than MAX_ATTACHMENTS files
        AttachmentTooLarge: a file declares or carries more than
            MAX_ATTACHMENT_SIZE bytes
    """
    missing = [
        field for field in ("name", "email", "message")
        if not getattr(submission, field)
    ]
    if missing:
        raise MissingField(
            f"Missing required fields: {', '.join(missing)}",
            component="validator",
            context={"fields": missing},
        )

    if len(submission.attachments) > MAX_ATTACHMENTS:
        raise TooManyAttachments(
            f"{len(submission.attachments)} attachments exceed the limit of {MAX_ATTACHMENTS}",
            component="validator",
            context={"count": len(submission.attachments)},
        )

    for attachment in submission.attachments:
        if attachment.effective_size > MAX_ATTACHMENT_SIZE:
            raise AttachmentTooLarge(
                f"Attachment '{attachment.name}' is {attachment.effective_size} bytes "
                f"(declared {attachment.size})",
                component="validator",
                context={
                    "filename": attachment.name,
                    "size": attachment.size,
                    "content_length": attachment.content_length,
                },
            )

    return submission
