import logging

from django.conf import settings
from django.core.mail import send_mail

from core.background import run_detached

logger = logging.getLogger(__name__)


def _decision_message(approval):
    provider = approval.provider
    name = provider.get_display_name()
    if approval.status == "approved":
        subject = "Your registration has been approved"
        body = f"Hello {name},\n\nYour registration has been reviewed and approved. You can now use the platform."
    else:
        subject = "Your registration was not approved"
        reason = approval.rejection_reason or "No reason was given."
        body = f"Hello {name},\n\nYour registration has been reviewed and was not approved.\n\nReason: {reason}"
    if approval.review_comments and approval.status == "approved":
        body += f"\n\nReviewer comments: {approval.review_comments}"
    return subject, body


def _send(recipient, subject, body):
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)
    logger.info("Decision email sent to %s", recipient)


def notify_provider_decision(approval) -> None:
    """
    Email the provider about the decision. Never raises; failures are logged.
    """
    try:
        recipient = approval.provider.email
        if not recipient:
            return
        subject, body = _decision_message(approval)
    except Exception:
        logger.exception("Could not build decision email for approval %s", approval.pk)
        return
    run_detached(
        _send, recipient, subject, body,
        mode=getattr(settings, "NOTIFICATIONS_DELIVERY_MODE", "THREAD"),
        name="provider-decision-email",
    )
