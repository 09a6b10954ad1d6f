"""Transactional email through Resend."""

import asyncio
import html
import logging
from collections.abc import Iterable

import requests
import resend
from email_validator import EmailNotValidError, validate_email
from resend.exceptions import ResendError

from liaise.config import settings
from liaise.errors import UpstreamServiceError

logger = logging.getLogger("liaise.email")


def normalize_email(address: str) -> str | None:
    """Return the normalized address, or ``None`` when it is not a valid email."""
    try:
        result = validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return None
    return result.normalized


class EmailSender:
    """Sends through the Resend SDK, which is blocking, on a worker thread."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    async def send(
        self,
        to_addresses: Iterable[str],
        subject: str,
        html_body: str,
        *,
        sender: str | None = None,
    ) -> str | None:
        """Send one email and return the provider's message id."""
        params = {
            "from": sender or settings.email_from,
            "to": list(to_addresses),
            "subject": subject,
            "html": html_body,
        }

        def _send():
            resend.api_key = self.api_key
            return resend.Emails.send(params)

        try:
            response = await asyncio.to_thread(_send)
        except ResendError as exc:
            logger.error("Resend rejected email: %s", exc)
            raise UpstreamServiceError("resend", str(exc)) from exc
        except requests.RequestException as exc:
            raise UpstreamServiceError("resend", f"request failed: {exc}") from exc

        email_id = response.get("id") if response else None
        logger.info("Email %s accepted by Resend", email_id)
        return email_id


def get_email_sender() -> EmailSender:
    """FastAPI dependency returning a Resend sender."""
    if not settings.resend_api_key:
        raise UpstreamServiceError("resend", "RESEND_API_KEY is not configured")
    return EmailSender(settings.resend_api_key)


SUMMARY_EMAIL_SUBJECT = "Your Medical Summary"
FOLLOW_UP_EMAIL_SUBJECT = "How was your experience with Liaise? We'd love your feedback!"


def render_summary_email(patient_name: str, summary_content: str, portal_url: str | None) -> str:
    name = html.escape(patient_name)
    body = html.escape(summary_content)
    portal_block = ""
    if portal_url:
        portal_block = f"""
          <p style="color: #666; margin-bottom: 20px;">
            You can also read this summary online and ask questions about it:
            <a href="{html.escape(portal_url, quote=True)}">open your summary</a>.
          </p>"""
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
          <h1 style="color: #333; border-bottom: 2px solid #4F46E5; padding-bottom: 10px;">Your Medical Summary</h1>
          <p style="color: #666; margin-bottom: 20px;">Dear {name},</p>
          <p style="color: #666; margin-bottom: 20px;">
            Please find your medical summary below. This has been written in easy-to-understand language
            to help you better understand your recent medical care.
          </p>
          <div style="background-color: #f8f9fa; border-left: 4px solid #4F46E5; padding: 20px; margin: 20px 0;">
            <div style="white-space: pre-line; color: #333; line-height: 1.6;">{body}</div>
          </div>{portal_block}
          <p style="color: #666; margin-top: 30px;">
            If you have any questions about this summary, please don't hesitate to contact your healthcare provider.
          </p>
          <p style="color: #666; margin-top: 20px;">Best regards,<br>Your Healthcare Team</p>
          <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
          <p style="color: #999; font-size: 12px;">
            This summary was generated using AI technology to convert medical language into patient-friendly terms.
            Please contact your healthcare provider if you need clarification on any medical information.
          </p>
        </div>
    """


def render_follow_up_email(patient_name: str, feedback_url: str) -> str:
    name = html.escape(patient_name)
    url = html.escape(feedback_url, quote=True)
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9f9f9;">
          <div style="background-color: white; padding: 40px; border-radius: 12px;">
            <h1 style="color: #2563eb; font-size: 28px; margin: 0 0 30px 0; text-align: center;">Thank You, {name}!</h1>
            <p style="color: #333; font-size: 16px; line-height: 1.6;">
              We hope your AI-generated medical summary from Liaise helped you better understand your recent visit.
            </p>
            <p style="color: #555; line-height: 1.5;">
              Please take 2 minutes to share your experience with our AI summary service.
            </p>
            <div style="text-align: center; margin: 35px 0;">
              <a href="{url}"
                 style="background-color: #2563eb; color: white; text-decoration: none; padding: 16px 32px; border-radius: 8px; font-weight: bold;">
                Share Your Feedback
              </a>
            </div>
            <ul style="color: #666; line-height: 1.6;">
              <li>Did you use the AI chatbox?</li>
              <li>How easy was your summary to read?</li>
              <li>How useful was the information?</li>
              <li>How accurate did it seem?</li>
              <li>Overall satisfaction with Liaise</li>
            </ul>
            <p style="color: #333; font-size: 16px; margin-top: 25px;">Best regards,<br><strong>The Liaise Team</strong></p>
          </div>
        </div>
    """
