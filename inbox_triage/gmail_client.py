"""Gmail provider client - thin wrapper over an injected Gmail API service."""
import base64
import logging
from email.mime.text import MIMEText

from googleapiclient.errors import HttpError

from inbox_triage.retry import classify_http_error, with_retry

logger = logging.getLogger("inbox_triage.gmail_client")

INBOX_LABEL = "INBOX"
METADATA_HEADERS = ["From", "Subject", "Message-ID"]


def _execute(request):
    try:
        return request.execute()
    except HttpError as e:
        raise classify_http_error(e) from e


def header_value(message: dict, name: str) -> str | None:
    """Return the first header called ``name`` (case-insensitive) or None."""
    for header in message.get("payload", {}).get("headers", []) or []:
        if header.get("name", "").lower() == name.lower():
            return header.get("value")
    return None


class MailClient:
    def __init__(self, gmail_service, user_id: str = "me", page_size: int = 50):
        self.service = gmail_service
        self.user_id = user_id
        self.page_size = page_size

    def list_inbox_threads(self) -> list[dict]:
        response = _execute(self.service.users().threads().list(
            userId=self.user_id,
            labelIds=[INBOX_LABEL],
            includeSpamTrash=False,
            maxResults=self.page_size,
        ))
        return (response or {}).get("threads", []) or []

    def get_thread(self, thread_id: str) -> dict:
        return _execute(self.service.users().threads().get(
            userId=self.user_id, id=thread_id, format="minimal",
        )) or {}

    def get_message(self, message_id: str) -> dict:
        return _execute(self.service.users().messages().get(
            userId=self.user_id, id=message_id, format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )) or {}

    @with_retry(max_attempts=3, base_delay=1)
    def list_labels(self) -> list[dict]:
        response = _execute(self.service.users().labels().list(userId=self.user_id))
        return (response or {}).get("labels", []) or []

    @with_retry(max_attempts=3, base_delay=1)
    def create_label(self, name: str, background_color: str, text_color: str) -> dict:
        body = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
            "color": {"backgroundColor": background_color, "textColor": text_color},
        }
        return _execute(self.service.users().labels().create(userId=self.user_id, body=body))

    def modify_thread_labels(self, thread_id: str, add_label_id: str | None = None) -> dict:
        """Remove the thread from the inbox and optionally attach one label."""
        body = {"removeLabelIds": [INBOX_LABEL]}
        if add_label_id:
            body["addLabelIds"] = [add_label_id]
        return _execute(self.service.users().threads().modify(
            userId=self.user_id, id=thread_id, body=body,
        ))

    def send_reply(self, thread_id: str, to: str, subject: str, body: str) -> dict:
        """Send ``body`` as a reply on an existing thread.

        Looks up the last message's Message-ID so the reply threads correctly
        in the recipient's client as well as in Gmail.
        """
        thread = _execute(self.service.users().threads().get(
            userId=self.user_id, id=thread_id, format="metadata",
            metadataHeaders=["Message-ID"],
        )) or {}
        messages = thread.get("messages") or []
        message_id = header_value(messages[-1], "Message-ID") if messages else None

        mime = MIMEText(body)
        mime["To"] = to
        mime["Subject"] = subject if subject.lower().startswith("re:") else f"Re: {subject}"
        if message_id:
            mime["In-Reply-To"] = message_id
            mime["References"] = message_id

        raw = base64.urlsafe_b64encode(mime.as_bytes()).decode("utf-8")
        result = _execute(self.service.users().messages().send(
            userId=self.user_id,
            body={"raw": raw, "threadId": thread_id},
        ))
        logger.info(f"Reply sent to {to} (message_id={result['id']}, thread={thread_id})")
        return result
