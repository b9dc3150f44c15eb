"""
Email message composition.

Builds the MIME message for a single send and validates it before any
network activity happens.
"""

import enum
import mimetypes
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr
from typing import List, Optional, Sequence

from mailer.client import EmailClientError


class MessageError(EmailClientError):
    """Raised when the email message cannot be composed."""
    pass


class ContentType(enum.IntEnum):
    """Supported content types for the email body."""
    TEXT_PLAIN = 0
    TEXT_HTML = 1


_BODY_SUBTYPES = {
    ContentType.TEXT_PLAIN: 'plain',
    ContentType.TEXT_HTML: 'html',
}


@dataclass(frozen=True)
class Attachment:
    """A named payload attached to an email."""
    name: str
    data: bytes = field(repr=False)
    mime_type: Optional[str] = None
    inline: bool = False

    def get_mime_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or 'application/octet-stream'


def parse_address(address: str) -> str:
    """
    Validate an address header value and return the bare address.

    Accepts both "user@example.com" and "Name <user@example.com>".

    Raises:
        MessageError: If the address is malformed
    """
    if not address or any(c in address for c in '\r\n'):
        raise MessageError(f"smtp: email error: invalid address {address!r}")
    _, addr = parseaddr(address)
    local, sep, domain = addr.rpartition('@')
    if not sep or not local or not domain or any(c.isspace() for c in addr):
        raise MessageError(f"smtp: email error: invalid address {address!r}")
    return addr


def build_message(
    sender: str,
    to: Sequence[str],
    subject: str,
    body: str,
    content_type: ContentType,
    attachments: Sequence[Attachment] = (),
    domain: Optional[str] = None,
) -> EmailMessage:
    """
    Compose an email message.

    Args:
        sender: From header value
        to: Recipients, all of them end up in the To header
        subject: Email subject
        body: Email body
        content_type: ContentType.TEXT_PLAIN or ContentType.TEXT_HTML
        attachments: Files attached in the given order
        domain: Domain used for the Message-ID

    Returns:
        EmailMessage: The composed message

    Raises:
        MessageError: For unsupported content types, missing sender or
            recipients, malformed addresses and invalid header values
    """
    if isinstance(content_type, bool):
        raise MessageError(f"smtp: unsupported body content type {content_type!r}")
    try:
        subtype = _BODY_SUBTYPES[ContentType(content_type)]
    except (ValueError, KeyError) as e:
        raise MessageError(f"smtp: unsupported body content type {content_type!r}") from e

    if not sender:
        raise MessageError("smtp: email error: no from address specified")
    parse_address(sender)
    recipients: List[str] = list(to)
    if not recipients:
        raise MessageError("smtp: email error: no recipient specified")
    for recipient in recipients:
        parse_address(recipient)

    msg = EmailMessage()
    try:
        msg['From'] = sender
        msg['To'] = ', '.join(recipients)
        msg['Subject'] = subject
        msg['Date'] = formatdate(localtime=True)
        msg['Message-ID'] = make_msgid(domain=domain or None)
        msg.set_content(body, subtype=subtype, charset='utf-8')

        for attachment in attachments:
            maintype, _, subtype = attachment.get_mime_type().partition('/')
            msg.add_attachment(
                attachment.data,
                maintype=maintype,
                subtype=subtype or 'octet-stream',
                filename=attachment.name,
                disposition='inline' if attachment.inline else 'attachment',
            )
    except (ValueError, TypeError) as e:
        raise MessageError(f"smtp: email error: {e}") from e
    return msg
