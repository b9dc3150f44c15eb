"""
SMTP client for sending emails.

This module provides the SMTPServer descriptor, built once from the
configuration, and the SMTPClient connection it opens for every send.
Supports implicit TLS, STARTTLS and the PLAIN, LOGIN and CRAM-MD5
authentication mechanisms.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.policy import SMTP as SMTP_POLICY
from email.utils import getaddresses, parseaddr
from typing import List

from mailer.config import AuthType, Encryption, SMTPConfig


logger = logging.getLogger(__name__)

DEFAULT_HELO = 'localhost'
CONNECT_TIMEOUT = 10
SEND_TIMEOUT = 120


class EmailClientError(Exception):
    """Base exception for email client errors."""
    pass


class EmailConnectionError(EmailClientError):
    """Raised when the SMTP server cannot be reached or refuses the session."""
    pass


class SendError(EmailClientError):
    """Raised when the SMTP transaction fails."""
    pass


@dataclass(frozen=True)
class SMTPServer:
    """
    SMTP client descriptor.

    Read-only after construction and shared by every send. Each call to
    connect() opens a new session, connections are never reused.
    """
    host: str
    port: int
    username: str = ''
    password: str = field(default='', repr=False)
    authentication: AuthType = AuthType.NONE
    encryption: Encryption = Encryption.NONE
    helo: str = DEFAULT_HELO
    keep_alive: bool = False
    connect_timeout: float = CONNECT_TIMEOUT
    send_timeout: float = SEND_TIMEOUT

    @classmethod
    def from_config(cls, config: SMTPConfig) -> 'SMTPServer':
        return cls(
            host=config.host,
            port=config.port,
            username=config.user,
            password=config.password,
            authentication=config.get_auth_type(),
            encryption=config.get_encryption(),
            helo=config.domain or DEFAULT_HELO,
        )

    def _open(self) -> smtplib.SMTP:
        if self.encryption == Encryption.SSL_TLS:
            return smtplib.SMTP_SSL(
                self.host, self.port,
                local_hostname=self.helo,
                timeout=self.connect_timeout,
                context=ssl.create_default_context(),
            )
        return smtplib.SMTP(self.host, self.port, local_hostname=self.helo, timeout=self.connect_timeout)

    def _authenticate(self, server: smtplib.SMTP) -> None:
        if self.authentication == AuthType.NONE:
            return
        server.user, server.password = self.username, self.password
        if self.authentication == AuthType.LOGIN:
            server.auth('LOGIN', server.auth_login, initial_response_ok=False)
        elif self.authentication == AuthType.CRAM_MD5:
            server.auth('CRAM-MD5', server.auth_cram_md5, initial_response_ok=False)
        else:
            server.auth('PLAIN', server.auth_plain)

    def connect(self) -> 'SMTPClient':
        """
        Open a new SMTP session.

        The connect timeout covers the TCP connect, the TLS handshake and
        the authentication, the send timeout applies afterwards.

        Returns:
            SMTPClient: Connected and authenticated client

        Raises:
            EmailConnectionError: If any step fails
        """
        server = None
        try:
            server = self._open()
            server.ehlo()
            if self.encryption == Encryption.STARTTLS:
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            self._authenticate(server)
            if server.sock is not None:
                server.sock.settimeout(self.send_timeout)
        except (smtplib.SMTPException, OSError) as e:
            if server is not None:
                server.close()
            raise EmailConnectionError(f"smtp: unable to connect: {e}") from e
        return SMTPClient(server, keep_alive=self.keep_alive)


class SMTPClient:
    """
    A single SMTP session.

    Example:
        >>> client = server.connect()
        >>> client.send(message)
    """

    def __init__(self, server: smtplib.SMTP, keep_alive: bool = False):
        self.server = server
        self.keep_alive = keep_alive

    def send(self, msg: EmailMessage) -> None:
        """
        Send a composed message to every address of its To header.

        Delivery is all-or-nothing: if the server refuses any recipient
        the transaction is reset before DATA and nothing is sent.

        Raises:
            SendError: If the SMTP transaction fails
        """
        _, sender = parseaddr(msg['From'])
        recipients: List[str] = [addr for _, addr in getaddresses(msg.get_all('To', []))]
        try:
            code, resp = self.server.mail(sender)
            if code != 250:
                raise SendError(f"smtp: sender {sender!r} refused: {code} {_decode(resp)}")
            for recipient in recipients:
                code, resp = self.server.rcpt(recipient)
                if code not in (250, 251):
                    raise SendError(f"smtp: recipient {recipient!r} refused: {code} {_decode(resp)}")
            code, resp = self.server.data(msg.as_bytes(policy=SMTP_POLICY))
            if code != 250:
                raise SendError(f"smtp: message refused: {code} {_decode(resp)}")
        except SendError:
            self._reset()
            raise
        except (smtplib.SMTPException, OSError) as e:
            self._reset()
            raise SendError(f"smtp: unable to send email: {e}") from e
        finally:
            if not self.keep_alive:
                self.close()

    def _reset(self) -> None:
        try:
            self.server.rset()
        except (smtplib.SMTPException, OSError):
            logger.debug("unable to reset SMTP transaction", exc_info=True)

    def close(self) -> None:
        try:
            self.server.quit()
        except (smtplib.SMTPException, OSError):
            self.server.close()


def _decode(resp) -> str:
    if isinstance(resp, bytes):
        return resp.decode('utf-8', errors='replace')
    return str(resp)
