"""
High-level email service.

This module provides the Mailer class that validates the SMTP
configuration, owns the loaded templates and sends emails. Build one
Mailer at startup, call initialize() and hand it to the code that needs
to send emails.
"""

import logging
import os
from typing import Any, Optional, Sequence, TextIO

from mailer.client import SMTPServer
from mailer.config import TEMPLATE_EMAIL_DIR, ConfigError, SMTPConfig, find_shared_data_path
from mailer.message import Attachment, ContentType, build_message
from mailer.renderer import TEMPLATE_PASSWORD_RESET, RendererError, TemplateStore


logger = logging.getLogger(__name__)


class EmailServiceError(Exception):
    """Base exception for email service errors."""
    pass


class NotConfiguredError(EmailServiceError):
    """Raised when sending or rendering while email is disabled."""

    def __init__(self, message: str = "smtp: not configured"):
        super().__init__(message)


class _State:
    __slots__ = ('server', 'from_address', 'templates')

    def __init__(self, server: SMTPServer, from_address: str, templates: TemplateStore):
        self.server = server
        self.from_address = from_address
        self.templates = templates


class Mailer:
    """
    Email service: configuration, templates and sending.

    The mailer starts unconfigured. A successful initialize() makes it
    configured, initialize() with an empty host or a failing
    initialize() makes it unconfigured again. State is replaced as a
    whole, sends already in flight keep the state they started with.

    Example:
        >>> mailer = Mailer()
        >>> mailer.initialize(SMTPConfig(host='smtp.example.com', port=587), '/etc/app')
        >>> mailer.send_email(['user@example.com'], 'Hello', 'Hi!', ContentType.TEXT_PLAIN)
    """

    def __init__(self):
        self._state: Optional[_State] = None

    @property
    def server(self) -> Optional[SMTPServer]:
        """The SMTP client descriptor, None if disabled."""
        state = self._state
        return state.server if state else None

    def is_enabled(self) -> bool:
        """Return True if an SMTP server is configured."""
        return self._state is not None

    def initialize(self, config: SMTPConfig, config_dir: str) -> None:
        """
        Validate the configuration and load the email templates.

        An empty host disables email sending and is not an error.

        Args:
            config: SMTP configuration
            config_dir: Base directory for a relative templates path

        Raises:
            ConfigError: If the configuration is invalid or the templates
                cannot be loaded. Email sending is disabled afterwards
        """
        self._state = None
        if not config.host:
            logger.debug(
                "configuration disabled, email capabilities will not be available",
                extra={"event": "email.config.disabled"}
            )
            return

        config.validate_ranges()

        templates_path = find_shared_data_path(config.templates_path, config_dir)
        if not templates_path:
            raise ConfigError(f"smtp: invalid templates path {config.templates_path!r}")
        try:
            templates = TemplateStore.load(os.path.join(templates_path, TEMPLATE_EMAIL_DIR))
        except RendererError as e:
            raise ConfigError(f"smtp: unable to load templates: {e}") from e

        server = SMTPServer.from_config(config)
        self._state = _State(server, config.from_address, templates)
        logger.debug(
            "configuration successfully initialized, host: %r, port: %s, username: %r, "
            "auth: %s, encryption: %s, helo: %r",
            server.host, server.port, server.username,
            server.authentication, server.encryption, server.helo,
            extra={"event": "email.config.initialized"}
        )

    def _get_state(self) -> _State:
        state = self._state
        if state is None:
            raise NotConfiguredError()
        return state

    def render_password_reset_template(self, buf: TextIO, data: Any) -> None:
        """
        Execute the password reset template.

        Args:
            buf: Text buffer receiving the rendered output
            data: Template data, a mapping or any object exposed as ``data``

        Raises:
            NotConfiguredError: If email is disabled
            RendererError: If the template execution fails
        """
        state = self._get_state()
        state.templates.render(TEMPLATE_PASSWORD_RESET, buf, data)

    def send_email(
        self,
        to: Sequence[str],
        subject: str,
        body: str,
        content_type: ContentType,
        attachments: Sequence[Attachment] = (),
    ) -> None:
        """
        Send an email using the configured SMTP server.

        The message is composed and validated before connecting, every
        call opens its own connection and nothing is retried.

        Args:
            to: Recipient addresses
            subject: Email subject
            body: Email body
            content_type: ContentType.TEXT_PLAIN or ContentType.TEXT_HTML
            attachments: Attachments in the order they are added

        Raises:
            NotConfiguredError: If email is disabled
            MessageError: If the message cannot be composed
            EmailConnectionError: If the server cannot be reached
            SendError: If the SMTP transaction fails
        """
        state = self._get_state()
        server = state.server
        # Many SMTP servers reject emails without a From header
        sender = state.from_address or server.username
        msg = build_message(sender, to, subject, body, content_type, attachments, domain=server.helo)

        try:
            client = server.connect()
            client.send(msg)
        except Exception as e:
            logger.error(
                f"Failed to send email: {e}",
                extra={"event": "email.send.error", "recipients": len(to), "subject": subject}
            )
            raise

        logger.info(
            "Email sent successfully",
            extra={"event": "email.send.sent", "recipients": len(to), "subject": subject}
        )
