"""
Email module for sending emails with SMTP and Jinja2 templates.

This module provides:
- SMTPConfig: SMTP configuration (mailer.config)
- TemplateStore: Jinja2 email templates (mailer.renderer)
- SMTPServer/SMTPClient: SMTP sessions (mailer.client)
- Mailer: High-level service used by the application (mailer.service)
"""

from mailer.config import AuthType, ConfigError, Encryption, SMTPConfig, load_config_file
from mailer.message import Attachment, ContentType, MessageError
from mailer.client import EmailClientError, EmailConnectionError, SendError
from mailer.renderer import RendererError
from mailer.service import EmailServiceError, Mailer, NotConfiguredError

__all__ = [
    "Attachment",
    "AuthType",
    "ConfigError",
    "ContentType",
    "EmailClientError",
    "EmailConnectionError",
    "EmailServiceError",
    "Encryption",
    "Mailer",
    "MessageError",
    "NotConfiguredError",
    "RendererError",
    "SMTPConfig",
    "SendError",
    "load_config_file",
]
