"""
SMTP configuration model and validation helpers.

The configuration mirrors the "smtp" section of the host application's
config file. Range checks are performed by Mailer.initialize so that the
error message names the offending field and value.
"""

import enum
import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

import settings


TEMPLATE_EMAIL_DIR = 'email'


class ConfigError(Exception):
    """Raised when the SMTP configuration is invalid."""
    pass


class AuthType(enum.Enum):
    """SMTP authentication mechanisms."""
    PLAIN = 'PLAIN'
    LOGIN = 'LOGIN'
    CRAM_MD5 = 'CRAM-MD5'
    NONE = 'none'

    def __str__(self):
        return self.value


class Encryption(enum.Enum):
    """Transport encryption modes."""
    NONE = 'none'
    SSL_TLS = 'SSL/TLS'
    STARTTLS = 'STARTTLS'

    def __str__(self):
        return self.value


_AUTH_TYPES = {0: AuthType.PLAIN, 1: AuthType.LOGIN, 2: AuthType.CRAM_MD5}
_ENCRYPTIONS = {0: Encryption.NONE, 1: Encryption.SSL_TLS, 2: Encryption.STARTTLS}


class SMTPConfig(BaseModel):
    """
    SMTP configuration used to send emails.

    Attributes:
        host: SMTP server host. Leave empty to disable email sending
        port: SMTP server port
        from_address: From address, for example "App <app@example.com>".
            If empty the username is used as fallback
        user: SMTP username
        password: SMTP password. Leaving both username and password empty
            disables authentication
        auth_type: 0 Plain, 1 Login, 2 CRAM-MD5
        encryption: 0 no encryption, 1 TLS, 2 STARTTLS
        domain: Domain to use for the HELO command, localhost if empty
        templates_path: Path to the templates, absolute or relative to the
            config dir. Templates are searched in its "email" subdirectory
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    host: str = ''
    port: int = 587
    from_address: str = Field(default='', alias='from')
    user: str = ''
    password: str = Field(default='', repr=False)
    auth_type: int = 0
    encryption: int = 0
    domain: str = ''
    templates_path: str = 'templates'

    @classmethod
    def from_settings(cls) -> 'SMTPConfig':
        """Build a configuration from the environment settings."""
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            from_address=settings.SMTP_FROM,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            auth_type=settings.SMTP_AUTH_TYPE,
            encryption=settings.SMTP_ENCRYPTION,
            domain=settings.SMTP_DOMAIN,
            templates_path=settings.SMTP_TEMPLATES_PATH,
        )

    def validate_ranges(self) -> None:
        """
        Check port, auth type and encryption.

        Raises:
            ConfigError: naming the first invalid field and its value
        """
        if self.port <= 0 or self.port > 65535:
            raise ConfigError(f"smtp: invalid port {self.port}")
        if self.auth_type not in _AUTH_TYPES:
            raise ConfigError(f"smtp: invalid auth type {self.auth_type}")
        if self.encryption not in _ENCRYPTIONS:
            raise ConfigError(f"smtp: invalid encryption {self.encryption}")

    def get_auth_type(self) -> AuthType:
        if not self.user and not self.password:
            return AuthType.NONE
        return _AUTH_TYPES.get(self.auth_type, AuthType.PLAIN)

    def get_encryption(self) -> Encryption:
        return _ENCRYPTIONS.get(self.encryption, Encryption.NONE)


def load_config_file(path: str | Path) -> SMTPConfig:
    """
    Load an SMTP configuration from a JSON file.

    If the document has a top-level "smtp" object that section is used,
    otherwise the whole document is the SMTP configuration.

    Raises:
        ConfigError: If the file cannot be read or has invalid values
    """
    try:
        with open(path, encoding='utf-8') as f:
            document = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"smtp: unable to read config file {str(path)!r}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigError(f"smtp: invalid config file {str(path)!r}: expected an object")
    section = document.get('smtp', document)
    if not isinstance(section, dict):
        raise ConfigError(f"smtp: invalid config file {str(path)!r}: \"smtp\" must be an object")

    try:
        return SMTPConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"smtp: invalid config file {str(path)!r}: {e}") from e


def _is_path_valid(name: str) -> bool:
    return os.path.normpath(name or '.') not in ('.', '..')


def find_shared_data_path(name: str, search_dir: str, extra_dirs: Optional[List[str]] = None) -> str:
    """
    Resolve a shared data directory.

    Absolute paths are returned unchanged. Relative paths are looked up in
    search_dir and then in the extra shared data dirs, the first existing
    one wins. If none exists the path relative to search_dir is returned.

    Returns:
        str: The resolved path or an empty string if name is not valid
    """
    if not _is_path_valid(name):
        return ''
    if os.path.isabs(name):
        return name

    if extra_dirs is None:
        extra_dirs = settings.SHARED_DATA_DIRS
    search_list = []
    for base in [search_dir, *extra_dirs]:
        if base not in search_list:
            search_list.append(base)

    for base in search_list:
        candidate = os.path.join(base, name)
        if os.path.exists(candidate):
            return candidate
    return os.path.join(search_dir, name)
