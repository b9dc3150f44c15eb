import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


RESET_TEMPLATE = """<html><body>
<p>Reset your password: <a href="{{ reset_link }}">{{ reset_link }}</a></p>
</body></html>
"""


@pytest.fixture
def config_dir(tmp_path):
    """Config dir with templates/email/reset-password.html inside."""
    email_dir = tmp_path / "templates" / "email"
    email_dir.mkdir(parents=True)
    (email_dir / "reset-password.html").write_text(RESET_TEMPLATE, encoding="utf-8")
    return tmp_path


class FakeSMTP:
    """Records the SMTP conversation instead of opening a socket."""

    instances = []
    refused = set()
    connect_error = None

    def __init__(self, host="", port=0, local_hostname=None, timeout=None, context=None):
        if FakeSMTP.connect_error is not None:
            raise FakeSMTP.connect_error
        self.host = host
        self.port = port
        self.local_hostname = local_hostname
        self.timeout = timeout
        self.context = context
        self.sock = Mock()
        self.user = None
        self.password = None
        self.calls = []
        self.auth_plain = Mock(name="auth_plain")
        self.auth_login = Mock(name="auth_login")
        self.auth_cram_md5 = Mock(name="auth_cram_md5")
        FakeSMTP.instances.append(self)

    def ehlo(self, name=""):
        self.calls.append(("ehlo",))
        return 250, b"OK"

    def starttls(self, context=None):
        self.calls.append(("starttls",))
        return 220, b"Ready"

    def auth(self, mechanism, authobject, *, initial_response_ok=True):
        self.calls.append(("auth", mechanism))
        return 235, b"Authenticated"

    def mail(self, sender, options=()):
        self.calls.append(("mail", sender))
        return 250, b"OK"

    def rcpt(self, recipient, options=()):
        self.calls.append(("rcpt", recipient))
        if recipient in FakeSMTP.refused:
            return 550, b"No such user"
        return 250, b"OK"

    def data(self, msg):
        self.calls.append(("data", msg))
        return 250, b"Queued"

    def rset(self):
        self.calls.append(("rset",))
        return 250, b"OK"

    def quit(self):
        self.calls.append(("quit",))
        return 221, b"Bye"

    def close(self):
        self.calls.append(("close",))

    def names(self):
        return [call[0] for call in self.calls]


class FakeSMTP_SSL(FakeSMTP):
    pass


@pytest.fixture
def fake_smtp(monkeypatch):
    """Replace smtplib.SMTP and smtplib.SMTP_SSL with recording fakes."""
    import smtplib

    FakeSMTP.instances = []
    FakeSMTP.refused = set()
    FakeSMTP.connect_error = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP_SSL)
    return FakeSMTP
