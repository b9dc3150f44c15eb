"""Tests for the email template store."""

import io

import pytest

from mailer.renderer import TEMPLATE_PASSWORD_RESET, RendererError, TemplateStore


@pytest.fixture
def email_dir(config_dir):
    return config_dir / "templates" / "email"


class TestTemplateStore:

    def test_load(self, email_dir):
        store = TemplateStore.load(email_dir)

        assert store.names() == [TEMPLATE_PASSWORD_RESET]

    def test_load_missing_template(self, tmp_path):
        with pytest.raises(RendererError, match="Template not found"):
            TemplateStore.load(tmp_path)

    def test_load_syntax_error(self, tmp_path):
        (tmp_path / TEMPLATE_PASSWORD_RESET).write_text("{% if %}")

        with pytest.raises(RendererError, match="Failed to load template"):
            TemplateStore.load(tmp_path)

    def test_render_link(self, email_dir):
        store = TemplateStore.load(email_dir)
        buf = io.StringIO()

        store.render(TEMPLATE_PASSWORD_RESET, buf, {"reset_link": "https://example.com/reset/abc123"})

        assert 'href="https://example.com/reset/abc123"' in buf.getvalue()

    def test_render_escapes_html(self, email_dir):
        store = TemplateStore.load(email_dir)
        buf = io.StringIO()

        store.render(TEMPLATE_PASSWORD_RESET, buf, {"reset_link": "<script>x</script>&"})

        output = buf.getvalue()
        assert "<script>" not in output
        assert "&lt;script&gt;x&lt;/script&gt;&amp;" in output

    def test_render_missing_field(self, email_dir):
        store = TemplateStore.load(email_dir)

        with pytest.raises(RendererError, match="reset_link"):
            store.render(TEMPLATE_PASSWORD_RESET, io.StringIO(), {})

    def test_render_object_as_data(self, tmp_path):
        (tmp_path / TEMPLATE_PASSWORD_RESET).write_text("code: {{ data.code }}")

        class ResetData:
            code = "424242"

        store = TemplateStore.load(tmp_path)
        buf = io.StringIO()
        store.render(TEMPLATE_PASSWORD_RESET, buf, ResetData())

        assert buf.getvalue() == "code: 424242"

    def test_render_object_attributes(self):
        from dataclasses import dataclass
        from pathlib import Path

        @dataclass
        class ResetData:
            code: str
            username: str

        email_dir = Path(__file__).resolve().parents[1] / "templates" / "email"
        store = TemplateStore.load(email_dir)
        buf = io.StringIO()

        store.render(TEMPLATE_PASSWORD_RESET, buf, ResetData(code="987654", username="jane"))

        assert "<b>987654</b>" in buf.getvalue()
        assert "Hello jane," in buf.getvalue()

    def test_render_unknown_template(self, email_dir):
        store = TemplateStore.load(email_dir)

        with pytest.raises(RendererError, match="Template not loaded"):
            store.render("welcome.html", io.StringIO(), {})


def test_shipped_template_renders():
    from pathlib import Path

    email_dir = Path(__file__).resolve().parents[1] / "templates" / "email"
    store = TemplateStore.load(email_dir)
    buf = io.StringIO()

    store.render(TEMPLATE_PASSWORD_RESET, buf, {"code": "123456", "username": "john"})

    assert "<b>123456</b>" in buf.getvalue()
    assert "Hello john," in buf.getvalue()
