"""Tests for the mailer CLI."""

import json

import pytest
from click.testing import CliRunner

import settings
from cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(config_dir):
    path = config_dir / "config.json"
    path.write_text(json.dumps({
        "smtp": {
            "host": "smtp.example.com",
            "port": 587,
            "from": "noreply@example.com",
            "user": "u",
            "password": "s3cr3t",
            "auth_type": 1,
            "encryption": 2,
        }
    }))
    return path


def test_check_disabled(runner, monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "")

    result = runner.invoke(cli, ["email", "check"])

    assert result.exit_code == 0
    assert "Email is disabled" in result.output


def test_check(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "email", "check"])

    assert result.exit_code == 0
    assert "smtp.example.com" in result.output
    assert "STARTTLS" in result.output
    assert "LOGIN" in result.output
    assert "s3cr3t" not in result.output


def test_check_invalid_config(runner, config_dir):
    path = config_dir / "config.json"
    path.write_text(json.dumps({"smtp": {"host": "x", "port": 70000}}))

    result = runner.invoke(cli, ["--config", str(path), "email", "check"])

    assert result.exit_code == 1
    assert "invalid port 70000" in result.output


def test_render_reset(runner, config_file):
    result = runner.invoke(cli, [
        "--config", str(config_file), "email", "render-reset", "-v", "reset_link=https://example.com/r/1",
    ])

    assert result.exit_code == 0
    assert 'href="https://example.com/r/1"' in result.output


def test_render_reset_invalid_variable(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "email", "render-reset", "-v", "broken"])

    assert result.exit_code == 1
    assert "Invalid variable format" in result.output


def test_send(runner, config_file, fake_smtp, tmp_path):
    attachment = tmp_path / "notes.txt"
    attachment.write_text("notes")

    result = runner.invoke(cli, [
        "--config", str(config_file), "email", "send",
        "-r", "a@example.com", "-r", "b@example.com", "-s", "Hello", "-m", "Hi", "-a", str(attachment),
    ])

    assert result.exit_code == 0, result.output
    assert "Email sent successfully" in result.output
    smtp = fake_smtp.instances[0]
    assert ("auth", "LOGIN") in smtp.calls
    assert ("mail", "noreply@example.com") in smtp.calls


def test_send_failure(runner, config_file, fake_smtp):
    fake_smtp.connect_error = OSError("network unreachable")

    result = runner.invoke(cli, [
        "--config", str(config_file), "email", "send", "-r", "a@example.com", "-s", "Hello", "-m", "Hi",
    ])

    assert result.exit_code == 1
    assert "Email failed" in result.output
