"""
Email commands.
"""

import io
from pathlib import Path

import click
from mailer import (
    Attachment,
    ConfigError,
    ContentType,
    EmailClientError,
    EmailServiceError,
    Mailer,
    RendererError,
)


def _load_mailer(ctx) -> Mailer:
    """Initialize a Mailer from the configuration selected on the command line."""
    mailer = Mailer()
    try:
        mailer.initialize(ctx.obj['config'], ctx.obj['config_dir'])
    except ConfigError as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        ctx.exit(1)
    return mailer


@click.group()
def email():
    """Check the SMTP configuration and send emails."""
    pass


@email.command()
@click.pass_context
def check(ctx):
    """
    Validate the configuration and show the resolved settings.

    Example:
        mailer email check
        mailer --config /etc/app/config.json email check
    """
    mailer = _load_mailer(ctx)
    server = mailer.server
    if server is None:
        click.echo(click.style("Email is disabled (no SMTP host configured)", fg="yellow"))
        return

    click.echo(click.style("\n=== SMTP Configuration ===\n", bold=True))
    click.echo(f"  Host:       {server.host}")
    click.echo(f"  Port:       {server.port}")
    click.echo(f"  Username:   {server.username or '-'}")
    click.echo(f"  Auth:       {server.authentication}")
    click.echo(f"  Encryption: {server.encryption}")
    click.echo(f"  HELO:       {server.helo}")
    click.echo()


@email.command()
@click.option('--recipient', '-r', required=True, multiple=True, help='Recipient email address')
@click.option('--subject', '-s', required=True, help='Email subject')
@click.option('--message', '-m', required=True, help='Email message')
@click.option('--html', is_flag=True, help='Message is HTML (default: plain text)')
@click.option('--attach', '-a', multiple=True, type=click.Path(exists=True, dir_okay=False), help='File to attach')
@click.pass_context
def send(ctx, recipient, subject, message, html, attach):
    """
    Send a simple email.

    Example:
        mailer email send -r user@example.com -s "Test" -m "Hello World"
        mailer email send -r user@example.com -s "Test" -m "<h1>Hello</h1>" --html -a report.pdf
    """
    mailer = _load_mailer(ctx)
    attachments = [Attachment(name=Path(path).name, data=Path(path).read_bytes()) for path in attach]
    content_type = ContentType.TEXT_HTML if html else ContentType.TEXT_PLAIN

    click.echo(f"Sending email to {', '.join(recipient)}...")
    try:
        mailer.send_email(list(recipient), subject, message, content_type, attachments)
    except (EmailServiceError, EmailClientError) as e:
        click.echo(click.style(f"✗ Email failed: {e}", fg="red"))
        ctx.exit(1)

    click.echo(click.style("✓ Email sent successfully", fg="green"))


@email.command()
@click.option('--var', '-v', multiple=True, help='Template variables (key=value)')
@click.pass_context
def render_reset(ctx, var):
    """
    Render the password reset template to stdout.

    Example:
        mailer email render-reset -v code=123456 -v username=john
    """
    # Parse template variables
    context = {}
    for item in var:
        if '=' not in item:
            click.echo(click.style(f"Invalid variable format: {item} (use key=value)", fg="red"))
            ctx.exit(1)

        key, value = item.split('=', 1)
        context[key] = value

    mailer = _load_mailer(ctx)
    buf = io.StringIO()
    try:
        mailer.render_password_reset_template(buf, context)
    except (EmailServiceError, RendererError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        ctx.exit(1)

    click.echo(buf.getvalue())
