"""
Email composition tests.
Tests Jinja2 rendering of the HTML template, the plain-text body, and the
assembled message.
"""

from pathlib import Path

import pytest

from link_mailer.config import Settings
from link_mailer.errors import TemplateError
from link_mailer.services.email_template import (
    build_message,
    render_email_html,
    render_plain_text,
)

SHIPPED_TEMPLATE = Path(__file__).resolve().parent.parent / "email_template.html"
LINK = "https://test-project.firebaseapp.com/__/auth/action?oobCode=abc123"


def _write_template(tmp_path: Path, content: str, name: str = "email_template.html") -> str:
    path = tmp_path / name
    path.write_text(content)
    return str(path)


def _make_settings(template_path: str) -> Settings:
    return Settings(
        firebase_project_id="test-project",
        callback_url="https://app.example.com/auth/callback",
        sendgrid_api_key="SG.test",
        sender_email="no-reply@example.com",
        sender_name="Clubs",
        email_subject="Your Clubs link",
        email_template_path=template_path,
    )


class TestRenderEmailHtml:

    def test_substitutes_link_and_flag(self, tmp_path):
        path = _write_template(
            tmp_path,
            '<a href="{{ email_verification_link }}">{% if is_sign_in %}Sign in{% else %}Verify{% endif %}</a>',
        )

        html = render_email_html(path, LINK, True)

        assert html == f'<a href="{LINK}">Sign in</a>'

    def test_verification_branch(self, tmp_path):
        path = _write_template(tmp_path, "{% if is_sign_in %}Sign in{% else %}Verify{% endif %}")

        assert render_email_html(path, LINK, False) == "Verify"

    def test_link_is_html_escaped(self, tmp_path):
        path = _write_template(tmp_path, "{{ email_verification_link }}")

        html = render_email_html(path, 'https://x.example/?a="<b>"', True)

        assert "<b>" not in html
        assert "&lt;b&gt;" in html

    def test_substitution_is_single_pass(self, tmp_path):
        """Template syntax inside the link is output literally, not re-rendered."""
        path = _write_template(tmp_path, "{{ email_verification_link }}")

        html = render_email_html(path, "https://x.example/{{ is_sign_in }}", True)

        assert html == "https://x.example/{{ is_sign_in }}"

    def test_missing_template_raises_template_error(self, tmp_path):
        with pytest.raises(TemplateError) as exc_info:
            render_email_html(str(tmp_path / "nope.html"), LINK, True)

        assert "not found" in str(exc_info.value)
        assert exc_info.value.http_status_code == 500

    def test_broken_template_raises_template_error(self, tmp_path):
        path = _write_template(tmp_path, "{% if is_sign_in %}unterminated")

        with pytest.raises(TemplateError):
            render_email_html(path, LINK, True)

    def test_unknown_variable_raises_template_error(self, tmp_path):
        path = _write_template(tmp_path, "{{ user_name }}")

        with pytest.raises(TemplateError):
            render_email_html(path, LINK, True)

    def test_relative_path_resolves_against_working_directory(self, tmp_path, monkeypatch):
        _write_template(tmp_path, "link={{ email_verification_link }}")
        monkeypatch.chdir(tmp_path)

        assert render_email_html("email_template.html", LINK, True) == f"link={LINK}"

    def test_shipped_template_renders_both_variants(self):
        sign_in = render_email_html(str(SHIPPED_TEMPLATE), LINK, True)
        verify = render_email_html(str(SHIPPED_TEMPLATE), LINK, False)

        assert LINK in sign_in
        assert LINK in verify
        assert "Sign in" in sign_in
        assert "Verify email" in verify
        assert "<!DOCTYPE html>" in sign_in


class TestRenderPlainText:

    def test_embeds_link(self):
        assert render_plain_text(LINK) == (
            f"Welcome to Clubs! Follow the link to authenticate: {LINK}."
        )


class TestBuildMessage:

    def test_message_fields(self, tmp_path):
        path = _write_template(tmp_path, "<p>{{ email_verification_link }}</p>")
        settings = _make_settings(path)

        message = build_message(settings, "user@example.com", LINK, True)

        assert message.recipient == "user@example.com"
        assert message.sender_email == "no-reply@example.com"
        assert message.sender_name == "Clubs"
        assert message.subject == "Your Clubs link"
        assert LINK in message.plain_text_body
        assert message.html_body == f"<p>{LINK}</p>"

    def test_template_failure_propagates(self, tmp_path):
        settings = _make_settings(str(tmp_path / "missing.html"))

        with pytest.raises(TemplateError):
            build_message(settings, "user@example.com", LINK, True)
