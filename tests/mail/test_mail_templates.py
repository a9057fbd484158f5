"""
Tests for email templates
"""

from storefront.mail import make_a_nice_email, password_reset_email, reset_link


def test_make_a_nice_email_wraps_text():
    html = make_a_nice_email("Your order shipped")

    assert "Hello There!" in html
    assert "<p>Your order shipped</p>" in html
    assert 'class="email"' in html


def test_reset_link_uses_frontend_url():
    assert (
        reset_link("abc123", frontend_url="https://shop.example.com/")
        == "https://shop.example.com/reset?resetToken=abc123"
    )


def test_reset_link_defaults_to_settings(monkeypatch):
    from storefront.config import settings

    monkeypatch.setattr(settings, "frontend_url", "http://localhost:7777")

    assert reset_link("t0k3n") == "http://localhost:7777/reset?resetToken=t0k3n"


def test_password_reset_email_contains_link():
    html = password_reset_email("abc123", frontend_url="https://shop.example.com")

    assert '<a href="https://shop.example.com/reset?resetToken=abc123">' in html
    assert "Click Here to Reset" in html
