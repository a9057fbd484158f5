"""HTML email templates."""

from __future__ import annotations

from html import escape
from urllib.parse import urlencode

from ..config import settings


def make_a_nice_email(text: str) -> str:
    """Wrap an HTML fragment in the house email layout."""
    return f"""
  <div class="email" style="
    border: 1px solid black;
    padding: 20px;
    font-family: sans-serif;
    line-height: 2;
    font-size: 20px;
  ">
    <h2>Hello There!</h2>
    <p>{text}</p>

    <p>😘, The Storefront Team</p>
  </div>
"""


def reset_link(reset_token: str, frontend_url: str | None = None) -> str:
    base = (frontend_url or settings.frontend_url).rstrip("/")
    return f"{base}/reset?{urlencode({'resetToken': reset_token})}"


def password_reset_email(reset_token: str, frontend_url: str | None = None) -> str:
    link = escape(reset_link(reset_token, frontend_url), quote=True)
    return make_a_nice_email(
        "Your Password Reset Token is here!\n\n"
        f'<a href="{link}">Click Here to Reset</a>'
    )
