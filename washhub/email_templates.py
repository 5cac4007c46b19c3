"""
MJML Email Templates
Notification emails rendered with MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL

# App theme colors - Blue/Slate color scheme
THEME = {
    "primary": "#2563eb",
    "primary_dark": "#1d4ed8",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

# Accent per notification type
TYPE_ACCENTS = {
    "booking": "#2563eb",
    "order": "#0d9488",
    "payment": "#16a34a",
    "worker": "#7c3aed",
    "general": "#64748b",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-text font-size="22px" font-weight="700" color="{THEME['primary_dark']}" padding="0">
              WashHub
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              You're receiving this because you have a WashHub account.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def notification_email_template(
    user_name: Optional[str], title: str, message: str, notification_type: str = "general"
) -> str:
    """Generic notification email: greeting, accent bar and the notification message"""
    accent = TYPE_ACCENTS.get(notification_type, TYPE_ACCENTS["general"])
    greeting = f"Hi {escape(user_name)}," if user_name else "Hi there,"

    content = f"""
    <mj-text>
      {greeting}
    </mj-text>

    <mj-text padding="8px 0 24px 0" container-background-color="{THEME['primary_light']}" css-class="notice">
      <span style="display: block; border-left: 4px solid {accent}; padding: 12px 16px;">
        {escape(message)}
      </span>
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      You can see all your notifications in the WashHub app.
    </mj-text>
    """

    return get_base_template(
        title=escape(title),
        preview_text=escape(message[:90]),
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/notifications",
        cta_label="Open WashHub",
    )
