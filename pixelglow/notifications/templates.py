"""
Gabarits d'e-mails transactionnels (sélection par template_id).
Un template_id inconnu retombe sur le gabarit générique 'notification'.
"""
from html import escape
from typing import Any, Dict, Optional

from pixelglow import config

BRAND = "PIXELGLOWAI"
FALLBACK_TEMPLATE = "notification"

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
_BUTTON = (
    '<div style="text-align: center; margin: 30px 0;">'
    '<a href="{href}" style="background-color: #4CAF50; color: white; padding: 12px 24px; '
    'text-decoration: none; border-radius: 5px;">{label}</a></div>'
)
_SIGNATURE = f"<p>Best regards,<br>The {BRAND} Team</p>"


def _v(data: Dict[str, Any], key: str, default: str) -> str:
    return escape(str(data.get(key) or default))


def _welcome(data: Dict[str, Any]) -> Dict[str, str]:
    return {
        "subject": f"Welcome to {BRAND} - Your AI Headshot Studio",
        "html": (
            f'<h1 style="color: #333; text-align: center;">Welcome to {BRAND}!</h1>'
            f"<p>Thank you for joining {BRAND}, the #1 AI Photo Generator.</p>"
            "<p>You can now create professional headshots in minutes with our AI technology.</p>"
            + _BUTTON.format(href=f"{config.APP_URL}/dashboard", label="Get Started")
        ),
    }


def _payment_success(data: Dict[str, Any]) -> Dict[str, str]:
    return {
        "subject": "Payment Successful - Your AI Headshots are Being Generated",
        "html": (
            '<h1 style="color: #333; text-align: center;">Payment Successful!</h1>'
            "<p>Thank you for your purchase. Your AI headshots are now being generated.</p>"
            "<p><strong>Order Details:</strong></p><ul>"
            f"<li>Plan: {_v(data, 'planName', 'Professional')}</li>"
            f"<li>Amount: {_v(data, 'amount', '$39')}</li>"
            f"<li>Headshots: {_v(data, 'headshots', '100')}</li>"
            f"<li>Turnaround: {_v(data, 'turnaround', '2 hours')}</li>"
            "</ul><p>You will receive another email once your headshots are ready for download.</p>"
            + _BUTTON.format(href=f"{config.APP_URL}/dashboard", label="View Dashboard")
        ),
    }


def _headshots_ready(data: Dict[str, Any]) -> Dict[str, str]:
    return {
        "subject": "Your AI Headshots are Ready!",
        "html": (
            '<h1 style="color: #333; text-align: center;">Your Headshots are Ready!</h1>'
            "<p>Great news! Your professional AI headshots have been generated and are ready for download.</p>"
            f"<p>We've created {_v(data, 'headshots', '100')} unique headshots with various backgrounds and styles.</p>"
            + _BUTTON.format(href=f"{config.APP_URL}/dashboard/results", label="Download Your Headshots")
            + "<p>Remember: You have full commercial rights to use these headshots anywhere!</p>"
        ),
    }


def _notification(data: Dict[str, Any]) -> Dict[str, str]:
    return {
        "subject": f"{BRAND} Notification",
        "html": f'<h1 style="color: #333; text-align: center;">{BRAND}</h1><p>Thank you for using {BRAND}.</p>',
    }


TEMPLATES = {
    "welcome": _welcome,
    "payment_success": _payment_success,
    "headshots_ready": _headshots_ready,
    FALLBACK_TEMPLATE: _notification,
}


def render_template(template_id: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """Retourne {"subject", "html"}; gabarit générique si template_id inconnu."""
    builder = TEMPLATES.get(template_id) or TEMPLATES[FALLBACK_TEMPLATE]
    rendered = builder(data or {})
    rendered["html"] = _WRAPPER.format(body=rendered["html"] + _SIGNATURE)
    return rendered
