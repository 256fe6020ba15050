"""
MJML Email Templates
Templates for laboratory staff notifications
"""

from html import escape
from typing import Optional

# Laboratory theme colors
THEME = {
    "primary": "#033f63",
    "background": "#f7f7f7",
    "card_bg": "#ffffff",
    "text_primary": "#111111",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}

PRIORITY_COLORS = {
    "BAJA": THEME["text_muted"],
    "NORMAL": THEME["primary"],
    "ALTA": THEME["warning"],
    "URGENTE": THEME["danger"],
}


def get_base_template(title: str, preview_text: str, content_sections: str) -> str:
    """Base MJML template wrapper for all emails"""
    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="16px 24px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="#ffffff" padding="0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="24px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              Mensaje automático del sistema de gestión APL.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _paragraphs(message: str) -> str:
    return "<br/>".join(escape(line) for line in message.splitlines())


def basic_message_template(subject: str, message: str) -> str:
    """Plain message wrapped in the base layout"""
    content = f"""
    <mj-text>
      {_paragraphs(message)}
    </mj-text>
    """
    return get_base_template(escape(subject), escape(subject), content)


def reminder_notification_template(
    titulo: str,
    fecha_recordatorio: str,
    prioridad: str,
    descripcion: Optional[str] = None,
    observaciones: Optional[str] = None,
) -> str:
    """Reminder due notification MJML template"""
    color = PRIORITY_COLORS.get(prioridad, THEME["primary"])

    details = ""
    if descripcion:
        details += f"""
    <mj-text padding="0 0 16px 0">
      {_paragraphs(descripcion)}
    </mj-text>
    """
    if observaciones:
        details += f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="0 0 16px 0">
      Observaciones: {_paragraphs(observaciones)}
    </mj-text>
    """

    content = f"""
    <mj-text font-size="18px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 12px 0">
      {escape(titulo)}
    </mj-text>
    {details}
    <mj-table font-size="15px" padding="0">
      <tr>
        <td style="padding: 4px 0; color: {THEME['text_muted']};">Fecha</td>
        <td style="padding: 4px 0;">{escape(fecha_recordatorio)}</td>
      </tr>
      <tr>
        <td style="padding: 4px 0; color: {THEME['text_muted']};">Prioridad</td>
        <td style="padding: 4px 0; color: {color}; font-weight: 600;">{escape(prioridad)}</td>
      </tr>
    </mj-table>
    """
    return get_base_template("Recordatorio", escape(titulo), content)
