"""
Template HTML delle email della GST Tennis Academy.
Ogni funzione restituisce il documento completo impaginato con `base_layout`.
"""

import html
import os
from datetime import datetime
from typing import Optional

APP_URL = os.getenv("APP_URL", "http://localhost:3000")


def base_layout(content: str, preheader: str = "") -> str:
    return f"""
<!DOCTYPE html>
<html lang="it">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>GST Tennis Academy</title>
  <style>
    body {{ margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f5f5f5; color: #333333; line-height: 1.6; }}
    .email-container {{ max-width: 600px; margin: 20px auto; background-color: #ffffff; border-radius: 8px; overflow: hidden; box-shadow: 0 2px 8px rgba(0,0,0,0.1); }}
    .email-header {{ background: linear-gradient(135deg, #056c94 0%, #39c3f9 100%); padding: 30px 20px; text-align: center; color: #ffffff; }}
    .email-content {{ padding: 40px 30px; }}
    .info-box {{ background-color: #dbeafe; border-left: 4px solid #3b82f6; padding: 16px; margin: 20px 0; border-radius: 4px; }}
    .button {{ display: inline-block; padding: 12px 24px; background-color: #1e40af; color: #ffffff; text-decoration: none; border-radius: 8px; font-weight: 600; }}
    .email-footer {{ background-color: #f9fafb; padding: 20px; text-align: center; color: #64748b; font-size: 12px; }}
  </style>
</head>
<body>
  <span style="display:none;">{html.escape(preheader)}</span>
  <div class="email-container">
    <div class="email-header">
      <h2 style="margin: 0;">GST Tennis Academy</h2>
    </div>
    <div class="email-content">
      {content}
    </div>
    <div class="email-footer">
      <div>GST Tennis Academy</div>
      <div><a href="{APP_URL}/api/email/unsubscribe">Disiscriviti dalle comunicazioni</a></div>
    </div>
  </div>
</body>
</html>
"""


def _format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def _format_time(start: datetime, end: datetime) -> str:
    return f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}"


def booking_confirmation(user_name: str, booking) -> str:
    content = f"""
      <h1>Prenotazione Ricevuta</h1>
      <p>Ciao <strong>{html.escape(user_name)}</strong>,</p>
      <p>Abbiamo ricevuto la tua prenotazione. Ecco i dettagli:</p>
      <div class="info-box">
        <p><strong>Campo:</strong> {html.escape(booking.court)}</p>
        <p><strong>Data:</strong> {_format_date(booking.start_time)}</p>
        <p><strong>Orario:</strong> {_format_time(booking.start_time, booking.end_time)}</p>
        <p style="color: #64748b; font-size: 13px;">Codice: #{booking.id}</p>
      </div>
      <p>Riceverai una notifica quando la prenotazione sarà confermata dalla segreteria.</p>
      <a href="{APP_URL}/bookings" class="button">Visualizza le tue prenotazioni</a>
      <p>Puoi cancellare gratuitamente fino a 24 ore prima dell'orario prenotato.</p>
    """
    return base_layout(
        content,
        preheader=f"Prenotazione per il {_format_date(booking.start_time)}",
    )


def booking_reminder(user_name: str, booking, hours_until: int) -> str:
    content = f"""
      <h1>Promemoria Prenotazione</h1>
      <p>Ciao <strong>{html.escape(user_name)}</strong>,</p>
      <p>Ti ricordiamo che tra circa {hours_until} ore hai una prenotazione:</p>
      <div class="info-box">
        <p><strong>Campo:</strong> {html.escape(booking.court)}</p>
        <p><strong>Data:</strong> {_format_date(booking.start_time)}</p>
        <p><strong>Orario:</strong> {_format_time(booking.start_time, booking.end_time)}</p>
      </div>
      <p>Presentati 10 minuti prima dell'orario prenotato.</p>
    """
    return base_layout(content, preheader="Promemoria prenotazione")


def notification(title: str, message: str, link: Optional[str] = None) -> str:
    button = ""
    if link:
        href = link if link.startswith("http") else f"{APP_URL}{link}"
        button = f'<a href="{html.escape(href)}" class="button">Apri</a>'
    content = f"""
      <h1>{html.escape(title)}</h1>
      <p>{html.escape(message)}</p>
      {button}
    """
    return base_layout(content, preheader=title)


def campaign(message: str) -> str:
    paragraphs = "".join(
        f"<p>{html.escape(line)}</p>" for line in message.split("\n") if line.strip()
    )
    return base_layout(paragraphs)
