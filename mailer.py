#! /usr/bin/env python

"""Outbound mail for named-recipient shares"""

import logging
import smtplib
from email.mime.text import MIMEText

from errors import NotificationError

logger = logging.getLogger('shoebox')


def send_mail(to, subject, body, config):
  """Send a plain text mail through the configured SMTP server

  Args:
    to: recipient address
    subject: subject line
    body: plain text body
    config: mapping with the MAIL_* settings (usually app.config)

  Raises:
    NotificationError: server not configured or the SMTP exchange failed
  """
  sender = config.get('MAIL_DEFAULT_SENDER')

  if config.get('MAIL_SUPPRESS_SEND'):
    logger.info('MAIL_SUPPRESSED to=%s subject=%s', to, subject)
    return True

  server = config.get('MAIL_SERVER')
  if not server:
    raise NotificationError('Mail server is not configured')

  msg = MIMEText(body, 'plain', 'utf-8')
  msg['Subject'] = subject
  msg['From'] = sender
  msg['To'] = to

  try:
    with smtplib.SMTP(server, config.get('MAIL_PORT', 587), timeout=30) as smtp:
      if config.get('MAIL_USE_TLS', True):
        smtp.starttls()
      if config.get('MAIL_USERNAME'):
        smtp.login(config['MAIL_USERNAME'], config.get('MAIL_PASSWORD', ''))
      smtp.send_message(msg)
  except (smtplib.SMTPException, OSError) as e:
    logger.error('MAIL_FAILED to=%s subject=%s error=%s', to, subject, str(e))
    raise NotificationError(f'Mail delivery failed: {e}')

  logger.info('MAIL_SENT to=%s subject=%s', to, subject)
  return True


def compose_share_notification(owner, links):
  """Build (subject, body) for the mail that carries every link of a batch"""
  sharer = owner.username or owner.email
  if len(links) == 1:
    kind = links[0].kind
    article = 'an' if kind[0] in 'aeiou' else 'a'
    subject = f'{sharer} shared {article} {kind} with you'
  else:
    subject = f'{sharer} shared {len(links)} items with you'

  lines = [f'{sharer} shared the following with you on Shoebox:', '']
  for link in links:
    lines.append(f'- {link.kind} #{link.content_id}: {link.url}')
  expiry = links[0].expires_at if links else None
  if expiry:
    lines.append('')
    lines.append(f"These links expire on {expiry.strftime('%Y-%m-%d %H:%M')}.")
  return subject, '\n'.join(lines)
