#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unit tests for the share notification mailer
"""

import unittest
import smtplib
import datetime
from unittest.mock import Mock, patch

from mailer import send_mail, compose_share_notification
from errors import NotificationError
from shares import ShareLink

CONFIG = {
    'MAIL_SERVER': 'smtp.example.com',
    'MAIL_PORT': 2525,
    'MAIL_USE_TLS': True,
    'MAIL_USERNAME': 'shoebox',
    'MAIL_PASSWORD': 'hunter2',
    'MAIL_DEFAULT_SENDER': 'shoebox@example.com',
    'MAIL_SUPPRESS_SEND': False,
}


class TestSendMail(unittest.TestCase):
    """Test SMTP delivery"""

    @patch('mailer.smtplib.SMTP')
    def test_suppressed_does_not_connect(self, mock_smtp):
        """Test suppressed mode only logs"""
        config = dict(CONFIG, MAIL_SUPPRESS_SEND=True)
        self.assertTrue(send_mail('bob@example.com', 'Hi', 'Body', config))
        mock_smtp.assert_not_called()

    def test_missing_server(self):
        """Test an unconfigured server is a notification failure"""
        config = dict(CONFIG, MAIL_SERVER='')
        with self.assertRaises(NotificationError):
            send_mail('bob@example.com', 'Hi', 'Body', config)

    @patch('mailer.smtplib.SMTP')
    def test_send(self, mock_smtp):
        """Test a message goes through TLS, login and send"""
        smtp = mock_smtp.return_value.__enter__.return_value

        self.assertTrue(send_mail('bob@example.com', 'Shared', 'Links here', CONFIG))

        mock_smtp.assert_called_once_with('smtp.example.com', 2525, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with('shoebox', 'hunter2')
        msg = smtp.send_message.call_args[0][0]
        self.assertEqual(msg['To'], 'bob@example.com')
        self.assertEqual(msg['From'], 'shoebox@example.com')
        self.assertEqual(msg['Subject'], 'Shared')

    @patch('mailer.smtplib.SMTP')
    def test_no_tls_no_login(self, mock_smtp):
        """Test plain relay without credentials"""
        smtp = mock_smtp.return_value.__enter__.return_value
        config = dict(CONFIG, MAIL_USE_TLS=False, MAIL_USERNAME='')

        send_mail('bob@example.com', 'Shared', 'Links here', config)

        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()
        smtp.send_message.assert_called_once()

    @patch('mailer.smtplib.SMTP')
    def test_smtp_failure(self, mock_smtp):
        """Test SMTP errors surface as NotificationError"""
        smtp = mock_smtp.return_value.__enter__.return_value
        smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

        with self.assertRaises(NotificationError):
            send_mail('bob@example.com', 'Shared', 'Links here', CONFIG)

    @patch('mailer.smtplib.SMTP', side_effect=OSError('connection refused'))
    def test_connection_failure(self, mock_smtp):
        """Test an unreachable server surfaces as NotificationError"""
        with self.assertRaises(NotificationError) as ctx:
            send_mail('bob@example.com', 'Shared', 'Links here', CONFIG)
        self.assertIn('connection refused', ctx.exception.message)


class TestComposeNotification(unittest.TestCase):
    """Test the notification text"""

    def setUp(self):
        self.owner = Mock(username='alice', email='alice@example.com')

    def test_single_link(self):
        """Test subject names the kind for one item"""
        links = [ShareLink('album', 4, 'tok', 'http://x/share/tok', None)]
        subject, body = compose_share_notification(self.owner, links)
        self.assertEqual(subject, 'alice shared an album with you')
        self.assertIn('http://x/share/tok', body)
        self.assertNotIn('expire', body)

    def test_many_links_with_expiry(self):
        """Test every link and the expiry are listed"""
        expires = datetime.datetime(2030, 1, 2, 3, 4)
        links = [ShareLink('photo', 1, 'a', 'http://x/share/a', expires),
                 ShareLink('tag', 2, 'b', 'http://x/share/b', expires)]
        subject, body = compose_share_notification(self.owner, links)
        self.assertEqual(subject, 'alice shared 2 items with you')
        self.assertIn('http://x/share/a', body)
        self.assertIn('http://x/share/b', body)
        self.assertIn('2030-01-02 03:04', body)

    def test_falls_back_to_email(self):
        """Test owners without a username are named by email"""
        owner = Mock(username=None, email='alice@example.com')
        links = [ShareLink('photo', 1, 'a', 'http://x/share/a', None)]
        subject, _ = compose_share_notification(owner, links)
        self.assertTrue(subject.startswith('alice@example.com'))


if __name__ == '__main__':
    unittest.main()
