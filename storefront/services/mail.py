"""Sends verification and password reset e-mails over SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Any, Optional

from flask import Flask, current_app, g

from .exceptions import MailDeliveryFailed

logger = logging.getLogger(__name__)


class MailSession(object):
    """An open session with an SMTP service."""

    def __init__(self, host: str = "", port: int = 0,
                 sender: str = 'no-reply@localhost') -> None:
        self._host = host
        self._port = port
        self.sender = sender
        self._conn: Optional[smtplib.SMTP] = None

    @property
    def configured(self) -> bool:
        """Whether an SMTP host is set. If not, messages are only logged."""
        return bool(self._host)

    def _connection(self) -> smtplib.SMTP:
        if self._conn is None:
            self._conn = smtplib.SMTP(host=self._host, port=self._port)
        return self._conn

    def send_message(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain text message.

        Raises
        ------
        :class:`MailDeliveryFailed`

        """
        message = EmailMessage()
        message['From'] = self.sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(body)
        try:
            self._connection().send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryFailed(f'Could not send mail: {e}') from e

    def close(self) -> None:
        """Close the SMTP connection, if one was opened."""
        if self._conn is not None:
            try:
                self._conn.quit()
            except smtplib.SMTPException as e:
                logger.debug('Error closing SMTP connection: %s', e)
            self._conn = None


def init_app(app: Flask) -> None:
    """Set defaults and close the mail session at the end of the context."""
    app.config.setdefault('MAIL_SERVER', '')
    app.config.setdefault('MAIL_PORT', 25)
    app.config.setdefault('MAIL_FROM', 'no-reply@localhost')

    @app.teardown_appcontext
    def close_mail_session(*args: Any, **kwargs: Any) -> None:
        session = g.pop('mail', None)
        if session is not None:
            session.close()


def get_session() -> MailSession:
    """Get a mail session for this application context."""
    if 'mail' not in g:
        g.mail = MailSession(current_app.config['MAIL_SERVER'],
                             current_app.config['MAIL_PORT'],
                             current_app.config['MAIL_FROM'])
    return g.mail


def _link(path: str, token: str) -> str:
    base = current_app.config.get('STOREFRONT_URL', '').rstrip('/')
    return f'{base}{path}?token={token}'


def _send(to: str, subject: str, body: str, token: str) -> None:
    session = get_session()
    if not session.configured:
        # Development stub: without an SMTP host there is no other way to
        # get hold of the token.
        logger.info('Mail not configured; %s for %s: token %s',
                    subject, to, token)
        return
    session.send_message(to, subject, body)
    logger.info('Sent "%s" to user', subject)


def send_verification(email: str, token: str) -> None:
    """Send the e-mail verification link to a new account."""
    _send(email, 'Verify your email address',
          'Welcome! Please confirm your e-mail address by visiting:\n\n'
          f'{_link("/verify-email", token)}\n',
          token)


def send_password_reset(email: str, token: str) -> None:
    """Send a password reset link, valid for a limited time."""
    minutes = int(current_app.config.get('RESET_TOKEN_DURATION', 3600)) // 60
    _send(email, 'Reset your password',
          'Someone (hopefully you) asked to reset your password. Visit the '
          f'link below within {minutes} minutes to choose a new one:\n\n'
          f'{_link("/reset-password", token)}\n\n'
          'If you did not ask for this, you can ignore this message.\n',
          token)
