from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol
from urllib.parse import urlencode

from starlette.concurrency import run_in_threadpool

from forum.core.errors import ExternalFailure
from forum.core.settings import Settings, settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send_verification_email(self, email: str, token: str) -> None: ...


def verification_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/verify?{urlencode({'token': token})}"


class SmtpNotifier:
    """Sends the verification link over SMTP (STARTTLS on 587, implicit TLS on 465)."""

    def __init__(self, cfg: Settings) -> None:
        self.cfg = cfg

    def _message(self, email: str, token: str) -> EmailMessage:
        link = verification_link(self.cfg.public_base_url, token)
        msg = EmailMessage()
        msg["From"] = self.cfg.smtp_from
        msg["To"] = email
        msg["Subject"] = "Verify your email address"
        msg.set_content(
            "Thanks for signing up!\n\n"
            f"Please verify your email address by opening this link:\n{link}\n\n"
            "The link expires in 24 hours."
        )
        return msg

    def _send(self, msg: EmailMessage) -> None:
        cfg = self.cfg
        if not cfg.smtp_host:
            raise RuntimeError("email not configured: set SMTP_HOST")
        if cfg.smtp_port == 465:
            with smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=20) as s:
                if cfg.smtp_user:
                    s.login(cfg.smtp_user, cfg.smtp_password)
                s.send_message(msg)
            return
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=20) as s:
            s.ehlo()
            s.starttls()
            s.ehlo()
            if cfg.smtp_user:
                s.login(cfg.smtp_user, cfg.smtp_password)
            s.send_message(msg)

    async def send_verification_email(self, email: str, token: str) -> None:
        msg = self._message(email, token)
        try:
            await run_in_threadpool(self._send, msg)
        except (OSError, smtplib.SMTPException, RuntimeError) as exc:
            logger.error("sending verification email to %s failed: %s", email, exc)
            raise ExternalFailure("Could not send verification email, please try again") from exc


class LogNotifier:
    """Development notifier: writes the link to the log instead of mailing it."""

    def __init__(self, cfg: Settings) -> None:
        self.cfg = cfg

    async def send_verification_email(self, email: str, token: str) -> None:
        logger.warning("SMTP not configured; verification link for %s: %s", email, verification_link(self.cfg.public_base_url, token))


def build_notifier(cfg: Settings = settings) -> Notifier:
    if cfg.smtp_host:
        return SmtpNotifier(cfg)
    return LogNotifier(cfg)
