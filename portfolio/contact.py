"""Contact form: payload validation, rate limiting and the mail relay."""

from __future__ import annotations

import logging
import re
import smtplib
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from email.message import EmailMessage

from .config import MailConfig

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

LIMITS = {
    "subject": 120,
    "name": 120,
    "email": 254,
    "message": 4000,
}


class ValidationError(Exception):
    """Bad contact payload; the message lists every problem found."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class RelayError(Exception):
    pass


@dataclass(frozen=True)
class ContactMessage:
    subject: str
    name: str
    email: str
    message: str


def validate_payload(payload) -> ContactMessage:
    if not isinstance(payload, dict):
        raise ValidationError(["Payload must be a JSON object."])

    problems = []
    fields = {}
    for key, limit in LIMITS.items():
        value = payload.get(key)
        value = "" if value is None else str(value).strip()
        if not value:
            problems.append(f"{key} is required.")
        elif len(value) > limit:
            problems.append(f"{key} must be at most {limit} characters.")
        fields[key] = value

    if fields["email"] and len(fields["email"]) <= LIMITS["email"] and not EMAIL_RE.match(fields["email"]):
        problems.append("email is not a valid address.")

    if problems:
        raise ValidationError(problems)
    return ContactMessage(**fields)


def compose(msg: ContactMessage, sender: str, recipient: str) -> EmailMessage:
    mail = EmailMessage()
    mail["From"] = f'"Portfolio Contact" <{sender}>'
    mail["To"] = recipient
    mail["Reply-To"] = msg.email
    mail["Subject"] = f"[Portfolio Contact] {msg.subject}"
    mail.set_content(
        "New message from your portfolio site:\n\n"
        f"Name: {msg.name}\n"
        f"Email: {msg.email}\n"
        f"Subject: {msg.subject}\n\n"
        "Message:\n"
        f"{msg.message}\n"
    )
    return mail


class SmtpRelay:
    """Forwards contact messages to the site owner over SMTP (SSL)."""

    def __init__(self, config: MailConfig, timeout: float = 30):
        self.config = config
        self.timeout = timeout

    def send(self, msg: ContactMessage):
        mail = compose(msg, self.config.user, self.config.recipient or self.config.user)
        try:
            with smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=self.timeout) as smtp:
                smtp.login(self.config.user, self.config.password)
                smtp.send_message(mail)
        except (smtplib.SMTPException, OSError) as e:
            raise RelayError(str(e)) from e


class RateLimiter:
    """Sliding-window request counter per client key."""

    def __init__(self, max_requests=20, window=15 * 60, clock=time.monotonic):
        self.max_requests = max_requests
        self.window = window
        self.clock = clock
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self):
        return len(self._hits)

    def _sweep(self, now):
        stale = [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]
        for k in stale:
            del self._hits[k]
        self._last_sweep = now

    def allow(self, key) -> bool:
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True


def handle_contact(payload, relay) -> tuple[int, dict]:
    """Validate and forward one submission; returns (HTTP status, JSON body)."""
    try:
        msg = validate_payload(payload)
    except ValidationError as e:
        return 400, {"error": str(e)}

    try:
        relay.send(msg)
    except RelayError as e:
        log.error("Error sending email from %s: %s", msg.email, e)
        return 500, {"error": "Failed to send email"}

    log.info("Email sent from %s", msg.email)
    return 200, {"success": True, "message": "Email sent successfully"}
