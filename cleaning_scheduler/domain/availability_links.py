"""
Signed availability links.

A cleaner receives one link per month.  The token carries the cleaner id,
the month and an expiry, signed with HMAC-SHA256 so the server can trust
it without a lookup table:

    base64url(json payload) "." hex(hmac)

Verification is constant-time and rejects tampered, malformed and expired
tokens with InvalidLinkError.
"""

import base64
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from cleaning_scheduler.domain.errors import InvalidLinkError, NotFoundError, ValidationError
from cleaning_scheduler.domain.periods import month_bounds, parse_date
from cleaning_scheduler.domain.roster import CleanerRoster

log = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=45)


@dataclass(frozen=True)
class AvailabilityGrant:
    """What a verified token entitles its holder to edit."""

    cleaner_id: str
    month: str
    expires_at: datetime


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class AvailabilityLinkSigner:

    def __init__(self, secret: str, ttl: timedelta = DEFAULT_TTL):
        if not secret:
            raise ValueError("availability link secret must not be empty")
        self._key = secret.encode("utf-8")
        self._ttl = ttl

    def _sign(self, body: str) -> str:
        return hmac.new(self._key, body.encode("ascii"), hashlib.sha256).hexdigest()

    def issue(self, cleaner_id: str, month: str, now: datetime | None = None) -> str:
        month_bounds(month)  # validates the format
        now = now or datetime.now(timezone.utc)
        payload = {
            "cleaner_id": cleaner_id,
            "month": month,
            "exp": int((now + self._ttl).timestamp()),
        }
        body = _b64encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
        return f"{body}.{self._sign(body)}"

    def verify(self, token: str, now: datetime | None = None) -> AvailabilityGrant:
        now = now or datetime.now(timezone.utc)
        body, sep, signature = (token or "").partition(".")
        if not sep or not body or not signature:
            raise InvalidLinkError("malformed availability token")

        try:
            expected = self._sign(body)
        except UnicodeEncodeError:
            raise InvalidLinkError("malformed availability token") from None
        if not hmac.compare_digest(expected, signature):
            raise InvalidLinkError("availability token signature mismatch")

        try:
            payload = json.loads(_b64decode(body))
            cleaner_id = str(payload["cleaner_id"])
            month = str(payload["month"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (ValueError, KeyError, TypeError):
            raise InvalidLinkError("malformed availability token payload") from None

        if now >= expires_at:
            raise InvalidLinkError(f"availability link for {month} expired at {expires_at.isoformat()}")

        return AvailabilityGrant(cleaner_id=cleaner_id, month=month, expires_at=expires_at)


def build_link(base_url: str, token: str) -> str:
    """Hash-routed calendar URL the cleaner opens to declare availability."""
    return f"{base_url.rstrip('/')}/#/availability/{token}"


def submit_availability(
    signer: AvailabilityLinkSigner,
    roster: CleanerRoster,
    token: str,
    dates: list[str],
    now: datetime | None = None,
) -> AvailabilityGrant:
    """Verify the link and replace the cleaner's declared dates for its month."""
    grant = signer.verify(token, now)

    if roster.get_cleaner(grant.cleaner_id) is None:
        raise NotFoundError("cleaner", grant.cleaner_id)

    first, last = month_bounds(grant.month)
    cleaned = set()
    for raw in dates:
        day = parse_date(raw).isoformat()
        if not first <= day <= last:
            raise ValidationError(f"{day} is outside {grant.month}")
        cleaned.add(day)

    roster.set_available_dates(grant.cleaner_id, grant.month, cleaned)
    log.info("cleaner=%s month=%s declared %d day(s)", grant.cleaner_id, grant.month, len(cleaned))
    return grant
