"""Log-safe renderings of account emails and client-supplied correlation ids."""

import hashlib
import re

DIGEST_LENGTH = 12
SAFE_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")
SAFE_DOMAIN = re.compile(r"^[a-z0-9.-]{1,253}$")


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


def masked_email(email) -> str:
    """Hash the mailbox part of ``email`` and keep a plain domain.

    Case is folded first so every spelling of an address masks the same way.
    """
    text = (email or "").strip().lower()
    if not text:
        return "email-missing"
    local, sep, domain = text.rpartition("@")
    if not sep or not local or not SAFE_DOMAIN.match(domain):
        return f"email-{_digest(text)}"
    return f"{_digest(local)}@{domain}"


def loggable_correlation_id(correlation_id) -> str:
    """Return the id itself when it is a plain token, else a digest of it.

    Ids arrive in a client header, so anything that could break a log line
    is replaced.
    """
    text = str(correlation_id or "").strip()
    if not text:
        return "cid-missing"
    if SAFE_CORRELATION_ID.match(text):
        return text
    return f"cid-{_digest(text)}"


__all__ = ["loggable_correlation_id", "masked_email"]
