"""
Email validation for sign-up and OTP requests.

Rejects malformed addresses and addresses at temporary/disposable
mail services.
"""

import re

from email_validator import EmailNotValidError, validate_email as check_email_syntax

from .exceptions import InvalidEmailError

DISPOSABLE_DOMAINS = frozenset({
    "10minutemail.com", "tempmail.com", "throwawaymail.com", "mailinator.com",
    "guerrillamail.com", "sharklasers.com", "yopmail.com", "maildrop.cc",
    "temp-mail.org", "dispostable.com", "tempinbox.com", "emailondeck.com",
    "mintemail.com", "spamgourmet.com", "trashmail.com", "mailnesia.com",
    "mailcatch.com", "jetable.org", "getnada.com", "tempr.email",
    "tempail.com", "fakeinbox.com", "tempmailer.com", "temp-mail.ru",
    "mailinator.net", "mailinator.org", "mailinator.io",
    "flektel.com", "tmpmail.org", "tmpmail.net", "tmpeml.com", "temp-mail.io",
    "mohmal.com", "improvmail.com", "moakt.com", "gmailnom.com", "correotemporal.org",
    "dropmail.me", "emailfake.com", "zeroe.ml", "0box.eu", "smailpro.com",
    "fakemail.net", "mailpoof.com", "emaildrop.io", "mxfactory.xyz", "tempinbox.xyz",
    "tempemails.net", "emailtemp.org", "instantemailaddress.com", "emailsecrete.com",
})

# Substrings that show up in throwaway-mail domain names
DISPOSABLE_PATTERNS = (
    "temp", "disposable", "throwaway", "tempmail", "tmpmail",
    "fake", "mailinator", "minute", "10minute", "hour",
    "burner", "guerrilla", "dump", "junk", "trash",
    "melt", "disappear", "discard", "one-time", "temporary",
)

SHORT_NUMERIC_DOMAIN = re.compile(r"^[a-z0-9]{2,3}\.[a-z]{2,3}$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_disposable_email(email: str) -> bool:
    _, _, domain = email.rpartition("@")
    domain = domain.lower()
    if not domain:
        return False

    if any(domain == d or domain.endswith(f".{d}") for d in DISPOSABLE_DOMAINS):
        return True

    if any(pattern in domain for pattern in DISPOSABLE_PATTERNS):
        return True

    # Very short domains containing digits are usually throwaway services
    return bool(SHORT_NUMERIC_DOMAIN.match(domain)) and any(c.isdigit() for c in domain)


def validate_email(email: str) -> str:
    """
    Validate an email address and return its normalised form.

    Raises:
        InvalidEmailError: Missing, malformed or disposable address.
    """
    if not email or not email.strip():
        raise InvalidEmailError("Email is required")

    try:
        email = check_email_syntax(normalize_email(email), check_deliverability=False).normalized
    except EmailNotValidError:
        raise InvalidEmailError("Please enter a valid email format")

    if is_disposable_email(email):
        raise InvalidEmailError("Temporary or disposable email addresses are not allowed")

    return email
