"""Local persistence for the email a passwordless link was sent to."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

EMAIL_FOR_SIGN_IN_KEY = "emailForSignIn"


class EmailLinkStore:
    """Small JSON file holding the pending passwordless-link email.

    The link is opened later (often in a new request), so the email it was
    sent to has to survive between the two steps.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # Covers bad JSON and bad UTF-8 alike
            logger.warning(f"Ignoring unreadable sign-in store at {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed sign-in store at {self._path}")
            return {}
        return data

    def save(self, email: str) -> None:
        """Remember the email a sign-in link was sent to."""
        data = self._read()
        data[EMAIL_FOR_SIGN_IN_KEY] = email
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data), encoding="utf-8")

    def load(self) -> str | None:
        """Return the remembered email, if any."""
        email = self._read().get(EMAIL_FOR_SIGN_IN_KEY)
        return email if isinstance(email, str) else None

    def clear(self) -> None:
        """Forget the remembered email. Idempotent."""
        data = self._read()
        if data.pop(EMAIL_FOR_SIGN_IN_KEY, None) is None:
            return
        self._path.write_text(json.dumps(data), encoding="utf-8")
