"""Process-wide session state and the listener that maintains it."""

from webaffe_console.session.listener import SessionBootstrapListener
from webaffe_console.session.store import SessionReader, SessionStore

__all__ = ["SessionBootstrapListener", "SessionReader", "SessionStore"]
