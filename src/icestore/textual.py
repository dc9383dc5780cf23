"""Textual integration for icestore. Opt-in — requires textual.

Binds store streams to widget updates. Guards, NoMatches handling and
thread marshaling live here so view code only supplies the effect.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

logger = logging.getLogger("icestore.textual")

# Module-owned pause state, keyed by id(app) so multiple apps stay independent.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bindings of app during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, stream, effect):
    """Subscribe effect to stream, safely bridged to Textual widgets.

    Values arriving while the app is paused or not running are skipped.
    NoMatches from widget queries is dropped; other errors propagate.
    Values published off the UI thread go through call_from_thread.
    Returns the unsubscribe function.
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            logger.debug("Binding target not mounted; skipped %r", value)

    return stream.subscribe(_guarded)


def bind_property(app, actuator, effect, modifier=None):
    """bind() to one actuator's observable."""
    return bind(app, actuator.observable(modifier), effect)
