import threading
from contextlib import contextmanager

_local = threading.local()

def set_request(req): _local.request = req
def get_request(): return getattr(_local, "request", None)
def clear_request():
    if hasattr(_local, "request"):
        delattr(_local, "request")


class AuditScope:
    """Collects ids of audit entries written while the scope is open."""

    def __init__(self):
        self.entry_ids = []

    @property
    def recorded(self) -> bool:
        return bool(self.entry_ids)


def _scopes():
    if not hasattr(_local, "scopes"):
        _local.scopes = []
    return _local.scopes


@contextmanager
def audit_scope():
    scope = AuditScope()
    stack = _scopes()
    stack.append(scope)
    try:
        yield scope
    finally:
        stack.remove(scope)


def note_recorded(entry_id) -> None:
    for scope in _scopes():
        scope.entry_ids.append(entry_id)
