"""
Audit log store: record, dispatch, query and resolve entries.

Recording is best-effort. A failed write is logged with its traceback and the
caller carries on; nothing here raises into a business operation.
"""
import logging
import uuid
from datetime import datetime, time

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from accounts.enums import UserRole
from core.background import run_detached
from core.exceptions import NotFound, ValidationFailed

from .enums import Level, Category, ActorType, TargetEntity
from .local import get_request, audit_scope, note_recorded  # noqa: F401  (audit_scope re-exported)
from .models import AuditLog
from .payloads import build_details

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 1000


def _authenticated(user):
    return user if getattr(user, "is_authenticated", False) else None


def actor_type_for(user) -> str:
    if user is None:
        return ActorType.SYSTEM
    role = getattr(user, "role", None)
    if role in UserRole.admin_roles():
        return ActorType.ADMIN
    if role == UserRole.DOCTOR:
        return ActorType.DOCTOR
    if role == UserRole.LAB:
        return ActorType.LAB
    if role == UserRole.PATIENT:
        return ActorType.USER
    return ActorType.UNKNOWN


def _client_ip(meta) -> str | None:
    forwarded = meta.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return meta.get("REMOTE_ADDR") or None


def request_context(request=None) -> dict:
    """
    Ambient request metadata for an audit entry. Empty when there is no request.
    """
    req = request if request is not None else get_request()
    if req is None:
        return {}
    meta = getattr(req, "META", {}) or {}
    return {
        "ip_address": _client_ip(meta),
        "user_agent": meta.get("HTTP_USER_AGENT", ""),
        "endpoint": (getattr(req, "path", "") or "")[:255],
        "method": (getattr(req, "method", "") or "")[:10],
        "actor": _authenticated(getattr(req, "user", None)),
    }


def record_entry(
    *,
    category: str,
    action: str,
    target_entity: str,
    target_id=None,
    level: str = Level.INFO,
    details=None,
    actor=None,
    tags=None,
    request=None,
    context: dict | None = None,
) -> str | None:
    """
    Write one audit entry and return its id, or None if the write failed.
    """
    try:
        if level not in Level.values or category not in Category.values or target_entity not in TargetEntity.values:
            raise ValueError(f"Invalid audit classification {level}/{category}/{target_entity}")

        ctx = context if context is not None else request_context(request)
        actor = _authenticated(actor) or ctx.get("actor")

        with transaction.atomic():
            entry = AuditLog.objects.create(
                level=level,
                category=category,
                action=action[:64],
                actor=actor,
                actor_type=actor_type_for(actor),
                actor_email=(getattr(actor, "email", "") or "") if actor else "",
                target_entity=target_entity,
                target_id="" if target_id is None else str(target_id),
                details=build_details(action, details),
                tags=list(tags or []),
                ip_address=ctx.get("ip_address"),
                user_agent=ctx.get("user_agent") or "",
                endpoint=ctx.get("endpoint") or "",
                method=ctx.get("method") or "",
            )
    except Exception:
        logger.exception("Failed to record audit entry %s/%s", category, action)
        return None

    note_recorded(entry.pk)
    return str(entry.pk)


def dispatch_entry(**kwargs) -> None:
    """
    Fire-and-forget record_entry. Request context is captured in the caller's
    thread before handing off.
    """
    if kwargs.get("context") is None:
        kwargs["context"] = request_context(kwargs.pop("request", None))
    run_detached(record_entry, mode=settings.AUDIT_DELIVERY_MODE, name="audit-entry", **kwargs)


def _choice(filters, key, allowed):
    value = filters.get(key)
    if value in (None, ""):
        return None
    if value not in allowed:
        raise ValidationFailed({key: f"Unknown value '{value}'."})
    return value


def _moment(filters, key, end_of_day=False):
    value = filters.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = parse_datetime(str(value))
        if dt is None:
            d = parse_date(str(value))
            if d is None:
                raise ValidationFailed({key: f"Invalid date '{value}'."})
            dt = datetime.combine(d, time.max if end_of_day else time.min)
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def _flag(filters, key):
    value = filters.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationFailed({key: f"Invalid boolean '{value}'."})


def query_entries(filters: dict | None = None, limit: int = DEFAULT_QUERY_LIMIT):
    """
    Entries matching ``filters``, newest first, at most ``limit`` of them.

    Supported keys: level, category, action, actor_id, target_entity,
    target_id, start, end, resolved.
    """
    filters = filters or {}
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise ValidationFailed({"limit": "Must be an integer."})
    if limit < 1:
        raise ValidationFailed({"limit": "Must be positive."})
    limit = min(limit, MAX_QUERY_LIMIT)

    q = AuditLog.objects.select_related("actor")

    level = _choice(filters, "level", Level.values)
    category = _choice(filters, "category", Category.values)
    target_entity = _choice(filters, "target_entity", TargetEntity.values)
    start = _moment(filters, "start")
    end = _moment(filters, "end", end_of_day=True)
    resolved = _flag(filters, "resolved")

    if level: q = q.filter(level=level)
    if category: q = q.filter(category=category)
    if target_entity: q = q.filter(target_entity=target_entity)
    if filters.get("action"): q = q.filter(action=filters["action"])
    if filters.get("actor_id"): q = q.filter(actor_id=filters["actor_id"])
    if filters.get("target_id") not in (None, ""): q = q.filter(target_id=str(filters["target_id"]))
    if start: q = q.filter(created_at__gte=start)
    if end: q = q.filter(created_at__lte=end)
    if resolved is not None: q = q.filter(resolved=resolved)

    return q.order_by("-created_at")[:limit]


def _entry_pk(entry_id):
    try:
        return uuid.UUID(str(entry_id))
    except (TypeError, ValueError):
        raise NotFound("Audit entry not found.")


def get_entry(entry_id) -> AuditLog:
    entry = AuditLog.objects.select_related("actor", "resolved_by").filter(pk=_entry_pk(entry_id)).first()
    if entry is None:
        raise NotFound("Audit entry not found.")
    return entry


def resolve_entry(entry_id, resolved_by, notes: str = "") -> AuditLog:
    """
    Mark an entry resolved. Resolving an already-resolved entry changes nothing.
    """
    pk = _entry_pk(entry_id)
    updated = AuditLog.objects.filter(pk=pk, resolved=False).update(
        resolved=True,
        resolved_by=_authenticated(resolved_by),
        resolved_at=timezone.now(),
        resolution_notes=notes or "",
    )
    entry = get_entry(pk)
    if updated:
        logger.info("Audit entry %s resolved by %s", pk, getattr(resolved_by, "email", None))
    return entry
