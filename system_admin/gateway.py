"""
Admin action gateway.

``admin_action`` wraps any ``fn(actor, ...)`` admin operation. Before the
operation runs it checks, in order: authentication, account state, the
required admin permission and the per-actor rate limit. After the operation
succeeds exactly one audit entry describes it: the entry the operation wrote
itself, or a request/response snapshot written by the gateway. That snapshot
is filed under ``target_entity`` and the ``target_kwarg`` argument, or under
whatever ``target(arguments, result)`` returns (a dict with ``target_entity``,
``target_id`` and optionally ``category``).
"""
import functools
import inspect
import logging

from django.core.exceptions import ImproperlyConfigured

from accounts.enums import AdminPermission, UserRole
from audit.enums import Category, Level, TargetEntity
from audit.payloads import AccessDenied, GatewayAction, RateLimitViolation
from audit.services import audit_scope, dispatch_entry, record_entry, request_context
from audit.utils import snapshot
from core.exceptions import Forbidden, RateLimited, Unauthenticated

from .ratelimit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def check_account(actor) -> None:
    if actor is None or not getattr(actor, "is_authenticated", False):
        raise Unauthenticated()
    if not actor.is_active:
        raise Forbidden("Account is suspended.")
    if actor.role == UserRole.LAB:
        profile = getattr(actor, "provider_profile", None)
        if profile is None or not profile.is_approved:
            raise Forbidden("Lab account is not approved.")


def check_permission(actor, permission: str, operation: str) -> None:
    if actor.has_admin_permission(permission):
        return
    ctx = request_context()
    record_entry(
        level=Level.WARNING,
        category=Category.SECURITY,
        action="unauthorized_access_attempt",
        target_entity=TargetEntity.SYSTEM,
        target_id=actor.pk,
        details=AccessDenied(
            required_permission=permission,
            user_permissions=list(actor.admin_permissions or []),
            endpoint=ctx.get("endpoint") or operation,
            operation=operation,
        ),
        actor=actor,
        context=ctx,
    )
    logger.warning("Permission %s denied to %s for %s", permission, actor.email, operation)
    raise Forbidden(f"Insufficient permissions. Required: {permission}")


def check_rate(actor, limiter: SlidingWindowRateLimiter, operation: str) -> None:
    decision = limiter.hit(actor.pk)
    if decision.allowed:
        return
    ctx = request_context()
    record_entry(
        level=Level.WARNING,
        category=Category.SECURITY,
        action="rate_limit_exceeded",
        target_entity=TargetEntity.SYSTEM,
        target_id=actor.pk,
        details=RateLimitViolation(
            endpoint=ctx.get("endpoint") or operation,
            attempt_count=decision.attempts,
            window_seconds=limiter.window,
            max_attempts=limiter.max_actions,
            retry_after=decision.retry_after,
            operation=operation,
        ),
        actor=actor,
        context=ctx,
    )
    logger.warning("Rate limit hit by %s on %s (retry in %ss)", actor.email, operation, decision.retry_after)
    raise RateLimited(wait=decision.retry_after)


def admin_action(
    permission: str,
    *,
    action: str,
    target_entity: str | None = None,
    target=None,
    category: str = Category.ADMIN_ACTION,
    target_kwarg: str | None = None,
    window: int | None = None,
    max_actions: int | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
):
    if permission not in AdminPermission.values:
        raise ImproperlyConfigured(f"Unknown admin permission '{permission}'")
    if target_entity is None and target is None:
        raise ImproperlyConfigured("admin_action needs target_entity or a target resolver")

    def deco(fn):
        operation = f"{fn.__module__}.{fn.__qualname__}"
        signature = inspect.signature(fn)
        actor_param = next(iter(signature.parameters))

        @functools.wraps(fn)
        def wrapper(actor, *args, **kwargs):
            check_account(actor)
            check_permission(actor, permission, operation)
            check_rate(actor, limiter or SlidingWindowRateLimiter(window, max_actions), operation)

            with audit_scope() as scope:
                result = fn(actor, *args, **kwargs)

            if not scope.recorded:
                arguments = signature.bind_partial(actor, *args, **kwargs).arguments
                arguments.pop(actor_param, None)
                if target is not None:
                    classification = target(arguments, result)
                else:
                    value = arguments.get(target_kwarg) if target_kwarg else None
                    classification = {
                        "target_entity": target_entity,
                        "target_id": getattr(value, "pk", value) if value is not None else actor.pk,
                    }
                dispatch_entry(
                    category=classification.get("category", category),
                    action=action,
                    target_entity=classification["target_entity"],
                    target_id=classification.get("target_id"),
                    details=GatewayAction(
                        operation=operation,
                        permission=permission,
                        request=snapshot(arguments),
                        response=snapshot(result),
                    ),
                    actor=actor,
                )
            return result

        wrapper.required_permission = permission
        wrapper.audit_action = action
        return wrapper

    return deco
