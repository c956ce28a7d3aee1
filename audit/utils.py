import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import Model


class AuditJSONEncoder(DjangoJSONEncoder):
    def default(self, o):
        try:
            return super().default(o)
        except TypeError:
            return str(o)


def json_ready(value: Any) -> Any:
    """
    Round-trip through the encoder so datetimes, UUIDs and Decimals land
    in a JSONField as plain strings.
    """
    return json.loads(json.dumps(value, cls=AuditJSONEncoder))


def snapshot(value: Any) -> Any:
    """Best-effort JSON snapshot of an operation argument or result."""
    if isinstance(value, Model):
        return {"model": value._meta.label_lower, "pk": json_ready(value.pk)}
    if isinstance(value, dict):
        return {str(k): snapshot(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [snapshot(v) for v in value]
    return json_ready(value)
