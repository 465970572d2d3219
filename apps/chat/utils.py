import json
from django.core.serializers.json import DjangoJSONEncoder


def user_group_name(user_id) -> str:
    """Channel-layer group every socket of one user joins."""
    return f"user_{user_id}"


def to_wire(data):
    """Reduce a payload to JSON primitives (UUIDs, datetimes) for the channel layer."""
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))
