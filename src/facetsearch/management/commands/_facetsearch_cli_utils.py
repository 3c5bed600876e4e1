"""Shared helpers for facetsearch management commands."""

from __future__ import annotations

import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder


def write_json(stdout: Any, payload: object) -> None:
    stdout.write(json.dumps(payload, indent=2, cls=DjangoJSONEncoder))
