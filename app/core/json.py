# app/core/json.py
from typing import Any
from datetime import datetime, timezone
import json
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse


def _utc_iso(value: datetime) -> str:
    # SQLite devuelve datetimes naive: los tratamos como UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class UTF8JSONResponse(JSONResponse):
    """
    JSON en UTF-8 sin escapes ASCII (captions con emojis 🍕🍣 llegan tal cual)
    y con fechas siempre en ISO-8601 UTC.
    """
    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        payload = jsonable_encoder(
            content,
            exclude_none=False,
            custom_encoder={datetime: _utc_iso},
        )
        return json.dumps(
            payload,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")
