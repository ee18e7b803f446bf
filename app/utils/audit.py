import json
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

_logger = logging.getLogger("audit")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def audit(event: str, *, user_id: Optional[Any] = None, **fields: Any) -> None:
    """Write one JSON line per alert lifecycle event (stored, dismissed, cleared).

    Ids, amounts and tiers may be passed as-is; they are rendered as strings.
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
    }
    if user_id:
        payload["user_id"] = _jsonable(user_id)
    payload.update({key: _jsonable(value) for key, value in fields.items()})
    _logger.info(json.dumps(payload, ensure_ascii=False, default=str))
