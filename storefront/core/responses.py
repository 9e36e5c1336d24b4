"""Response envelopes shared by every route."""
import math
from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    body = {
        'success': True,
        'message': message,
        'data': jsonable_encoder(data),
        'status_code': status_code,
        'timestamp': _now(),
    }
    return JSONResponse(status_code=status_code, content=body)


def paginated(message: str, data: Any, page: int, per_page: int, total: int, status_code: int = 200) -> JSONResponse:
    body = {
        'success': True,
        'message': message,
        'data': jsonable_encoder(data),
        'meta': {
            'page': page,
            'per_page': per_page,
            'total_page': math.ceil(total / per_page) if per_page else 0,
            'total': total,
        },
        'status_code': status_code,
        'timestamp': _now(),
    }
    return JSONResponse(status_code=status_code, content=body)


def error(message: str, errors: Any, status_code: int) -> JSONResponse:
    body = {
        'success': False,
        'message': message,
        'errors': jsonable_encoder(errors),
        'status_code': status_code,
        'timestamp': _now(),
    }
    return JSONResponse(status_code=status_code, content=body)
