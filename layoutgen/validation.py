"""Lightweight request / websocket payload validation utilities.

Provides minimal schema-like checking with clear, consistent error responses
for the HTTP and Socket.IO layers. Not a general JSON Schema implementation.

Schema Mini-Language (Python dict):
{
  'field_name': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'float', 'bool', 'seed'
Extras: min / max (numbers), min_len / max_len (str)

If invalid: (False, {'field': 'ticks', 'error': 'too large', 'code': 'max'})
If valid: (True, normalized_data)
"""
from __future__ import annotations

from typing import Any, Dict, Tuple


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v) -> bool:
    return (isinstance(v, (int, float))) and not isinstance(v, bool)


CHECKS = {
    'str': lambda v: isinstance(v, str),
    'int': _is_int,
    'float': _is_number,
    'bool': lambda v: isinstance(v, bool),
    'seed': lambda v: _is_int(v) or isinstance(v, str) or v is None,
}


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {'field': field, 'error': message, 'code': code}


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail('__root__', 'payload must be an object', 'type')
    out = {}
    for name, spec in schema.items():
        type_name, required = spec[0], spec[1]
        extras = spec[2] if len(spec) > 2 else {}
        if name not in payload:
            if required:
                return _fail(name, 'missing required field', 'required')
            continue
        value = payload[name]
        if not CHECKS[type_name](value):
            return _fail(name, f'expected {type_name}', 'type')
        if type_name in ('int', 'float'):
            if 'min' in extras and value < extras['min']:
                return _fail(name, 'too small', 'min')
            if 'max' in extras and value > extras['max']:
                return _fail(name, 'too large', 'max')
        elif type_name == 'str':
            s = value.strip()
            if not s:
                return _fail(name, 'must not be empty', 'empty')
            if 'min_len' in extras and len(s) < extras['min_len']:
                return _fail(name, 'too short', 'min_len')
            if 'max_len' in extras and len(s) > extras['max_len']:
                return _fail(name, 'too long', 'max_len')
            value = s
        out[name] = value
    return True, out


# Predefined schemas used by handlers
CREATE_LAYOUT = {
    'seed': ('seed', False),
    'room_threshold': ('int', False, {'min': 0, 'max': 500}),
    'min_area': ('float', False, {'min': 0}),
    'interactive': ('bool', False),
    'incremental_selection': ('bool', False),
    'strict_triangulation': ('bool', False),
    'max_settle_ticks': ('int', False, {'min': 1}),
}
TICK = {
    'ticks': ('int', False, {'min': 1, 'max': 1000}),
}
LAYOUT_REF = {
    'layout_id': ('str', True, {'min_len': 4, 'max_len': 64}),
}
LAYOUT_TICK = dict(LAYOUT_REF, **TICK)
LAYOUT_PLAY = dict(LAYOUT_REF, interval=('float', False, {'min': 0.0, 'max': 5.0}))
