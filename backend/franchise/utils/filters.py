from __future__ import annotations
from typing import Any, Dict
from flask import abort


def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]):
    """Apply equality-style filters taken from request args.

    specs: { param_name: { 'column': column, 'coerce': callable (optional), 'choices': iterable (optional) } }
    Blank values are ignored; values that fail coercion or are not in choices abort 400.
    """
    for name, meta in specs.items():
        raw = params.get(name)
        if raw is None or raw == '':
            continue
        val = raw
        if 'coerce' in meta:
            try:
                val = meta['coerce'](raw)
            except (TypeError, ValueError):
                abort(400, description=f'{name} invalid')
        if 'choices' in meta and val not in meta['choices']:
            abort(400, description=f'{name} invalid')
        query = query.filter(meta['column'] == val)
    return query
