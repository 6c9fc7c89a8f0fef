#!/usr/bin/env python3
"""
Frecency Service
HTTP surface for recording selections and ranking results, backed by Redis.

Endpoints:
    GET  /health
    POST /frecency/<resource_type>/record   {"search_query", "selected_id"}
    POST /frecency/<resource_type>/rank     {"search_query", "candidates", "id_field"}
    GET  /frecency/<resource_type>/stats

Usage:
    pip install flask redis pydantic
    python -m frecency.service
"""

import os
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Union

import redis
from flask import Flask, jsonify, request
from pydantic import BaseModel, ValidationError

from .config import FrecencyOptions
from .engine import Frecency
from .errors import FrecencyError
from .redis_client import RedisClient

# =============================================================================
# Configuration
# =============================================================================

REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
PORT = int(os.environ.get('FRECENCY_PORT', 9997))

# Comma-separated resource types to serve; empty serves any
RESOURCE_TYPES = [t.strip() for t in os.environ.get('FRECENCY_RESOURCE_TYPES', '').split(',')
                  if t.strip()]

# Engines kept loaded at once; the least recently used one is dropped
MAX_ENGINES = int(os.environ.get('FRECENCY_MAX_ENGINES', 64))

# =============================================================================
# Request Models
# =============================================================================


class RecordRequest(BaseModel):
    search_query: str = ''
    selected_id: Union[str, int] = ''


class RankRequest(BaseModel):
    search_query: str = ''
    candidates: List[Dict[str, Any]]
    id_field: str = 'id'


class UnknownResourceType(Exception):
    """Requested resource type is not served by this app."""


def _error(message: str, code: int):
    return jsonify({'status': 'error', 'message': message}), code


def create_app(storage=None, resource_types: Optional[Iterable[str]] = None,
               max_engines: Optional[int] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        storage: Provider with get/set shared by all engines (defaults to a
            RedisClient on REDIS_URL)
        resource_types: Resource types to serve (defaults to
            FRECENCY_RESOURCE_TYPES; empty serves any)
        max_engines: Engines kept loaded at once (defaults to
            FRECENCY_MAX_ENGINES)
    """
    app = Flask(__name__)
    storage = storage if storage is not None else RedisClient(url=REDIS_URL)
    allowed = set(RESOURCE_TYPES if resource_types is None else resource_types)
    max_engines = max(1, max_engines or MAX_ENGINES)
    engines: 'OrderedDict[str, Frecency]' = OrderedDict()
    app.extensions['frecency_engines'] = engines

    def get_engine(resource_type: str) -> Frecency:
        if allowed and resource_type not in allowed:
            raise UnknownResourceType(resource_type)

        engine = engines.get(resource_type)
        if engine is None:
            options = FrecencyOptions.from_env(resource_type=resource_type)
            engine = Frecency(storage=storage, options=options)
            engines[resource_type] = engine
            # Dropped engines reload from storage on next use
            while len(engines) > max_engines:
                engines.popitem(last=False)
        else:
            engines.move_to_end(resource_type)
        return engine

    @app.errorhandler(UnknownResourceType)
    def unknown_resource_type(e):
        return _error(f"Unknown resource type: {e}", 404)

    @app.errorhandler(ValidationError)
    def invalid_request(e):
        return _error(str(e), 400)

    @app.errorhandler(FrecencyError)
    def frecency_error(e):
        return _error(str(e), 503)

    @app.errorhandler(redis.RedisError)
    def redis_error(e):
        return _error(f"Storage unavailable: {e}", 503)

    @app.route('/health')
    def health():
        ping = getattr(storage, 'ping', None)
        return jsonify({'status': 'ok', 'redis': bool(ping()) if ping else None})

    @app.route('/frecency/<resource_type>/record', methods=['POST'])
    def record(resource_type):
        """Record a selection."""
        body = RecordRequest.model_validate(request.get_json(silent=True) or {})
        get_engine(resource_type).record(body.search_query, str(body.selected_id))
        return jsonify({'status': 'ok'})

    @app.route('/frecency/<resource_type>/rank', methods=['POST'])
    def rank(resource_type):
        """Rank candidates by frecency."""
        body = RankRequest.model_validate(request.get_json(silent=True) or {})
        results = get_engine(resource_type).rank(
            body.search_query, body.candidates, body.id_field)
        return jsonify({'results': results})

    @app.route('/frecency/<resource_type>/stats')
    def stats(resource_type):
        return jsonify(get_engine(resource_type).get_stats())

    return app


# =============================================================================
# Main
# =============================================================================

def main():
    print("Starting Frecency Service")
    print(f"Redis: {REDIS_URL}")
    print(f"Port: {PORT}")

    app = create_app()
    app.run(host='0.0.0.0', port=PORT, threaded=False)


if __name__ == '__main__':
    main()
