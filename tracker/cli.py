#!/usr/bin/env python3
"""Project Tracker CLI.

Usage:
    tracker serve --port 8000
    tracker schema
    tracker call addClient name=Acme email=a@x.com phone=555
    tracker call projects --fields id,name,status,client
"""
import argparse
import asyncio
import json
import os
import sys

from .api import TrackerAPI
from .config import configure_logging, load_config
from .errors import PersistenceError, ValidationError
from .schema import schema
from .storage import create_store


def parse_variables(pairs: list[str]) -> dict:
    """Turn ``key=value`` pairs into a variables dict."""
    variables = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise ValidationError(f'Expected key=value, got {pair!r}', [(pair, 'malformed')])
        variables[key] = value
    return variables


def call_store_config(config, backend=None):
    """Store settings for ``call``: each call is its own process, so an
    unconfigured backend falls back to the JSON file instead of memory."""
    if backend:
        return config.store.model_copy(update={'backend': backend})
    if 'backend' not in config.store.model_fields_set:
        return config.store.model_copy(update={'backend': 'json'})
    return config.store


async def call(store_config, operation: str, variables: dict, fields=None):
    store = create_store(store_config)
    try:
        await store.init()
        return await schema.execute(TrackerAPI(store), operation, variables, fields)
    finally:
        await store.close()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Project Tracker - clients, projects, to-dos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
`call` keeps data in data/tracker.json unless a store backend is configured
(--backend, TRACKER__STORE__BACKEND or the config file). The memory backend
forgets everything when the call returns.

Examples:
  tracker call addClient name=Acme email=a@x.com phone=555
  tracker call clients
  tracker call addProject name=Site description=build clientId=<id> status=progress
  tracker call updateProject id=<id> status=completed
""",
    )
    parser.add_argument('--config', help='Path to YAML config (default: $TRACKER_CONFIG)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    serve.add_argument('--reload', action='store_true')

    sub.add_parser('schema', help='Print operations and types as JSON')

    run = sub.add_parser('call', help='Execute one query or mutation')
    run.add_argument('operation', help='Operation name, e.g. clients, addClient')
    run.add_argument('variables', nargs='*', help='Arguments as key=value')
    run.add_argument('--fields', help='Comma-separated field selection')
    run.add_argument('--backend', choices=['memory', 'json', 'sql'],
                     help='Store backend (default: configured backend, else json)')

    args = parser.parse_args(argv)
    config = load_config(args.config)
    configure_logging(config.logging)

    if args.command == 'serve':
        import uvicorn
        if args.config:
            # the app loads its own config on startup
            os.environ['TRACKER_CONFIG'] = args.config
        uvicorn.run('tracker.app:app', host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == 'schema':
        print(json.dumps(schema.describe(), indent=2))
        return 0

    fields = [f.strip() for f in args.fields.split(',')] if args.fields else None
    try:
        variables = parse_variables(args.variables)
        result = asyncio.run(call(
            call_store_config(config, args.backend), args.operation, variables, fields
        ))
    except ValidationError as e:
        print(f'❌ {e}', file=sys.stderr)
        return 2
    except PersistenceError as e:
        print(f'❌ Store error: {e}', file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
