"""Key lookup tasks.

Invoke task definitions printing client results as JSON. Configuration errors
are printed with guidance and exit non-zero.

Examples:
    invoke keys.list
    invoke keys.get openai --show
    FYK_ENVIRONMENT=prod invoke keys.stats
"""

import asyncio
import json
import sys

from invoke import Collection, Program, task

from .client import FetchYourKeys
from .config.logging import bootstrap_logging
from .exceptions import FetchYourKeysError


def _handle_config_error(e: FetchYourKeysError):
    """Handle configuration errors with built-in guidance."""
    print(e.guidance, file=sys.stderr)
    sys.exit(1)


def _create_client(environment=None, debug=False) -> FetchYourKeys:
    bootstrap_logging(__name__)
    try:
        return FetchYourKeys(environment=environment, debug=debug or None)
    except FetchYourKeysError as e:
        _handle_config_error(e)


def _print_result(result):
    print(result.model_dump_json(indent=2, exclude_none=True))
    if not result.success:
        sys.exit(1)


@task(help={
    'label': 'Label of the key to retrieve',
    'show': 'Show the actual key value (default: masked)',
    'environment': 'Cache environment: dev (disk) or prod (memory)',
    'debug': 'Enable debug logging'
})
def get(ctx, label, show=False, environment=None, debug=False):
    """
    Get a specific key by label.
    """
    client = _create_client(environment, debug)
    result = asyncio.run(client.get(label))
    if result.success and not show:
        result.data.value = '***'
    _print_result(result)


@task(help={
    'service': 'Only list keys for this service',
    'environment': 'Cache environment: dev (disk) or prod (memory)',
    'debug': 'Enable debug logging'
})
def list(ctx, service=None, environment=None, debug=False):
    """
    List key labels and services (values are never printed).
    """
    client = _create_client(environment, debug)
    if service:
        keys = asyncio.run(client.get_by_service(service))
    else:
        keys = asyncio.run(client.get_all())
    listing = [{'label': key.label, 'service': key.service, 'is_active': key.is_active} for key in keys]
    print(json.dumps(listing, indent=2))


@task(help={
    'environment': 'Cache environment: dev (disk) or prod (memory)',
    'debug': 'Enable debug logging'
})
def stats(ctx, environment=None, debug=False):
    """
    Show connection and cache status.
    """
    client = _create_client(environment, debug)
    asyncio.run(client.ready())
    print(client.get_stats().model_dump_json(indent=2, exclude_none=True))


@task(help={
    'environment': 'Cache environment: dev (disk) or prod (memory)',
    'debug': 'Enable debug logging'
})
def refresh(ctx, environment=None, debug=False):
    """
    Reload all keys from FetchYourKeys into the cache.
    """
    client = _create_client(environment, debug)

    async def _refresh():
        await client.ready()
        return await client.refresh()

    _print_result(asyncio.run(_refresh()))


@task(help={
    'environment': 'Cache environment: dev (disk) or prod (memory)',
    'debug': 'Enable debug logging'
})
def clear_cache(ctx, environment=None, debug=False):
    """
    Clear the local cache for the configured API key.
    """
    client = _create_client(environment, debug)
    client.clear_cache()
    print(json.dumps({'cleared': True, 'cacheId': client.get_stats().cache_id}, indent=2))


keys = Collection('keys')
for _task in (get, list, stats, refresh, clear_cache):
    keys.add_task(_task)

namespace = Collection()
namespace.add_collection(keys)

program = Program(namespace=namespace, version='0.1.0')
