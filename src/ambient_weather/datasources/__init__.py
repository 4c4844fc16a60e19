"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, rate limiting, the GET itself
    ├── models.py         # Request context and response models
    ├── params.py         # Query/path parameter builders
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

``ambient/`` is currently the only source.  Fetch functions take the client
and a ``CallContext`` explicitly::

    from ambient_weather.context import CallContext
    from ambient_weather.datasources.ambient import AmbientClient, fetch_latest

    client = AmbientClient("https://rt.ambientweather.net/v1")
    devices = fetch_latest(client, CallContext.with_timeout(30), query)
"""
