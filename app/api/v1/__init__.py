"""Version 1 of the HTTP API.

The aggregated router lives in `app.api.v1.routers` and is mounted by
`app.main.create_app` under `settings.API_V1_STR`.
"""

__all__ = []
