import sentry_sdk
from sentry_sdk.integrations.pymongo import PyMongoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

# Fields that may carry share tokens, storage locators or credentials
SENSITIVE_KEYS = (
    "share_id", "old_share_id", "storage_key", "access_key", "secret_key", "authorization", "cookie",
)


def init_sentry(
    dsn: str,
    environment: str = "dev",
    release: str | None = None,
    traces_sample_rate: float = 0.2,
    send_default_pii: bool = False,
):
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        send_default_pii=send_default_pii,
        integrations=[
            PyMongoIntegration(),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        traces_sample_rate=traces_sample_rate,
        max_breadcrumbs=200,
        before_send=_strip_sensitive,
    )


def _filter(value):
    """Replace sensitive keys at any depth; telemetry nests them under `event`"""
    if isinstance(value, dict):
        for k in list(value.keys()):
            if str(k).lower() in SENSITIVE_KEYS:
                value[k] = "[Filtered]"
            else:
                _filter(value[k])
    elif isinstance(value, list):
        for item in value:
            _filter(item)
    return value


def _strip_sensitive(event, hint):
    _filter(event.get("extra"))
    _filter(event.get("contexts"))
    for breadcrumb in (event.get("breadcrumbs") or {}).get("values", []) or []:
        _filter(breadcrumb.get("data"))
    return event
