"""Canonical logging field names for call records.

Keeping names centralized keeps structured log lines stable across the
executor, the CLI, and any downstream log collection.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Call correlation fields.
OPERATION_ID = "operation_id"
HOST = "host"
CLIENT_IP = "client_ip"

# Request/response fields.
METHOD = "method"
URL = "url"
STATUS_CODE = "status_code"
DURATION_MS = "duration_ms"
OUTCOME = "outcome"
ERRORS = "errors"

CALL_COMPLETED_EVENT = "api_call_completed"
CALL_ABSORBED_FAILURE_EVENT = "api_call_transport_failure"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
