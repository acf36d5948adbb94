"""Notification fan-out constants."""

# Recipients per push-gateway request
PUSH_BATCH_SIZE = 400

# A repeat join by the same user inside this window sends nothing
JOIN_ALERT_WINDOW_SECONDS = 5

# Operator account; its own joins never page the operator
OPERATOR_USER_ID = "73FowSCaUxXJBKb1xw6uqo3zCvq1"

WEBHOOK_ALERT_TITLE = "Turnix: New player in queue"

PUSH_ALERT_TITLE = "New player in queue"

QUEUE_JOIN_EVENT = "queue_join"
