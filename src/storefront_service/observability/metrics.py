"""Custom metrics for the storefront service."""

from opentelemetry import metrics

# Get meter for storefront service
meter = metrics.get_meter("storefront-svc")

# Data store requests by backend, collection, operation and outcome
gateway_request_counter = meter.create_counter(
    name="gateway_requests_total",
    description="Total number of data store requests",
    unit="1",
)

# Admin mutations by collection, operation and outcome
mutation_counter = meter.create_counter(
    name="admin_mutations_total",
    description="Total number of admin create/update/delete attempts",
    unit="1",
)

# Public menu aggregation duration histogram
menu_aggregation_duration = meter.create_histogram(
    name="menu_aggregation_duration_seconds",
    description="Duration of public menu aggregation",
    unit="s",
)


def record_gateway_request(backend: str, collection: str, operation: str, success: bool) -> None:
    """Record a data store request.

    Args:
        backend: Gateway backend name (e.g., "rest", "dynamodb")
        collection: Table the request targeted
        operation: select, insert, update or delete
        success: Whether the request succeeded
    """
    gateway_request_counter.add(
        1,
        {
            "backend": backend,
            "collection": collection,
            "operation": operation,
            "outcome": "success" if success else "failure",
        },
    )


def record_mutation(collection: str, operation: str, outcome: str) -> None:
    """Record an admin mutation attempt.

    Args:
        collection: Table being mutated
        operation: create, update or delete
        outcome: success, remote_error, validation_error or unconfirmed
    """
    mutation_counter.add(1, {"collection": collection, "operation": operation, "outcome": outcome})


def record_menu_aggregation(duration_seconds: float, success: bool) -> None:
    """Record how long a public menu aggregation took.

    Args:
        duration_seconds: Duration in seconds
        success: Whether both reads succeeded
    """
    menu_aggregation_duration.record(duration_seconds, {"success": success})
