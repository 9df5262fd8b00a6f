"""
Prometheus metrics for booking, lifecycle, and ledger operations.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from stay_ledger.metrics import operation_duration, bookings_total
    >>> with operation_duration.labels(operation="create_stay").time():
    ...     reservation = create_stay(engine, property_id, request)
    ...     bookings_total.labels(outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Metrics
# =============================================================================

bookings_total = Counter(
    "stay_ledger_bookings_total",
    "Total booking attempts by outcome",
    ["outcome"],
)
"""
Counter for booking attempts.

Labels:
    outcome: success, or the error code that rejected the booking
"""

availability_conflicts = Counter(
    "stay_ledger_availability_conflicts_total",
    "Availability checks that found a conflicting block or stay",
    ["reason"],
)
"""
Counter for availability conflicts.

Labels:
    reason: block or stay
"""

status_transitions = Counter(
    "stay_ledger_status_transitions_total",
    "Applied reservation status transitions",
    ["from_status", "to_status"],
)

# =============================================================================
# Ledger Metrics
# =============================================================================

folio_lines_posted = Counter(
    "stay_ledger_folio_lines_posted_total",
    "Folio lines appended, by line type",
    ["line_type"],
)
"""
Counter for folio lines.

Labels:
    line_type: CHARGE, PAYMENT, or REVERSAL
"""

room_charges_posted = Counter(
    "stay_ledger_room_charges_posted_total",
    "Room-charge postings by rate source",
    ["rate_source"],
)
"""
Counter for room-charge postings.

Labels:
    rate_source: rate_plan or room_type
"""

# =============================================================================
# Timing
# =============================================================================

operation_duration = Histogram(
    "stay_ledger_operation_duration_seconds",
    "Duration of core booking and ledger operations in seconds",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for operation duration.

Labels:
    operation: Service operation name (create_stay, add_line, daily_report, ...)

Buckets: 5ms, 10ms, 25ms, 50ms, 100ms, 250ms, 500ms, 1s, 2.5s, +Inf
"""
