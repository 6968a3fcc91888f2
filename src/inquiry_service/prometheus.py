# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Prometheus metrics for the submission pipeline.

Metrics exposed:
    - ``inquiry_submissions_total``: Counter of submissions per outcome
      (``success``, ``partial_success``, ``failure``).
    - ``inquiry_notifications_total``: Counter of notification attempts per
      result (``sent``, ``not_configured``, ``rejected``).
    - ``inquiry_mail_enabled``: Gauge, 1 when email notifications are
      configured, 0 in degraded mode.

Example:
    Accessing metrics via the REST API::

        GET /metrics
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class SubmissionMetrics:
    """Prometheus metrics collector for the submission pipeline.

    Attributes:
        registry: The Prometheus CollectorRegistry holding all metrics.
        submissions: Counter of submissions labelled by outcome.
        notifications: Counter of notification attempts labelled by result.
        mail_enabled: Gauge showing whether mail is configured.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize metrics with an optional custom registry.

        Args:
            registry: Optional Prometheus CollectorRegistry. If not provided,
                a new registry is created.
        """
        self.registry = registry or CollectorRegistry()
        self.submissions = Counter(
            "inquiry_submissions_total",
            "Total inquiry submissions",
            ["outcome"],
            registry=self.registry,
        )
        self.notifications = Counter(
            "inquiry_notifications_total",
            "Total notification attempts",
            ["result"],
            registry=self.registry,
        )
        self.mail_enabled = Gauge(
            "inquiry_mail_enabled",
            "Whether email notifications are configured",
            registry=self.registry,
        )

    def inc_submission(self, outcome: str) -> None:
        self.submissions.labels(outcome=outcome).inc()

    def inc_notification(self, result: str) -> None:
        self.notifications.labels(result=result).inc()

    def set_mail_enabled(self, enabled: bool) -> None:
        self.mail_enabled.set(1 if enabled else 0)

    def generate_latest(self) -> bytes:
        """Export all metrics in Prometheus text exposition format."""
        return generate_latest(self.registry)
