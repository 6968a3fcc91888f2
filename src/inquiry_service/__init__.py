# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Contact-form inquiry service: persist a submission, then notify by email.

This package implements the submission pipeline behind a "contact us" form:

- Durable storage of inquiries (SQLite or PostgreSQL)
- Email notification to an administrator with optional CC recipients
- A degraded mode that keeps the service running when mail is not configured
- A partial-success contract when the record is saved but the email is not
- FastAPI REST API, Prometheus metrics and a command-line tool

Example:
    Wiring the pipeline by hand::

        from inquiry_service.config_loader import load_settings
        from inquiry_service.dispatcher import NotificationDispatcher
        from inquiry_service.orchestrator import SubmissionOrchestrator
        from inquiry_service.store import InquiryStore

        settings = load_settings()
        store = InquiryStore.from_url(settings.require_database_url())
        await store.init_db()
        dispatcher = NotificationDispatcher(settings.mail)
        orchestrator = SubmissionOrchestrator(store, dispatcher)

        result = await orchestrator.submit({
            "name": "Asha", "company": "Acme", "email": "asha@acme.test",
            "phone": "+91 98765 43210", "requirement": "Rooftop solar\\n40 kW",
        })
"""

__version__ = "0.1.0"
