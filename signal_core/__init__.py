"""Core signal logic: models, indicators, and signal computation.

This package contains pure business logic with no I/O dependencies
(no network, no environment access). It is consumed by the dashboard
services (dashboard/), which fetch raw payloads and hand them over.
"""
