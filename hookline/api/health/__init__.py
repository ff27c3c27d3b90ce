"""Liveness and readiness probes for the webhook receiver.

Usage
-----
Import the probe resources for route registration::

    from hookline.api.health.resources import HealthResource, ReadyResource
"""
