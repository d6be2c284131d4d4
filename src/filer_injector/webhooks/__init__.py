"""
Mutating admission webhook for notebook pods.

This module provides the AdmissionReview codec, the pod mutation handler and
the aiohttp HTTPS server that exposes it to the Kubernetes API server.
"""
