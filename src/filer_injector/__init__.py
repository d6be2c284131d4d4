"""
Filer Injector - A mutating admission webhook for notebook pods.

This webhook mounts S3-compatible filer storage into notebook pods with:
- One goofys sidecar per filer connection secret in the pod's namespace
- CSI ephemeral volumes for FUSE file-descriptor passing
- Deterministic, collision-safe sidecar and volume naming
- Idempotent JSON Patch generation
"""

__version__ = "0.1.0"
