"""
Injection package - the patch generation engine.

Contains:
- policy: decides whether a pod must be mutated
- naming: unique, valid sidecar names
- template: sidecar template loading and specialization
- patch: append-only JSON Patch builders
- orchestrator: assembles the patch for one admission request
"""

from filer_injector.injection.orchestrator import build_patch, build_patch_operations
from filer_injector.injection.policy import is_mutation_required
from filer_injector.injection.template import load_sidecar_template

__all__ = [
    "build_patch",
    "build_patch_operations",
    "is_mutation_required",
    "load_sidecar_template",
]
