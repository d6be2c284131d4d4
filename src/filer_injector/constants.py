"""
Constants used throughout the filer injector.

This module defines all constant values used by the webhook including:
- Pod labels and annotations that drive the mutation policy
- Credential secret naming and data keys
- Sidecar naming limits and prefixes
- Mount locations inside the notebook container
"""

# Admission annotations
ANNOTATION_PREFIX = "filer-injector-webhook.das-zone.statcan"
INJECT_ANNOTATION = f"{ANNOTATION_PREFIX}/inject"
STATUS_ANNOTATION = f"{ANNOTATION_PREFIX}/status"
STATUS_INJECTED = "injected"

# Inject annotation values that opt a pod out of injection
INJECT_DISABLED_VALUES = frozenset({"n", "not", "false", "off"})

# Pods must carry this label to be considered at all
NOTEBOOK_LABEL = "notebook-name"

# Credential secrets
FILER_SECRET_MARKER = "filer-conn-secret"
SECRET_KEY_BUCKET = "S3_BUCKET"
SECRET_KEY_URL = "S3_URL"
SECRET_KEY_ACCESS = "S3_ACCESS"
SECRET_KEY_SECRET = "S3_SECRET"
UNKNOWN_FILER_NAME = "error"

# Name token limits (container names are capped at 63 characters)
FILER_NAME_LIMIT = 7  # fits sas filers, e.g. "sasfs40"
BUCKET_NAME_LIMIT = 5
DEEPEST_DIR_LIMIT = 5
FALLBACK_HASH_LENGTH = 8
VALID_NAME_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"

# Sidecar resource naming patterns
FD_PASSING_VOLUME_PREFIX = "fuse-fd-passing-"
CSI_EPHEMERAL_VOLUME_PREFIX = "fuse-csi-ephemeral-"
FUSERMOUNT_PROXY_PREFIX = "fusermount3-proxy-"
FUSE_SOCKET_NAME = "fuse-csi-ephemeral.sock"
FD_PASSING_ATTRIBUTE = "fdPassingEmptyDirName"

# Sidecar command
GOOFYS_BINARY = "/goofys"
GOOFYS_FLAGS = (
    "--cheap --endpoint {endpoint} --http-timeout 1500s --dir-mode 0777 "
    "--file-mode 0777  --debug_fuse --debug_s3 -o allow_other -f"
)

# Notebook container
NOTEBOOK_ENV_MARKER = "NB_PREFIX"
FILERS_MOUNT_BASE = "/home/jovyan/filers"
MOUNT_PROPAGATION = "HostToContainer"

# Pod spec JSON Pointer paths
CONTAINERS_PATH = "/spec/containers"
VOLUMES_PATH = "/spec/volumes"
ANNOTATIONS_PATH = "/metadata/annotations"

# Admission review envelope
ADMISSION_API_VERSION = "admission.k8s.io/v1"
ADMISSION_KIND = "AdmissionReview"
PATCH_TYPE_JSON = "JSONPatch"
EXPECTED_CONTENT_TYPE = "application/json"

# Error message templates
ERROR_TEMPLATE_STRUCTURE = "Sidecar template is invalid: {}"
