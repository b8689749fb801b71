"""
Constants
Centralised storage for issue ids, Dockerfile patch literals and result caps.
"""
DOCKERFILE_NAME = "Dockerfile"

# Issue ids
DOCKER_ENTRYPOINT_NOT_FOUND = "docker-entrypoint-not-found"
COREPACK_REGISTRY_TIMEOUT = "corepack-registry-timeout"
VITE_ROUTER_BASE_PATH = "vite-router-base-path"

# Entrypoint fix
ENTRYPOINT_SCRIPT = "docker-entrypoint.sh"
ENTRYPOINT_INSTALL_PATH = "/usr/local/bin/docker-entrypoint.sh"
ENTRYPOINT_NORMALIZE_COMMAND = (
    f"RUN sed -i 's/\\r$//' {ENTRYPOINT_INSTALL_PATH} && chmod +x {ENTRYPOINT_INSTALL_PATH}"
)

# Registry mirror fix
REGISTRY_MIRROR_URL = "https://registry.npmmirror.com"

# Analysis caps
MAX_MATCHED_LINES = 4
MAX_GENERIC_ERROR_LINES = 12

# Report caps (operator display only)
MAX_REPORT_LOG_LINES = 2
MAX_REPORT_GENERIC_LINES = 5

# Monitor statuses
STATUS_FAILED = "failed"
STATUS_SUCCESS = "success"
STATUS_TIMEOUT = "timeout"
