"""
hostdeploy Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Input defaults
DEFAULT_BRANCH = "main"
DEFAULT_SSH_KEY_PATH = "~/.ssh/id_rsa"
DEFAULT_LOG_DIR = "logs"

# Environment variables read by the deploy command (and .env files)
ENV_REPO_URL = "HOSTDEPLOY_REPO_URL"
ENV_TOKEN = "HOSTDEPLOY_TOKEN"
ENV_BRANCH = "HOSTDEPLOY_BRANCH"
ENV_SSH_USER = "HOSTDEPLOY_SSH_USER"
ENV_HOST = "HOSTDEPLOY_HOST"
ENV_SSH_KEY = "HOSTDEPLOY_SSH_KEY"
ENV_APP_PORT = "HOSTDEPLOY_APP_PORT"

# SSH options (hosts are often freshly provisioned, so known_hosts is bypassed)
SSH_OPTIONS = [
    "-o",
    "StrictHostKeyChecking=no",
    "-o",
    "UserKnownHostsFile=/dev/null",
    "-o",
    "LogLevel=QUIET",
]

# Remote layout
REMOTE_APP_DIR = "~/app"

# Deployment descriptors (compose wins when both exist)
COMPOSE_DESCRIPTOR = "docker-compose.yml"
BUILD_DESCRIPTOR = "Dockerfile"

# Reserved runtime identity (same across runs: at most one instance per host)
IMAGE_NAME = "app-deployment"
CONTAINER_NAME = "app-container"

# Settle interval: ceiling for the readiness wait after starting a workload
SETTLE_CEILING_SECONDS = 15.0
SETTLE_INITIAL_DELAY_SECONDS = 1.0

# Health probes
HEALTH_CONNECT_TIMEOUT = 10
HEALTH_TOTAL_TIMEOUT = 30
PROXY_PUBLIC_PORT = 80

# Proxy daemon (nginx) layout
NGINX_SITE_NAME = "app"
NGINX_SITES_AVAILABLE = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED = "/etc/nginx/sites-enabled"
NGINX_ERROR_LOG = "/var/log/nginx/error.log"
NGINX_ERROR_LOG_LINES = 20

# Remote packages, keyed by capability name
CAPABILITY_PACKAGES = {
    "docker": "docker.io",
    "compose": "docker-compose",
    "proxy": "nginx",
    "fetch": "curl",
}

# Services that must report active after bootstrap
REQUIRED_SERVICES = ["docker", "nginx"]

# Group that grants container management without sudo
CONTAINER_GROUP = "docker"

# Local tools (for doctor check)
REQUIRED_LOCAL_TOOLS = ["git", "ssh", "rsync"]

# Redaction
REDACTED = "[REDACTED]"
HIDDEN = "[HIDDEN]"

# Log Configuration
LOG_FILE_FORMAT = "deploy_%Y%m%d_%H%M%S.log"
LOG_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Compose project name (reserved identity of the compose stack)
COMPOSE_PROJECT_NAME = "app"

# Lines of workload logs captured as diagnostics
DIAGNOSTIC_LOG_LINES = 200

# Markers in teardown errors meaning "nothing to remove"
ABSENT_MARKERS = ["no such container", "no such object"]
