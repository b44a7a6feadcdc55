"""hostinit — Application-wide constants and path configuration."""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Startup environment  (read once by ``hostinit run``)
# ---------------------------------------------------------------------------
SYSCTL_ENV = "SYSCTL"
DNS_SEARCH_ENV = "DNS_SEARCH"
DNS_APPEND_ENV = "DNS_APPEND"

# ---------------------------------------------------------------------------
# Kernel tunables  (/proc/sys)
# ---------------------------------------------------------------------------
SYSCTL_ROOT_ENV = "HOSTINIT_SYSCTL_ROOT"
SYSCTL_ROOT = Path(os.environ.get(SYSCTL_ROOT_ENV, "/proc/sys"))
SYSCTL_FILE_MODE = 0o644

# ---------------------------------------------------------------------------
# Resolver configuration
# ---------------------------------------------------------------------------
RESOLV_CONF_ENV = "HOSTINIT_RESOLV_CONF"
RESOLV_CONF = Path(os.environ.get(RESOLV_CONF_ENV, "/etc/resolv.conf"))
RESOLV_CONF_MODE = 0o666

# The metadata-service resolver every container should end up using
NAMESERVER_ENV = "HOSTINIT_NAMESERVER"
SENTINEL_NAMESERVER = os.environ.get(NAMESERVER_ENV, "169.254.169.250")
