"""Proxy configurator: the single nginx site fronting the application."""

from hostdeploy.constants import (
    NGINX_SITE_NAME,
    NGINX_SITES_AVAILABLE,
    NGINX_SITES_ENABLED,
)
from hostdeploy.core.protocols import RemoteExecutor
from hostdeploy.exceptions import ProxyError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.deployment import ProxyRule

SITE_TEMPLATE = """server {{
    listen {listen_port};
    server_name {server_name} _;

    location / {{
        proxy_pass {upstream};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;

        # WebSocket and other upgraded connections
        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection "upgrade";
    }}
}}
"""

# Minimal main config used to syntax-check the candidate site on its own
CHECK_TEMPLATE = """events {{}}
http {{
    include {site};
}}
"""


def render_site(rule: ProxyRule) -> str:
    """Render the complete site definition for a proxy rule."""
    return SITE_TEMPLATE.format(
        listen_port=rule.listen_port,
        server_name=rule.server_name,
        upstream=rule.upstream,
    )


class ProxyConfigurator:
    """
    Overwrites the site definition and reloads nginx only after it checks out.

    The candidate is written beside the live file and checked in isolation
    first; only then is it moved into place, the whole configuration is
    checked again, and the daemon reloaded. Any failed check leaves the
    running daemon on its previous configuration, and a failed full check
    puts the previous site file back. The distribution's default site is
    removed only once the full check has passed.
    """

    def __init__(self, executor: RemoteExecutor, logger: DeployLogger):
        self.executor = executor
        self.logger = logger
        self.site_path = f"{NGINX_SITES_AVAILABLE}/{NGINX_SITE_NAME}"
        self.pending_path = f"{self.site_path}.pending"
        self.backup_path = f"{self.site_path}.previous"
        self.enabled_path = f"{NGINX_SITES_ENABLED}/{NGINX_SITE_NAME}"
        self.check_path = f"/tmp/hostdeploy-{NGINX_SITE_NAME}-check.conf"

    def configure(self, rule: ProxyRule) -> str:
        site = render_site(rule)

        self._write(self.pending_path, site)
        self._write(self.check_path, CHECK_TEMPLATE.format(site=self.pending_path))

        check = self.executor.run(
            f"sudo nginx -t -c {self.check_path}",
            description="Testing generated Nginx site",
        )
        if check.is_failure:
            self.executor.run(
                f"sudo rm -f {self.pending_path} {self.check_path}",
                description="Discarding invalid site",
            )
            raise ProxyError(
                "Generated Nginx site failed the syntax check; daemon not reloaded",
                diagnostics=check.output,
            )

        swap = self.executor.run(
            f"sudo rm -f {self.backup_path} && "
            f"if [ -f {self.site_path} ]; then sudo cp -f {self.site_path} {self.backup_path}; fi && "
            f"sudo mv -f {self.pending_path} {self.site_path} && "
            f"sudo ln -sf {self.site_path} {NGINX_SITES_ENABLED}/",
            description="Enabling site",
        )
        if swap.is_failure:
            raise ProxyError("Failed to enable the Nginx site", diagnostics=swap.output)

        full_check = self.executor.run("sudo nginx -t", description="Testing Nginx configuration")
        if full_check.is_failure:
            self._restore_previous()
            raise ProxyError(
                "Nginx configuration test failed; previous site restored, daemon not reloaded",
                diagnostics=full_check.output,
            )

        self.executor.run(
            f"sudo rm -f {NGINX_SITES_ENABLED}/default {self.backup_path} {self.check_path}",
            description="Removing default site",
        )

        reload = self.executor.run("sudo systemctl reload nginx", description="Reloading Nginx")
        if reload.is_failure:
            raise ProxyError("Failed to reload Nginx", diagnostics=reload.output)

        self.logger.success(f"Nginx proxying port {rule.listen_port} to {rule.upstream}")
        return site

    def _restore_previous(self) -> None:
        """Put the last good site back, or unlink the new one on a first run."""
        self.executor.run(
            f"if [ -f {self.backup_path} ]; then sudo mv -f {self.backup_path} {self.site_path}; "
            f"else sudo rm -f {self.site_path} {self.enabled_path}; fi; "
            f"sudo rm -f {self.check_path}",
            description="Restoring previous site",
        )

    def _write(self, path: str, content: str) -> None:
        result = self.executor.run(
            f"sudo tee {path} > /dev/null",
            input=content,
            description=f"Writing {path}",
        )
        if result.is_failure:
            raise ProxyError(f"Failed to write {path}", diagnostics=result.output)
