"""Tests for nginx configuration generation."""

import os

from gitlabkit.config.settings import DeploymentSettings
from gitlabkit.proxy.nginx import NginxConfigGenerator


class TestNginxConfigGenerator:
    """Test nginx.conf and proxy.conf rendering."""

    def setup_method(self):
        """Setup test environment."""
        self.generator = NginxConfigGenerator(verbose=False)

    def test_tls_virtual_hosts(self, settings):
        """GitLab, the registry and Pages each get an HTTPS server."""
        vhosts = self.generator.tls_virtual_hosts(settings)

        assert [vhost["upstream"] for vhost in vhosts] == ["gitlab", "registry", "pages"]
        assert vhosts[0]["server_name"] == "gitlab.example.com"
        assert vhosts[1]["server_name"] == "registry.gitlab.example.com"

    def test_pages_pattern_escapes_dots(self, settings):
        """Dots of the domain are literal in the Pages regex."""
        pages = self.generator.tls_virtual_hosts(settings)[2]

        assert pages["server_name"] == r"~^(.+)\.pages\.gitlab\.example\.com$"

    def test_nginx_conf_upstreams(self, settings):
        """Upstreams target the GitLab container ports."""
        conf = self.generator.render_nginx_conf(settings)

        assert "upstream gitlab {\n        server gitlab:8181;" in conf
        assert "upstream registry {\n        server gitlab:5000;" in conf
        assert "upstream pages {\n        server gitlab:8090;" in conf

    def test_nginx_conf_tls(self, settings):
        """TLS servers share the wildcard certificate; only the first enables http2."""
        conf = self.generator.render_nginx_conf(settings)

        assert conf.count("listen 443 ssl") == 3
        assert conf.count("listen 443 ssl http2;") == 1
        assert conf.count("ssl_certificate /etc/nginx/ssl/fullchain.pem;") == 3
        assert conf.count("ssl_certificate_key /etc/nginx/ssl/privkey.pem;") == 3
        assert "server_name gitlab.example.com;" in conf
        assert "server_name registry.gitlab.example.com;" in conf

    def test_nginx_conf_plain_http(self, settings):
        """Port 80 serves the intranet host, redirects public hosts and rejects the rest."""
        conf = self.generator.render_nginx_conf(settings)

        assert "server_name gitlab.intra;" in conf
        assert "server_name gitlab.example.com registry.gitlab.example.com;" in conf
        assert "return 301 https://$host$request_uri;" in conf
        assert "listen 80 default_server;" in conf
        assert "return 404;" in conf

    def test_nginx_conf_includes_proxy_conf(self, settings):
        """Every proxied location includes the shared proxy settings."""
        conf = self.generator.render_nginx_conf(settings)

        assert conf.count("include /etc/nginx/proxy.conf;") == conf.count("proxy_pass ") == 4

    def test_custom_intranet_hostname(self, gitlab_dir):
        """The intranet host name is configurable."""
        settings = DeploymentSettings(domain="git.example.org", gitlab_dir=gitlab_dir, intranet_hostname="git.lan")

        conf = self.generator.render_nginx_conf(settings)

        assert "server_name git.lan;" in conf
        assert "gitlab.intra" not in conf

    def test_balanced_braces(self, settings):
        """The rendered file is structurally complete."""
        conf = self.generator.render_nginx_conf(settings)

        assert conf.count("{") == conf.count("}")
        assert "{{" not in conf

    def test_proxy_conf(self):
        """proxy.conf carries forwarding headers, upload size and timeouts."""
        conf = self.generator.render_proxy_conf()

        assert "proxy_set_header Host $http_host;" in conf
        assert "proxy_set_header X-Forwarded-Proto $scheme;" in conf
        assert "proxy_set_header Upgrade $http_upgrade;" in conf
        assert "client_max_body_size 1024m;" in conf
        assert "proxy_read_timeout 3600;" in conf

    def test_generate_config_files(self, settings):
        """Both files land in the nginx directory."""
        paths = self.generator.generate_config_files(settings)

        assert paths == [
            os.path.join(settings.nginx_dir, "nginx.conf"),
            os.path.join(settings.nginx_dir, "proxy.conf"),
        ]
        for path in paths:
            assert os.path.exists(path)
