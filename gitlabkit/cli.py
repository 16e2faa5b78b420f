"""Main CLI entry point for gitlabkit.

This module provides the command-line interface for gitlabkit, a generator
for self-hosted GitLab deployments. It writes the Docker Compose manifest,
the nginx reverse proxy configuration and the certificate renewal script,
and provisions the deployment credentials exactly once.

The CLI is built using Click and provides a hierarchical command structure
with comprehensive help and error handling.
"""

import os
from typing import Optional

import click

from gitlabkit import __version__
from gitlabkit.environments.production import ARTIFACTS
from gitlabkit.utils.errors import ErrorHandler
from gitlabkit.utils.logging import setup_logging


def _config_manager(ctx: click.Context):
    from gitlabkit.config import ConfigManager

    return ConfigManager(config_file=ctx.obj["config_file"])


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="gitlabkit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be done without executing"
)
@click.option("--log-file", help="Log to file in addition to console")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Configuration file (default: ./gitlabkit.yml if present)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    dry_run: bool,
    log_file: Optional[str],
    config_file: Optional[str],
) -> None:
    """gitlabkit - Self-hosted GitLab deployment generator.

    Generates docker-compose.yml, nginx configuration and a certificate
    renewal script for a GitLab installation backed by PostgreSQL, Redis,
    MinIO and Postfix. Credentials are generated on the first run and reused
    on every run after that.

    Args:
        ctx: Click context object containing shared state
        verbose: Enable verbose output for detailed logging
        dry_run: Show what would be done without writing anything
        log_file: Optional path to log file for additional logging
        config_file: Optional configuration file path
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["dry_run"] = dry_run
    ctx.obj["log_file"] = log_file
    ctx.obj["config_file"] = config_file
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


@cli.command()
@click.option("--domain", help="Public GitLab host, e.g. gitlab.example.com")
@click.option("--gitlab-dir", help="Deployment directory (default: ~/gitlab)")
@click.option("--owner", help="uid:gid the deployment tree is handed to (default: 1000:1000)")
@click.option("--no-chown", is_flag=True, help="Keep the current owner of the generated files")
@click.option("--skip-checks", is_flag=True, help="Skip docker / docker compose availability checks")
@click.pass_context
def init(
    ctx: click.Context,
    domain: Optional[str],
    gitlab_dir: Optional[str],
    owner: Optional[str],
    no_chown: bool,
    skip_checks: bool,
) -> None:
    """Generate the GitLab deployment.

    Creates the directory layout, provisions credentials (reusing an existing
    secrets file), and writes docker-compose.yml, nginx/nginx.conf,
    nginx/proxy.conf and backups/renew-cert.sh.

    Args:
        ctx: Click context object
        domain: Public GitLab host name
        gitlab_dir: Deployment directory
        owner: Owner of the generated tree in uid:gid form
        no_chown: Skip the ownership change
        skip_checks: Skip external dependency checks
    """
    try:
        from gitlabkit.environments import ProductionEnvironment

        config_manager = _config_manager(ctx)

        if not domain and not config_manager.configured_domain():
            domain = click.prompt("GitLab domain (e.g. gitlab.example.com)")

        settings = config_manager.build_settings(domain=domain, gitlab_dir=gitlab_dir, owner=owner)
        prod_env = ProductionEnvironment(settings, verbose=ctx.obj["verbose"])

        if ctx.obj["dry_run"]:
            plan = prod_env.plan()
            click.echo(f"DRY RUN: Would generate GitLab deployment for {settings.domain}")
            click.echo(f"DRY RUN: Directory: {plan['gitlab_dir']}")
            click.echo(f"DRY RUN: Would {plan['secrets_action']} secrets in {plan['secrets_file']}")
            for path in plan["files"]:
                click.echo(f"DRY RUN: Would write {path}")
            if not no_chown:
                click.echo(f"DRY RUN: Would change ownership to {plan['owner']}")
            return

        click.echo(f"Generating GitLab deployment for {settings.domain}...")

        result = prod_env.generate(check_dependencies=not skip_checks, change_owner=not no_chown)

    except click.Abort:
        raise
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Deployment generation")
        return

    if result["secrets_created"]:
        click.echo(f"✓ Generated credentials in {result['secrets_file']} (mode 600)")
    else:
        click.echo(f"✓ Reusing existing credentials from {result['secrets_file']}")

    for path in result["files_created"]:
        click.echo(f"✓ Wrote {path}")

    if result["owner_changed"]:
        click.echo(f"✓ Ownership set to {settings.owner}")
        click.echo(
            f"  {result['secrets_file']} is now owned by {settings.owner} with mode 600, "
            "run later gitlabkit commands as that user or with sudo"
        )
    else:
        click.echo(f"Ownership unchanged, run 'sudo chown -R {settings.owner} {result['gitlab_dir']}' if needed")

    click.echo(f"\n✓ GitLab deployment generated in {result['gitlab_dir']}")
    click.echo("\nNext steps:")
    click.echo("  1. Obtain the wildcard certificate (first run), with the DNS API")
    click.echo(f"     credentials for {settings.acme_dns_provider} exported:")
    click.echo(f"       {settings.renew_script}")
    click.echo("  2. Start the services:")
    click.echo(f"       cd {result['gitlab_dir']}")
    click.echo("       docker compose up -d")
    click.echo("  3. Schedule certificate renewal (crontab -e):")
    click.echo(f"       {result['cron_entry']}")
    click.echo("\nThe first GitLab start takes 5-10 minutes.")


@cli.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def secrets(ctx: click.Context) -> None:
    """Deployment credentials management."""
    pass


@secrets.command("ensure")
@click.option("--path", "path", help="Secrets file (default: <gitlab-dir>/secrets.env)")
@click.pass_context
def secrets_ensure(ctx: click.Context, path: Optional[str]) -> None:
    """Generate the secrets file unless it already exists."""
    try:
        from gitlabkit.secrets import SecretManager

        secrets_file = _config_manager(ctx).resolve_secrets_file(path)

        if ctx.obj["dry_run"]:
            action = "reuse" if os.path.exists(secrets_file) else "generate"
            click.echo(f"DRY RUN: Would {action} secrets in {secrets_file}")
            return

        secret_manager = SecretManager(verbose=ctx.obj["verbose"])
        _, created = secret_manager.provision(secrets_file)

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Credential provisioning")
        return

    if created:
        click.echo(f"✓ Generated credentials in {secrets_file} (mode 600)")
    else:
        click.echo(f"✓ Credentials already present in {secrets_file}")


@secrets.command("show")
@click.option("--path", "path", help="Secrets file (default: <gitlab-dir>/secrets.env)")
@click.option("--reveal", is_flag=True, help="Print full values instead of masked ones")
@click.pass_context
def secrets_show(ctx: click.Context, path: Optional[str], reveal: bool) -> None:
    """Print the provisioned credentials."""
    try:
        from gitlabkit.secrets import SecretManager

        secrets_file = _config_manager(ctx).resolve_secrets_file(path)
        bundle = SecretManager(verbose=ctx.obj["verbose"]).load_secrets(secrets_file)

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Reading credentials")
        return

    values = bundle.as_env() if reveal else bundle.masked()
    for key, value in values.items():
        click.echo(f"{key}='{value}'")


@secrets.command("check")
@click.option("--path", "path", help="Secrets file (default: <gitlab-dir>/secrets.env)")
@click.pass_context
def secrets_check(ctx: click.Context, path: Optional[str]) -> None:
    """Verify that the secrets file is complete and private."""
    try:
        from gitlabkit.secrets import SecretManager

        secrets_file = _config_manager(ctx).resolve_secrets_file(path)
        secret_manager = SecretManager(verbose=ctx.obj["verbose"])
        bundle = secret_manager.load_secrets(secrets_file)
        private = secret_manager.check_permissions(secrets_file)

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Checking credentials")
        return

    click.echo(f"✓ {len(bundle.as_env())} credentials present in {secrets_file}")

    if not private:
        click.echo(f"✗ {secrets_file} is readable by group or others, run: chmod 600 {secrets_file}", err=True)
        ctx.exit(1)

    click.echo("✓ File permissions restricted to owner")


@cli.command()
@click.argument("artifact", type=click.Choice(ARTIFACTS))
@click.option("--domain", help="Public GitLab host, e.g. gitlab.example.com")
@click.option("--gitlab-dir", help="Deployment directory (default: ~/gitlab)")
@click.pass_context
def render(ctx: click.Context, artifact: str, domain: Optional[str], gitlab_dir: Optional[str]) -> None:
    """Print one generated file to stdout.

    The compose manifest needs an existing secrets file; render never
    creates one. proxy.conf is the same for every deployment and needs
    no domain.

    Args:
        ctx: Click context object
        artifact: Which file to render
        domain: Public GitLab host name
        gitlab_dir: Deployment directory
    """
    try:
        if artifact == "proxy":
            from gitlabkit.proxy import NginxConfigGenerator

            content = NginxConfigGenerator(verbose=ctx.obj["verbose"]).render_proxy_conf()
        else:
            from gitlabkit.environments import ProductionEnvironment

            settings = _config_manager(ctx).build_settings(domain=domain, gitlab_dir=gitlab_dir)
            content = ProductionEnvironment(settings, verbose=ctx.obj["verbose"]).render_artifact(artifact)

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, f"Rendering {artifact}")
        return

    click.echo(content, nl=False)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Check that docker and docker compose are available."""
    try:
        from gitlabkit.validation import DependencyChecker

        results = DependencyChecker(verbose=ctx.obj["verbose"]).check_all()

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Dependency check")
        return

    for name, available in results.items():
        if available:
            click.echo(f"✓ {name}")
        else:
            click.echo(f"✗ {name} not found", err=True)

    if not all(results.values()):
        ctx.exit(1)


if __name__ == "__main__":
    cli()
