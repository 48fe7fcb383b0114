"""
Main CLI module for uigen.
"""

import click

from uigen import __version__
from uigen.application.services.exceptions import (
    ConfigurationError,
    GenerationError,
    InvalidInput,
)
from uigen.application.services.input_normalizer import InputNormalizer
from uigen.cli.config_cmd import config
from uigen.config import BackendSettings, get_settings
from uigen.domain.models import INPUT_TYPES, SCREEN_TYPES, GenerationRequest
from uigen.infrastructure.logging_config import configure_logging


def _repositories():
    from uigen.infrastructure.repositories.setup import setup_repositories

    return setup_repositories(get_settings().DATABASE_URL)


@click.group()
def cli():
    """xFrame5 UI generation service command line interface."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)


cli.add_command(config, name="config")


@cli.command()
def version():
    """Show uigen version information."""
    click.echo(f"uigen version {__version__}")


@cli.command("init-db")
def init_db():
    """Create the database tables."""
    try:
        session, _ = _repositories()
        session.close()
        click.echo("✅ Database initialized")
    except Exception as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@cli.command()
@click.argument("intent")
@click.option("--product", required=True, help="Product the screen belongs to")
@click.option(
    "--screen-type", type=click.Choice(SCREEN_TYPES), default="list", show_default=True
)
@click.option(
    "--input-type",
    type=click.Choice(INPUT_TYPES),
    default="natural-language",
    show_default=True,
)
@click.option("--template-version", type=int, default=None, help="Pin a template version")
@click.option("--priority", type=int, default=0, help="Lower runs first")
def submit(
    intent: str,
    product: str,
    screen_type: str,
    input_type: str,
    template_version: int,
    priority: int,
):
    """Queue a generation job."""
    try:
        request = GenerationRequest(
            product=product,
            input_type=input_type,
            intent=intent,
            template_version=template_version,
            screen_type=screen_type,
        )
        InputNormalizer().normalize(request)
    except ValueError as e:
        click.echo(f"❌ Invalid request: {str(e)}")
        return
    except InvalidInput as e:
        click.echo(f"❌ Invalid {input_type} input: {e.message}")
        return

    session, repositories = _repositories()
    try:
        job = repositories.job_repo.submit(request, priority=priority)
        position = repositories.job_repo.queue_position(job.job_id)
        click.echo(f"✅ Queued job {job.job_id} (position {position})")
    finally:
        session.close()


@cli.command()
@click.argument("job_id")
@click.option("--show-artifact", is_flag=True, help="Print the generated XML and JS")
def status(job_id: str, show_artifact: bool):
    """Show the status of a job."""
    session, repositories = _repositories()
    try:
        job = repositories.job_repo.get_job(job_id)
        if job is None:
            click.echo(f"❌ Job {job_id} not found")
            return

        click.echo(f"Job {job.job_id}: {job.status.value}")
        if job.status.value == "queued":
            click.echo(f"Queue position: {repositories.job_repo.queue_position(job_id)}")
        if job.error_stage:
            click.echo(f"⚠️  Failed at {job.error_stage}: {job.error_message}")
        if job.log_id is not None:
            log = repositories.log_repo.get(job.log_id)
            if log is not None:
                click.echo(f"Generation time: {log.generation_time_ms:.1f} ms")
                for warning in log.warnings:
                    click.echo(f"⚠️  {warning}")
        if show_artifact and job.artifact:
            click.echo("")
            click.echo(job.artifact)
    finally:
        session.close()


@cli.command()
def stats():
    """Show the number of jobs per status."""
    session, repositories = _repositories()
    try:
        counts = repositories.job_repo.queue_stats()
        click.echo(f"Queued:     {counts.queued}")
        click.echo(f"Processing: {counts.processing}")
        click.echo(f"Completed:  {counts.completed}")
        click.echo(f"Failed:     {counts.failed}")
    finally:
        session.close()


@cli.command()
@click.option("--once", is_flag=True, help="Handle at most one job and exit")
@click.option("--max-ticks", type=int, default=None, help="Stop after this many polls")
def worker(once: bool, max_ticks: int):
    """Run the job queue processor."""
    from uigen.infrastructure.services.setup import setup_services

    session, repositories = _repositories()
    try:
        services = setup_services(session, repositories, get_settings())
    except ConfigurationError as e:
        session.close()
        click.echo(f"❌ {str(e)}")
        return

    processor = services.job_processor
    try:
        if once:
            state = processor.tick()
            click.echo(f"✅ Worker finished one poll ({state.value})")
        else:
            ticks = processor.run(max_ticks=max_ticks)
            click.echo(f"✅ Worker stopped after {ticks} poll(s)")
    except KeyboardInterrupt:
        processor.stop()
        click.echo("\n⚠️  Worker interrupted")
    finally:
        services.backend.close()
        session.close()


@cli.command()
def health():
    """Check that the configured LLM backend is reachable."""
    from uigen.infrastructure.llm.backend_factory import apply_llm_config, create_backend

    session, repositories = _repositories()
    try:
        backend_settings = apply_llm_config(
            BackendSettings.from_settings(get_settings()),
            repositories.llm_config_source.get_active(),
        )
        backend = create_backend(backend_settings)
    except ConfigurationError as e:
        click.echo(f"❌ {str(e)}")
        return
    finally:
        session.close()

    try:
        backend.health_check()
        click.echo(f"✅ {backend.name()} backend is healthy (model {backend.model()})")
    except GenerationError as e:
        click.echo(f"❌ {backend.name()} backend is unhealthy: {e.message}")
    finally:
        backend.close()


if __name__ == "__main__":
    cli()
