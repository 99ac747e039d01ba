from __future__ import annotations

import typer

from tableimport.config.loader import load_runtime_config
from tableimport.connectors.db import create_db_engine, run_healthcheck
from tableimport.import_service import CommandResult, ImportService
from tableimport.utils.logging import configure_logging, get_logger

cli = typer.Typer(add_completion=False, no_args_is_help=True)


def _exit_with_error(exc: Exception) -> None:
    logger = get_logger()
    logger.exception("command failed")
    typer.echo(f"ERROR: {exc}")
    raise typer.Exit(code=1)


def _build_service(config: str, env_file: str) -> ImportService:
    runtime = load_runtime_config(config, env_file)
    configure_logging(runtime.app.log_level, runtime.logs_dir_path)

    engine = create_db_engine(
        runtime.db_url,
        connect_timeout_seconds=runtime.database.connect_timeout_seconds,
    )
    return ImportService(engine=engine, config=runtime)


def _echo_result(result: CommandResult) -> None:
    typer.echo(f"job={result.job} status={result.status} message={result.message}")


@cli.command("import")
def import_command(
    job: str = typer.Argument(..., help="Name of the import job in config.yml"),
    skip_transaction: bool | None = typer.Option(
        None,
        "--skip-transaction/--transaction",
        help="Commit every statement on its own instead of one transaction",
    ),
    ignore_errors: bool | None = typer.Option(
        None,
        "--ignore-errors/--stop-on-row-error",
        help="Skip rows the database rejects instead of aborting",
    ),
    config: str = typer.Option("config.yml", "--config", help="Path to config.yml"),
    env_file: str = typer.Option(".env", "--env-file", help="Path to .env"),
) -> None:
    try:
        service = _build_service(config, env_file)
        result = service.run_job(job, skip_transaction=skip_transaction, ignore_errors=ignore_errors)
    except Exception as exc:
        _exit_with_error(exc)
        return

    _echo_result(result)
    if result.status != "success":
        raise typer.Exit(code=1)


@cli.command("import-all")
def import_all_command(
    config: str = typer.Option("config.yml", "--config", help="Path to config.yml"),
    env_file: str = typer.Option(".env", "--env-file", help="Path to .env"),
) -> None:
    try:
        service = _build_service(config, env_file)
        results = service.run_all()
    except Exception as exc:
        _exit_with_error(exc)
        return

    for result in results:
        _echo_result(result)
    if any(result.status != "success" for result in results):
        raise typer.Exit(code=1)


@cli.command("healthcheck")
def healthcheck_command(
    config: str = typer.Option("config.yml", "--config", help="Path to config.yml"),
    env_file: str = typer.Option(".env", "--env-file", help="Path to .env"),
) -> None:
    try:
        runtime = load_runtime_config(config, env_file)
        configure_logging(runtime.app.log_level, runtime.logs_dir_path)

        engine = create_db_engine(
            runtime.db_url,
            connect_timeout_seconds=runtime.database.connect_timeout_seconds,
        )
        result = run_healthcheck(engine)
        get_logger().info("healthcheck_result={} details={}", result.ok, result.details)
    except Exception as exc:
        _exit_with_error(exc)
        return

    for key, value in result.details.items():
        typer.echo(f"{key}={value}")
    if not result.ok:
        raise typer.Exit(code=1)


def run() -> None:
    cli()
