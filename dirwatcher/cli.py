import json
import os
import signal
import time

import click
import psutil
from rich.console import Console
from rich.table import Table

from dirwatcher import config
from dirwatcher import daemon as daemon_module
from dirwatcher import logger
from dirwatcher.exceptions import DirwatcherError
from dirwatcher.monitor import Monitor, scan_top_level
from dirwatcher.reporter import reporter_from_config


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Path to configuration TOML or YAML file.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, config_path, debug):
    """
    DirWatcher CLI: Report created, removed and moved top-level directories.
    """
    try:
        cfg = config.load_config(config_path)
        if debug:
            cfg["logging"]["level"] = "DEBUG"
    except Exception as e:
        click.echo(f"Error loading configuration: {e}")
        ctx.abort()
    ctx.obj = {"config": cfg, "config_path": config_path, "debug": debug}


def read_pid(pid_file):
    with open(pid_file, "r") as f:
        return int(f.read().strip())


@main.command()
@click.pass_context
def show_config(ctx):
    """
    Show the loaded configuration.
    """
    cfg = ctx.obj.get("config")
    click.echo(json.dumps(cfg, indent=2))


@main.command()
@click.pass_context
def scan(ctx):
    """
    List the top-level directories currently under the watch root.
    """
    cfg = ctx.obj.get("config")
    root = config.get_watch_root(cfg)
    try:
        directories = scan_top_level(root)
    except DirwatcherError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    if not directories:
        click.echo(f"No top-level directories under {root}.")
        return

    table = Table(title=f"Top-level directories in {root}")
    table.add_column("Name", style="cyan")
    table.add_column("Path", style="magenta")
    for path in directories:
        table.add_row(os.path.basename(path), path)
    Console().print(table)


@main.command()
@click.option("--foreground", is_flag=True, help="Run in foreground (not as daemon).")
@click.pass_context
def start(ctx, foreground):
    """
    Start watching the configured root.
    """
    cfg = ctx.obj.get("config")
    pid_file = config.get_pid_file(cfg)

    if not foreground:
        click.echo("Starting daemon...")
        os.makedirs(os.path.dirname(pid_file), exist_ok=True)
        daemon_module.run_daemon(cfg, pid_file)
        return

    click.echo("Running in foreground...")
    logger.setup_logger(
        "dirwatcher",
        config.get_log_dir(cfg),
        "dirwatcher-debug.log",
        level=logger.resolve_level(cfg["logging"]["level"]),
        console=ctx.obj.get("debug", False),
    )
    monitor = Monitor(cfg, reporter_from_config(cfg))
    try:
        monitor.start()
    except DirwatcherError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    try:
        monitor.run()
    except KeyboardInterrupt:
        click.echo("Stopping...")
    finally:
        monitor.stop()


@main.command()
@click.pass_context
def stop(ctx):
    """
    Stop the DirWatcher daemon.
    """
    cfg = ctx.obj.get("config")
    pid_file = config.get_pid_file(cfg)
    if not os.path.exists(pid_file):
        click.echo("Daemon is not running (pid file not found).")
        return
    pid = read_pid(pid_file)
    try:
        os.kill(pid, signal.SIGTERM)
        click.echo(f"Sent SIGTERM to daemon (pid {pid}).")
        time.sleep(2)
        if os.path.exists(pid_file):
            os.remove(pid_file)
    except OSError as e:
        click.echo(f"Error stopping daemon: {e}")


@main.command()
@click.pass_context
def status(ctx):
    """
    Check the status of the DirWatcher daemon.
    Displays process info (memory, CPU, threads, start time) and the watch root.
    """
    cfg = ctx.obj.get("config")
    pid_file = config.get_pid_file(cfg)

    if not os.path.exists(pid_file):
        click.echo("Daemon is not running (pid file not found).")
        return

    pid = read_pid(pid_file)
    try:
        status_info = daemon_module.collect_status(pid, cfg)
    except psutil.NoSuchProcess:
        click.echo("Daemon process not found.")
        return

    status_table = Table(title="DirWatcher Daemon Status")
    status_table.add_column("Property", style="cyan")
    status_table.add_column("Value", style="magenta")
    for key, value in status_info.items():
        status_table.add_row(key, str(value))
    Console().print(status_table)


if __name__ == "__main__":
    main()
