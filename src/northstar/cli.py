"""
Command-line interface for the North Star viewer.
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click

from .celestial import (
    EquatorialPosition,
    ObserverLocation,
    estimate_magnetic_declination,
    local_sidereal_time,
)
from .config import Config, ConfigError
from .morse import MorseTiming, encode, text_to_morse, total_duration_ms
from .resolver import ResolverPolicy, SkyPositionResolver
from .sequencer import SignalSequencer


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _load_config(path: Optional[Path], verbose: bool) -> Config:
    try:
        cfg = Config.from_yaml(path) if path else Config()
    except ConfigError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)
    cfg.verbose = cfg.verbose or verbose
    if cfg.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    return cfg


def _parse_time(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Not an ISO 8601 time: {value}", param_hint="--time") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


config_option = click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration YAML file"
)
verbose_option = click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output"
)


@click.group()
@click.version_option(version="0.1.0")
def main():
    """North Star - find Polaris from your phone's compass and tilt."""
    pass


@main.command()
@click.option("--lat", type=float, default=None, help="Observer latitude (degrees North)")
@click.option("--lon", type=float, default=None,
              help="Observer longitude (degrees East, negative for West)")
@click.option("--time", "when", type=str, default=None,
              help="UTC time, ISO 8601 (default: now)")
@click.option("--heading", type=float, default=None,
              help="Compass heading, used by the heuristic policy")
@click.option("--policy", type=click.Choice([p.value for p in ResolverPolicy]),
              default=None, help="Resolver policy (overrides config)")
@config_option
@verbose_option
def position(lat: Optional[float], lon: Optional[float], when: Optional[str],
             heading: Optional[float], policy: Optional[str],
             config: Optional[Path], verbose: bool):
    """
    Print where the target appears in the sky.
    """
    cfg = _load_config(config, verbose)
    dt = _parse_time(when)

    if lat is None or lon is None:
        logger.warning("No location given, using configured default")
    observer = ObserverLocation(
        latitude=lat if lat is not None else cfg.observer.default_latitude,
        longitude=lon if lon is not None else cfg.observer.default_longitude,
    )

    resolver = SkyPositionResolver(
        policy=ResolverPolicy(policy) if policy else cfg.resolver.policy,
        target=EquatorialPosition(ra=cfg.target.ra_degrees, dec=cfg.target.dec_degrees),
        default_elevation=cfg.resolver.heuristic_default_elevation,
    )
    result = resolver.resolve(observer, dt, heading)

    click.echo(f"{cfg.target.name} for {dt.isoformat()}")
    click.echo(f"  Location: {observer.latitude:.4f}, {observer.longitude:.4f}")
    click.echo(f"  LST: {local_sidereal_time(dt, observer.longitude):.4f} h")
    declination = estimate_magnetic_declination(observer.latitude, observer.longitude)
    click.echo(f"  Magnetic declination (est.): {declination:+.1f}°")

    if result is None:
        click.echo(click.style("  Position unresolved", fg="yellow"))
        sys.exit(1)
    click.echo(f"  Altitude: {result.altitude:.2f}°")
    click.echo(f"  Azimuth: {result.azimuth:.2f}°")


@main.command()
@click.argument("text")
@click.option("--dot-ms", type=int, default=None, help="Dot length in milliseconds")
@click.option("--play", is_flag=True, help="Play the timeline in real time")
@config_option
@verbose_option
def morse(text: str, dot_ms: Optional[int], play: bool,
          config: Optional[Path], verbose: bool):
    """
    Show (or play) TEXT as a Morse on/off timeline.
    """
    cfg = _load_config(config, verbose)
    timing = MorseTiming(dot_ms=dot_ms or cfg.morse.dot_ms)
    timeline = encode(text, timing)

    click.echo(f"Morse: {text_to_morse(text) or '(nothing to send)'}")
    click.echo(f"Pulses: {len(timeline)}, total {total_duration_ms(timeline)} ms")

    if not play:
        for pulse in timeline:
            click.echo(f"  {pulse.kind.value:<3} {pulse.duration_ms:>5} ms")
        return

    async def _play() -> None:
        loop = asyncio.get_running_loop()
        done = loop.create_future()
        sequencer = SignalSequencer(
            loop, timing=timing,
            on_brightness=cfg.morse.on_brightness,
            off_brightness=cfg.morse.off_brightness,
            idle_brightness=cfg.morse.idle_brightness,
        )
        sequencer.play(
            text,
            on=lambda: click.echo("■", nl=False),
            off=lambda: click.echo("·", nl=False),
            complete=lambda: done.done() or done.set_result(None),
        )
        try:
            await done
        finally:
            sequencer.stop()
        click.echo()

    try:
        asyncio.run(_play())
    except KeyboardInterrupt:
        click.echo()
        click.echo("Stopped")


@main.command()
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path),
              default=None, help="Asset directory (default: packaged assets)")
@click.option("--host", type=str, default=None, help="Bind address")
@click.option("--port", type=int, default=None, envvar="PORT", show_envvar=True,
              help="HTTP port")
@click.option("--ssl-dir", type=click.Path(path_type=Path), default=None,
              help="Directory holding key.pem and cert.pem")
@config_option
@verbose_option
def serve(root: Optional[Path], host: Optional[str], port: Optional[int],
          ssl_dir: Optional[Path], config: Optional[Path], verbose: bool):
    """
    Serve the browser viewer.

    Uses HTTPS when key.pem and cert.pem exist in the SSL directory.
    """
    from .server import plan_server, serve as run_server

    cfg = _load_config(config, verbose)
    try:
        plan = plan_server(
            root=root or cfg.server.root,
            host=host or cfg.server.host,
            port=port or cfg.server.port,
            https_port=cfg.server.https_port,
            ssl_dir=ssl_dir or cfg.server.ssl_dir,
        )
    except FileNotFoundError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)
    run_server(plan)


@main.command()
@click.option("--lat", type=float, default=None, help="Observer latitude")
@click.option("--lon", type=float, default=None, help="Observer longitude")
@click.option("--width", type=int, default=800, help="Window width")
@click.option("--height", type=int, default=600, help="Window height")
@click.option("--message", type=str, default="SOS", help="Text signalled with M")
@config_option
@verbose_option
def preview(lat: Optional[float], lon: Optional[float], width: int, height: int,
            message: str, config: Optional[Path], verbose: bool):
    """
    Open a desktop preview with a keyboard-driven virtual phone.
    """
    from .preview import PreviewOptions, run_preview
    from .sources import StaticLocationSource

    cfg = _load_config(config, verbose)
    location = None
    if lat is not None and lon is not None:
        location = StaticLocationSource(ObserverLocation(latitude=lat, longitude=lon))

    run_preview(cfg, PreviewOptions(width=width, height=height, message=message),
                location=location)


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path):
    """
    Create a default configuration file.
    """
    cfg = Config()
    cfg.to_yaml(output_path)
    click.echo(f"Created configuration file: {output_path}")


if __name__ == "__main__":
    main()
