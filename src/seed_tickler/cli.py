from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import sys
import threading
from typing import Optional

import click
import requests
import structlog

from seed_tickler.candidate import candidate_for_seed
from seed_tickler.errors import InputError, KeyLoadError
from seed_tickler.keys import SUPPLIER_BOOTLOADER_KEY
from seed_tickler.log import configure_logging
from seed_tickler.oracle import PublicKey, load_public_key
from seed_tickler.progress import LatestSlot, SearchSnapshot, SearchStatus
from seed_tickler.report import format_report, format_words
from seed_tickler.search import (
    DEFAULT_CHUNK_SIZE,
    MAX_PREFIX_WIDTH,
    ODD_SEED_COUNT,
    SearchResult,
    TargetPrefix,
    search_seeds,
)
from seed_tickler.ui import ui_loop
from seed_tickler.utils import parse_seed, parse_target_prefix

log = structlog.get_logger()

EXIT_FOUND = 0
EXIT_EXHAUSTED = 3
EXIT_CANCELLED = 130

DEMO_ENDPOINT = "http://127.0.0.1:8000"


@dataclass(frozen=True, slots=True)
class SearchConfig:
    key: PublicKey
    target: TargetPrefix
    start_seed: int
    count: Optional[int] = None
    workers: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE


def _seed_arg(ctx, param, value: str) -> int:
    try:
        return parse_seed(value)
    except InputError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _prefix_arg(ctx, param, value: str) -> int:
    try:
        return parse_target_prefix(value)
    except InputError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def run_search(config: SearchConfig, show_ui: bool) -> SearchResult:
    """Run the search in a background thread while the UI drains its progress."""
    slot: Optional[LatestSlot[SearchSnapshot]] = LatestSlot() if show_ui else None
    cancel = threading.Event()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(
            search_seeds,
            config.key,
            config.target,
            config.start_seed,
            config.count,
            workers=config.workers,
            chunk_size=config.chunk_size,
            progress=slot,
            cancel=cancel,
        )

        try:
            if slot is not None:
                ui_loop(slot)
            return future.result()
        except KeyboardInterrupt:
            cancel.set()
            if slot is not None:
                slot.close()
            return future.result()


def finish(result: SearchResult) -> None:
    """Print the report and exit with a status distinct per outcome."""
    click.echo(format_report(result), nl=False)
    match result.status:
        case SearchStatus.FOUND:
            sys.exit(EXIT_FOUND)
        case SearchStatus.CANCELLED:
            sys.exit(EXIT_CANCELLED)
        case _:
            sys.exit(EXIT_EXHAUSTED)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
def cli(verbose: bool, json_logs: bool):
    configure_logging(verbose=verbose, json_logs=json_logs)


@cli.command()
@click.argument("start_seed", callback=_seed_arg)
@click.argument("target_prefix", callback=_prefix_arg)
@click.option("--count", "-n", type=click.IntRange(0, ODD_SEED_COUNT), default=None, help="Number of seeds to try (default: all)")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=1, help="Worker processes")
@click.option("--chunk-size", type=click.IntRange(min=1), default=DEFAULT_CHUNK_SIZE, help="Seeds per work unit")
@click.option("--key-file", "-k", type=click.Path(exists=True, dir_okay=False), default=None,
              help="PEM/DER RSA public key (default: supplier bootloader key)")
@click.option("--prefix-bytes", type=click.IntRange(1, 8), default=None,
              help=f"Leading ciphertext bytes to compare (default: {MAX_PREFIX_WIDTH})")
@click.option("--ui/--no-ui", default=None, help="Show the live progress panel (default: when stdout is a tty)")
def search(
    start_seed: int,
    target_prefix: int,
    count: Optional[int],
    workers: int,
    chunk_size: int,
    key_file: Optional[str],
    prefix_bytes: Optional[int],
    ui: Optional[bool],
):
    """Search seeds from START_SEED for one whose ciphertext starts with TARGET_PREFIX (both bare hex)."""
    try:
        target = TargetPrefix(target_prefix, prefix_bytes or MAX_PREFIX_WIDTH)
        key = load_public_key(key_file) if key_file else SUPPLIER_BOOTLOADER_KEY
    except (InputError, KeyLoadError) as e:
        raise click.UsageError(str(e)) from e

    config = SearchConfig(
        key=key,
        target=target,
        start_seed=start_seed,
        count=count,
        workers=workers,
        chunk_size=chunk_size,
    )
    show_ui = sys.stdout.isatty() if ui is None else ui
    finish(run_search(config, show_ui))


@cli.command()
@click.argument("seed", callback=_seed_arg)
def candidate(seed: int):
    """Print the 64 key-data words the bootloader would derive from SEED."""
    click.echo(f"Seed: {seed | 1:08X}")
    click.echo("Key Data:")
    for line in format_words(bytes(candidate_for_seed(seed))):
        click.echo(line)


def fetch_demo_boot(endpoint: str) -> dict:
    """Fetch the public key and one leaked boot from the demo API."""
    key_response = requests.get(f"{endpoint}/api/key", timeout=10)
    boot_response = requests.get(f"{endpoint}/api/boot", timeout=10)
    for response in (key_response, boot_response):
        if response.status_code != 200:
            raise click.ClickException(
                f"Failed to get {response.url}: {response.status_code} {response.text}"
            )
    return {**key_response.json(), **boot_response.json()}


@cli.command()
@click.option("--endpoint", default=DEMO_ENDPOINT, show_default=True, help="Demo API base URL")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=1, help="Worker processes")
@click.option("--ui/--no-ui", default=None, help="Show the live progress panel")
def demo(endpoint: str, workers: int, ui: Optional[bool]):
    """Recover the seed of a simulated boot served by the demo API."""
    data = fetch_demo_boot(endpoint)
    try:
        key = PublicKey.from_hex(data["modulus_hex"], data["exponent"])
        config = SearchConfig(
            key=key,
            target=TargetPrefix(parse_target_prefix(data["prefix_hex"])),
            start_seed=parse_seed(data["window_start"]),
            count=data["window_size"],
            workers=workers,
        )
    except (KeyError, InputError, KeyLoadError) as e:
        raise click.ClickException(f"Unexpected demo API response: {e}") from e

    result = run_search(config, sys.stdout.isatty() if ui is None else ui)
    if result.found:
        response = requests.post(f"{endpoint}/api/verify", json={"seed": f"{result.seed:08X}"}, timeout=10)
        log.info("demo verification", status_code=response.status_code, body=response.json())
    finish(result)


@cli.command("demo-api")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def demo_api(host: str, port: int, reload: bool):
    """Start the simulated leaking bootloader API."""
    import uvicorn
    from demo_api.api import app

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/key    - Bootloader RSA public key")
    click.echo("  - GET  /api/boot   - Simulate a boot and leak the ciphertext prefix")
    click.echo("  - POST /api/verify - Check a recovered seed")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        uvicorn.run("demo_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    cli()
