"""CLI implementation for formatsniff."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .core.model import Detection, ResolverConfig
from .core.registry import default_registry
from .core.resolver import FormatResolver
from .core.util import descriptor_asdict, detection_asdict, failure_asdict
from .io import is_url

app = typer.Typer(add_completion=False, help="Identify media file formats of files and URLs.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        return [ln.strip() for ln in sys.stdin if ln.strip()]
    return list(files)


def _normalise(src: str) -> str:
    return src if is_url(src) else str(Path(src).resolve())


def _identify_sync(resolver: FormatResolver, src: str):
    try:
        return resolver.resolve_sync(_normalise(src))
    except Exception as e:
        return failure_asdict(src, str(e))


async def _batch_identify(resolver: FormatResolver, sources: list[str]) -> list:
    """Identify a list of sources concurrently."""
    tasks = [resolver.resolve(_normalise(src)) for src in sources]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    processed = []
    for src, res in zip(sources, results):
        if isinstance(res, Exception):
            processed.append(failure_asdict(src, str(res)))
        else:
            processed.append(res)
    return processed


def _emit(objs: list[Dict[str, Any]], output: Optional[Path], pretty: bool) -> None:
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        if pretty:
            json.dump(objs[0], sink, indent=2)
            sink.write("\n")
        else:
            for obj in objs:
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()


@app.command()
def identify(
    files: list[str] = typer.Argument(None, help="Files or URLs to identify, or '-' for stdin"),
    header_size: int = typer.Option(4096, "--header-size", min=1, help="Bytes handed to header checks"),
    search: bool = typer.Option(True, "--search/--no-search", help="Run slow stream searches"),
    search_limit: Optional[int] = typer.Option(None, "--search-limit", min=1,
                                               help="Max bytes a stream search may read"),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.0,
                                            help="Seconds allowed for stream searches (async mode)"),
    extension_fallback: bool = typer.Option(True, "--extension-fallback/--no-extension-fallback",
                                            help="Fall back to the file extension"),
    include_unreadable: bool = typer.Option(False, "--include-unreadable",
                                            help="Also consider formats flagged unreadable"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution steps to stderr"),
):
    """Identify the format of one or many local paths or URLs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")
    sel_fields = fields.split(",") if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    config = ResolverConfig(
        header_size=header_size,
        search=search,
        search_limit=search_limit,
        search_timeout=timeout,
        extension_fallback=extension_fallback,
        readable_only=not include_unreadable,
    )
    resolver = FormatResolver(default_registry(), config)

    if sync:
        results = [_identify_sync(resolver, src) for src in sources]
    else:
        results = asyncio.run(_batch_identify(resolver, sources))

    objs = []
    for src, res in zip(sources, results):
        if isinstance(res, Detection):
            res.source = src
            objs.append(detection_asdict(res, fields=sel_fields))
        else:
            objs.append(res)
    _emit(objs, output, pretty=len(sources) == 1 and not jsonl)

    if any(not obj["success"] for obj in objs):
        raise typer.Exit(code=1)


@app.command()
def formats(
    ext: Optional[str] = typer.Option(None, "--ext", help="Only formats claiming this extension"),
    mime: Optional[str] = typer.Option(None, "--mime", help="Only formats claiming this MIME type"),
):
    """List the registered formats as JSON lines."""
    registry = default_registry()
    selected = list(registry)
    if ext:
        selected = [fmt for fmt in selected if fmt in registry.by_extension(ext)]
    if mime:
        selected = [fmt for fmt in selected if fmt in registry.by_mime_type(mime)]
    for fmt in selected:
        typer.echo(json.dumps(descriptor_asdict(fmt)))


if __name__ == "__main__":
    app()
