"""CLI entry point for the recast content rewriter."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()

PROMPT_OPTIONS = ("system", "user", "twitter", "linkedin", "instagram")


def _prompt_options(func):
    """Attach one --<channel> option per overridable prompt."""
    for name in reversed(PROMPT_OPTIONS):
        func = click.option(f"--{name}", default=None, help=f"Custom {name} prompt")(func)
    return func


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """Rewrite articles into multi-format social content."""


# ---------------------------------------------------------------------------
# serve: web UI and HTTP API
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Interface to bind (default from settings)")
@click.option("--port", "-p", type=int, default=None, help="Port (default from settings)")
@click.option("--debug", is_flag=True, help="Enable the Flask debugger")
def serve(host: str | None, port: int | None, debug: bool) -> None:
    """Run the web UI and the HTTP API."""
    from recast.config import get_settings
    from recast.log import configure_logging
    from recast.web.app import create_app

    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    app.run(
        host=host or settings.host,
        port=port or settings.port,
        debug=debug,
        threaded=True,
        use_reloader=False,
    )


# ---------------------------------------------------------------------------
# rewrite: run the pipeline from the terminal
# ---------------------------------------------------------------------------


@main.command()
@click.argument("url")
@click.option("--strict", is_flag=True, help="Fail instead of falling back to sample data")
@_prompt_options
def rewrite(url: str, strict: bool, **prompt_values: str | None) -> None:
    """Scrape URL, rewrite it and generate an illustration."""
    from recast.config import get_settings
    from recast.errors import PipelineError
    from recast.log import configure_logging
    from recast.models import CustomPrompts
    from recast.pipeline import RewritePipeline
    from recast.storage.results import ResultStore

    settings = get_settings()
    if strict:
        settings.strict = True
    configure_logging(settings.log_level)
    pipeline = RewritePipeline.from_settings(settings)
    prompts = CustomPrompts(**prompt_values)

    try:
        with console.status("[bold green]Rewriting...") as status:
            result = pipeline.process(url, prompts, on_progress=_reporter(status))
    except PipelineError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
    finally:
        pipeline.close()

    path = ResultStore(settings.results_dir).save(result)
    _print_result(result)
    console.print(f"\n[green]Saved to {path}[/green]")


# ---------------------------------------------------------------------------
# regenerate: rerun generation with custom prompts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("result_id")
@_prompt_options
def regenerate(result_id: str, **prompt_values: str | None) -> None:
    """Regenerate a saved result with custom prompts."""
    from recast.config import get_settings
    from recast.errors import PipelineError, ResultNotFound
    from recast.log import configure_logging
    from recast.models import CustomPrompts
    from recast.pipeline import RewritePipeline
    from recast.storage.results import ResultStore

    settings = get_settings()
    configure_logging(settings.log_level)
    store = ResultStore(settings.results_dir)
    try:
        previous = store.load(result_id)
    except ResultNotFound as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e

    pipeline = RewritePipeline.from_settings(settings)
    try:
        with console.status("[bold green]Regenerating...") as status:
            result = pipeline.regenerate(
                previous, CustomPrompts(**prompt_values), on_progress=_reporter(status)
            )
    except PipelineError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
    finally:
        pipeline.close()

    path = store.save(result)
    _print_result(result)
    console.print(f"\n[green]Saved to {path}[/green]")


# ---------------------------------------------------------------------------
# show: display a saved result
# ---------------------------------------------------------------------------


@main.command()
@click.argument("result_id")
def show(result_id: str) -> None:
    """Show a saved result."""
    from recast.config import get_settings
    from recast.errors import ResultNotFound
    from recast.storage.results import ResultStore

    settings = get_settings()
    try:
        result = ResultStore(settings.results_dir).load(result_id)
    except ResultNotFound as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
    _print_result(result)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _reporter(status: object):
    """Show pipeline progress messages in a rich status spinner."""
    return lambda message: status.update(escape(message))


def _print_result(result: object) -> None:
    """Render every format of a pipeline result to the console."""
    content = result.generated_content
    console.print()
    console.print(
        Panel(
            escape(content.article_text or content.article_html),
            title=f"[bold]{escape(result.scraped_content.title)}",
            subtitle=f"id {result.id}",
        )
    )
    console.print(Panel(escape(content.linkedin_post), title="LinkedIn"))
    console.print(Panel(escape("\n\n".join(content.twitter_thread)), title="Twitter/X thread"))

    reel = content.instagram_reel_script
    table = Table(title=f"Instagram reel: {escape(reel.hook)}")
    table.add_column("#", width=3, justify="right")
    table.add_column("Subtitle", width=24)
    table.add_column("Visual", width=30)
    table.add_column("Voice-over", width=40)
    for i, slide in enumerate(reel.slides, 1):
        table.add_row(str(i), escape(slide.subtitle), escape(slide.visual), escape(slide.voiceover))
    console.print(table)

    if content.image_url:
        console.print(f"[bold]Image:[/bold] {content.image_url}")
    if result.errors:
        console.print("\n[yellow]Sample data was used for:[/yellow]")
        for error in result.errors:
            console.print(f"  - {escape(error)}")
