#!/usr/bin/env python3
"""
AI Trends CLI

Command-line interface for the AI Trends catalog pipeline.
"""

import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from src.database import Database
from src.config import get_api_key, load_config
from src.errors import AITrendsError
from src.logging_setup import setup_logging

console = Console()

STATUS_COLORS = {
    "pending": "yellow",
    "approved": "green",
    "rejected": "red",
    "discovered": "blue",
    "processing": "magenta",
    "processed": "green",
    "failed": "red",
    "running": "blue",
    "success": "green",
    "partial": "yellow",
}


def get_db() -> Database:
    """Get database connection using config."""
    config = load_config()
    db_path = config.get("database", {}).get("path", "db/aitrends.db")
    return Database(db_path)


def _colored(status: str) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status}[/{color}]"


def _run_job(job_type: str):
    """Run a cron job from the CLI and print its counters."""
    from src.cron import run_cron_job

    config = load_config()
    db = get_db()
    db.init_schema()

    console.print(f"[bold blue]Running {job_type}...[/bold blue]")
    try:
        result = run_cron_job(db, job_type, config)
    except AITrendsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    finally:
        db.close()

    counters = {
        key: value for key, value in vars(result).items()
        if isinstance(value, int) and key != "log_id"
    }
    console.print()
    console.print(f"[green]✓[/green] {job_type} finished: {_colored(result.status)}")
    for key, value in counters.items():
        console.print(f"    {key.replace('_', ' ').capitalize()}: {value}")
    for error in result.errors[:10]:
        console.print(f"    [red]{error}[/red]")


@click.group()
@click.version_option(version="0.1.0", prog_name="aitrends")
def main():
    """AI Trends - AI Tool Directory Automation

    Discover, classify, and track AI tools for the catalog.
    """
    setup_logging(load_config())


@main.command()
def init():
    """Initialize the database and configuration."""
    db = get_db()
    db.init_schema()
    console.print("[green]✓[/green] Database initialized")

    config_path = Path("config.yaml")
    if not config_path.exists():
        console.print(
            "[yellow]![/yellow] No config.yaml found. "
            "Copy config.example.yaml and add your API keys."
        )
    else:
        console.print("[green]✓[/green] Configuration loaded")


@main.command()
def status():
    """Show catalog and pipeline statistics."""
    db = get_db()
    db.init_schema()
    stats = db.get_pipeline_stats()

    table = Table(title="Pipeline Status", show_header=True, header_style="bold cyan")
    table.add_column("Stage", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Bar", justify="left", width=20)

    rows = [(f"Queue: {k}", v) for k, v in stats["discovered_by_status"].items()]
    rows += [(f"Tools: {k}", v) for k, v in stats["tools_by_status"].items()]
    max_count = max((count for _, count in rows), default=0) or 1

    for stage, count in rows:
        bar_width = int((count / max_count) * 20)
        bar = "█" * bar_width + "░" * (20 - bar_width)
        color = STATUS_COLORS.get(stage.split(": ")[1], "white")
        table.add_row(stage, str(count), f"[{color}]{bar}[/{color}]")

    console.print(table)

    summary = f"""
[bold]Total Tools:[/bold] {stats['total_tools']}
[bold]Categories:[/bold] {stats['total_categories']}
[bold]Pending Submissions:[/bold] {stats['pending_submissions']}
    """.strip()

    console.print(Panel(summary, title="Summary", border_style="blue"))


@main.command()
def discover():
    """Search for new tools and process a batch of discovered URLs."""
    _run_job("discover-tools")


@main.command()
def metrics():
    """Update metrics snapshots for all approved tools."""
    _run_job("update-metrics")


@main.command()
def refresh():
    """Re-scrape and re-classify the least recently updated tools."""
    _run_job("refresh-tools")


@main.command()
@click.argument("url")
def scrape(url):
    """Scrape a tool website and show the extracted fields."""
    from src.scouts.jina import JinaClient
    from src.scraper.scraper import ToolScraper

    client = JinaClient(api_key=get_api_key(load_config(), "jina"))
    try:
        scraped = ToolScraper(client).scrape(url)
    except AITrendsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()

    pricing = scraped.pricing or {}
    info = f"""
[bold]Name:[/bold] {escape(scraped.name)}
[bold]Website:[/bold] {escape(scraped.website)}
[bold]Tagline:[/bold] {escape(scraped.tagline or "N/A")}
[bold]Logo:[/bold] {escape(scraped.logo or "N/A")}
[bold]Pricing:[/bold] {escape(pricing.get("model") or "unknown")} ({len(pricing.get('plans') or [])} plans)
[bold]Twitter:[/bold] {escape(scraped.twitter or "N/A")}
[bold]GitHub:[/bold] {escape(scraped.github or "N/A")}
[bold]Tags:[/bold] {escape(", ".join(scraped.tags) or "none")}
    """.strip()
    console.print(Panel(info, title="Scraped Tool", border_style="blue"))

    if scraped.features:
        console.print(Panel("\n".join(f"• {escape(f)}" for f in scraped.features), title="Features"))


@main.command()
@click.argument("url")
def classify(url):
    """Scrape and classify a tool website without saving it."""
    from src.analyzers.classifier import ToolClassifier
    from src.scouts.jina import JinaClient
    from src.scraper.scraper import ToolScraper

    config = load_config()
    client = JinaClient(api_key=get_api_key(config, "jina"))
    try:
        scraped = ToolScraper(client).scrape(url)
    except AITrendsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()

    classified = ToolClassifier.from_config(config).classify(scraped)

    conf_color = "green" if classified.confidence > 70 else "yellow" if classified.confidence >= 50 else "red"
    info = f"""
[bold]Name:[/bold] {escape(classified.name)} ({escape(classified.slug)})
[bold]Tagline:[/bold] {escape(classified.tagline)}
[bold]Categories:[/bold] {', '.join(classified.categories)}
[bold]Pricing:[/bold] {escape(str(classified.pricing.get("model")))}
[bold]Confidence:[/bold] [{conf_color}]{classified.confidence}[/{conf_color}]
[bold]Classified by:[/bold] {classified.provider}
[bold]SEO:[/bold] {escape(classified.seo_summary)}
    """.strip()
    console.print(Panel(info, title="Classification", border_style="blue"))


@main.command()
@click.option("--limit", "-l", default=20, help="Number of runs to show")
@click.option("--type", "-t", "log_type", type=click.Choice(["discovery", "metrics-update", "tool-refresh"]),
              default=None, help="Only show one run type")
def logs(limit, log_type):
    """Show recent automation runs."""
    db = get_db()
    db.init_schema()
    entries = db.list_automation_logs(limit=limit, log_type=log_type)

    if not entries:
        console.print("[green]No automation runs recorded yet[/green]")
        return

    table = Table(title="Automation Runs", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Started")
    table.add_column("Duration", justify="right")
    table.add_column("Errors", justify="right")

    for entry in entries:
        metadata = entry.get("metadata") or {}
        duration = metadata.get("duration")
        table.add_row(
            str(entry["id"]),
            entry["type"],
            _colored(entry["status"]),
            entry["started_at"] or "-",
            f"{duration / 1000:.1f}s" if isinstance(duration, (int, float)) else "-",
            str(len(metadata.get("errors") or [])),
        )

    console.print(table)


@main.command()
@click.argument("slug")
def show(slug):
    """Show details for a tool by slug."""
    db = get_db()
    db.init_schema()
    tool = db.get_tool_by_slug(slug)

    if not tool:
        console.print(f"[red]Tool {slug} not found[/red]")
        return

    category = db.get_category(tool["category_id"]) or {}
    pricing = tool.get("pricing") or {}

    info = f"""
[bold]Name:[/bold] {escape(tool["name"])}
[bold]Tagline:[/bold] {escape(tool["tagline"])}
[bold]Website:[/bold] {escape(tool["website"] or "N/A")}
[bold]Category:[/bold] {category.get('name', 'Uncategorized')}
[bold]Status:[/bold] {tool['status']}
[bold]Pricing:[/bold] {pricing.get('model') or 'unknown'}
[bold]Upvotes:[/bold] {tool['upvotes']}  [bold]Views:[/bold] {tool['views']}  [bold]Trend:[/bold] {tool['trend_percentage']}
[bold]Created:[/bold] {tool['created_at']}
    """.strip()

    console.print(Panel(info, title=f"Tool #{tool['id']}", border_style=STATUS_COLORS.get(tool["status"], "white")))

    if tool["description"]:
        console.print(Panel(escape(tool["description"]), title="Description"))

    features = db.get_tool_features(tool["id"])
    if features:
        console.print(Panel("\n".join(f"• {escape(f)}" for f in features), title="Features"))

    history = db.get_tool_metrics_history(tool["id"], limit=7)
    if history:
        table = Table(title="Metrics", show_header=True)
        table.add_column("Date")
        table.add_column("Weekly Views", justify="right")
        table.add_column("Stars", justify="right")
        table.add_column("Traffic", justify="right")
        table.add_column("Trend", justify="right")
        table.add_column("Popularity", justify="right")
        table.add_column("Rank", justify="right")

        for row in history:
            table.add_row(
                str(row["date"]),
                str(row["weekly_views"]),
                str(row["github_stars"]),
                str(row["traffic_score"]),
                str(row["trend_score"]),
                str(row["popularity_score"]),
                str(row["serp_position"] or "-"),
            )

        console.print(table)


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", "-p", default=8000, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the REST API server."""
    import uvicorn

    console.print(f"[green]Serving AI Trends API on http://{host}:{port}[/green]")
    uvicorn.run("web.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
