"""Maintenance commands: database statistics and clearing."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from neo4jfluent.config import Neo4jSettings
from neo4jfluent.core.cypher import label_fragment, validate_identifier
from neo4jfluent.exceptions import InvalidIdentifier, Neo4jFluentError
from neo4jfluent.orm.gateway import GraphGateway, StoreGateway

app = typer.Typer(help="Neo4jFluent maintenance commands")
console = Console()

logger = logging.getLogger(__name__)


def get_settings() -> Neo4jSettings:
    return Neo4jSettings()


def get_gateway(settings: Neo4jSettings) -> GraphGateway:
    return GraphGateway.from_settings(settings)


def configure_logging(settings: Neo4jSettings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_with_gateway(settings: Neo4jSettings, work: Callable[[StoreGateway], Awaitable[Any]]) -> Any:
    """Connect, run ``work`` and close the connection again."""

    async def _main() -> Any:
        async with get_gateway(settings) as gateway:
            return await work(gateway)

    return asyncio.run(_main())


async def collect_stats(gateway: StoreGateway, detailed: bool = False) -> Dict[str, Any]:
    """Totals, plus per-label and per-type counts when ``detailed``."""
    nodes = (await gateway.run("MATCH (n) RETURN count(n) AS total")).scalar("total")
    relationships = (await gateway.run("MATCH ()-[r]->() RETURN count(r) AS total")).scalar("total")
    labels = (await gateway.run("CALL db.labels() YIELD label RETURN label")).values("label")
    types = (
        await gateway.run("CALL db.relationshipTypes() YIELD relationshipType RETURN relationshipType")
    ).values("relationshipType")

    stats: Dict[str, Any] = {
        "nodes": nodes,
        "relationships": relationships,
        "labels": labels,
        "relationship_types": types,
        "label_counts": {},
        "type_counts": {},
    }
    if not detailed:
        return stats

    for label in labels:
        try:
            stats["label_counts"][label] = await gateway.label(label).count()
        except InvalidIdentifier:
            logger.warning("Skipping label %r: not a plain identifier", label)

    for rel_type in types:
        try:
            validate_identifier(rel_type, "relationship type")
        except InvalidIdentifier:
            logger.warning("Skipping relationship type %r: not a plain identifier", rel_type)
            continue
        result = await gateway.run(f"MATCH ()-[r:{rel_type}]->() RETURN count(r) AS total")
        stats["type_counts"][rel_type] = result.scalar("total")

    return stats


@app.command("stats")
def show_stats(
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show counts per label and relationship type"),
) -> None:
    """Show database statistics."""
    settings = get_settings()
    configure_logging(settings)

    try:
        stats = run_with_gateway(settings, lambda gateway: collect_stats(gateway, detailed))
    except (Neo4jFluentError, ConnectionError) as e:
        console.print(f"[red]Failed to get statistics:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(Panel(
        f"[cyan]Nodes:[/cyan] {stats['nodes']}\n"
        f"[cyan]Relationships:[/cyan] {stats['relationships']}\n"
        f"[cyan]Labels:[/cyan] {len(stats['labels'])}\n"
        f"[cyan]Relationship Types:[/cyan] {len(stats['relationship_types'])}\n\n"
        f"[cyan]Server:[/cyan] {settings.uri} (database '{settings.database}')",
        title="Neo4j Statistics",
    ))

    if not detailed:
        return

    table = Table(title="Nodes by Label")
    table.add_column("Label", style="cyan")
    table.add_column("Count", justify="right")
    for label, count in stats["label_counts"].items():
        table.add_row(label, str(count))
    console.print(table)

    table = Table(title="Relationships by Type")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    for rel_type, count in stats["type_counts"].items():
        table.add_row(rel_type, str(count))
    console.print(table)


async def clear_nodes(gateway: StoreGateway, label: Optional[str] = None) -> int:
    """Detach-delete every node, or every node with ``label``."""
    labels = [label] if label else []
    result = await gateway.run(
        f"MATCH (n{label_fragment(labels)}) DETACH DELETE n RETURN count(n) AS deleted"
    )
    return int(result.scalar("deleted", 0))


@app.command("clear")
def clear(
    label: Optional[str] = typer.Option(None, "--label", "-l", help="Only delete nodes with this label"),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
) -> None:
    """Delete nodes and their relationships."""
    settings = get_settings()
    configure_logging(settings)

    if label is not None:
        try:
            validate_identifier(label, "label")
        except InvalidIdentifier as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1)

    scope = f"all :{label} nodes" if label else "ALL nodes and relationships"
    if not force and not typer.confirm(f"Delete {scope} from {settings.uri}?", default=False):
        console.print("[yellow]Operation cancelled[/yellow]")
        return

    try:
        deleted = run_with_gateway(settings, lambda gateway: clear_nodes(gateway, label))
    except (Neo4jFluentError, ConnectionError) as e:
        console.print(f"[red]Failed to clear data:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]Deleted {deleted} nodes[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
