"""
Command Line Interface for slug-history.
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import desc, select

from ..config import get_settings
from ..db.base import get_engine, get_session_local, init_database
from ..db.models import SlugModel

app = typer.Typer(help="slug-history - inspect the slug history table")
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Override LOG_LEVEL"),
):
    """Configure logging for every command."""
    logging.basicConfig(level=(log_level or get_settings().log_level).upper())


@app.command("init-db")
def init_db():
    """Create the slug history table."""
    init_database(get_engine())
    console.print("✅ Slug history table ready")


@app.command()
def history(
    sluggable_type: str = typer.Argument(..., help="Owner type, e.g. Post"),
    sluggable_id: int = typer.Argument(..., help="Owner primary key"),
):
    """Show every slug an owner has held, newest first."""
    session = get_session_local()()
    try:
        rows = session.scalars(
            select(SlugModel)
            .where(
                SlugModel.sluggable_type == sluggable_type,
                SlugModel.sluggable_id == sluggable_id,
            )
            .order_by(desc(SlugModel.id))
        ).all()
    finally:
        session.close()

    if not rows:
        console.print(f"No slug history for {sluggable_type}:{sluggable_id}")
        return

    table = Table(
        title=f"Slug history for {sluggable_type}:{sluggable_id}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("ID", style="cyan")
    table.add_column("Slug", style="green")
    table.add_column("Locale")
    table.add_column("Scope")
    table.add_column("Created")

    for row in rows:
        table.add_row(
            str(row.id),
            row.slug,
            row.locale or "",
            row.scope or "",
            row.created_at.isoformat() if row.created_at else "",
        )

    console.print(table)


@app.command()
def lookup(
    sluggable_type: str = typer.Argument(..., help="Owner type, e.g. Post"),
    slug: str = typer.Argument(..., help="Slug to look up"),
    locale: Optional[str] = typer.Option(None, help="Only match rows for this locale"),
    scope: Optional[str] = typer.Option(None, help="Only match rows for this serialized scope"),
):
    """Print the owner id that most recently held SLUG."""
    stmt = select(SlugModel).where(
        SlugModel.sluggable_type == sluggable_type,
        SlugModel.slug == slug,
    )
    if locale is not None:
        stmt = stmt.where(SlugModel.locale == locale)
    if scope is not None:
        stmt = stmt.where(SlugModel.scope == scope)

    session = get_session_local()()
    try:
        row = session.scalars(stmt.order_by(desc(SlugModel.id)).limit(1)).first()
    finally:
        session.close()

    if row is None:
        console.print(f"❌ No {sluggable_type} ever held {slug!r}")
        raise typer.Exit(code=1)

    console.print(f"{sluggable_type}:{row.sluggable_id}")


if __name__ == "__main__":
    app()
