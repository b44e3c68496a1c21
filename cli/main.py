import asyncio

import typer
import uvicorn
from sqlalchemy import select

from backend.app.config import settings
from backend.app.db import async_session, init_db
from backend.app.models.user import User
from backend.app.services.access import Role

app = typer.Typer(help="Featureboard - collect and triage feature requests")


@app.command()
def start(reload: bool = typer.Option(False, help="Reload on code changes.")) -> None:
    """Start the Featureboard server."""
    typer.echo(f"Starting Featureboard on {settings.host}:{settings.port}...")
    uvicorn.run(
        "backend.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
    )


@app.command("init-db")
def init_db_command() -> None:
    """Create the database tables."""
    asyncio.run(init_db())
    typer.echo(f"Database ready at {settings.db_path}")


async def _set_role(email: str, role: Role) -> bool:
    async with async_session() as session:
        result = await session.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            return False
        user.role = role.value
        await session.commit()
        return True


@app.command("set-role")
def set_role(email: str, role: Role) -> None:
    """Grant or revoke the admin role for an existing account."""
    if not asyncio.run(_set_role(email, role)):
        typer.echo(f"No user with email {email}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{email} is now {role.value}")


if __name__ == "__main__":
    app()
