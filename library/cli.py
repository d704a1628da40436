import click

from library.extensions import db
from library.models.borrower import BorrowerGroup


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development; use `flask db upgrade` otherwise)."""
        db.create_all()
        click.echo("Tables created.")

    @app.cli.command("seed-groups")
    def seed_groups():
        """Insert the default borrower groups that are missing."""
        added = 0
        for name, days, description in app.config["DEFAULT_BORROWER_GROUPS"]:
            if BorrowerGroup.query.filter_by(name=name).first():
                continue
            db.session.add(BorrowerGroup(name=name, loan_duration_days=days, description=description))
            added += 1
        db.session.commit()
        app.logger.info(f"[cli] Seeded {added} borrower groups")
        click.echo(f"{added} borrower group(s) added.")
