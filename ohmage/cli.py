# SPDX-License-Identifier: Apache-2.0
"""Click CLI entry point. Install with: pip install . then ohmage --help."""
import json
import sys

import click

from ohmage.config import settings
from ohmage.core.exceptions import OhmageError
from ohmage.core.validators import validate_id_list
from ohmage.services.projection_service import ResultRow, project
from ohmage.services.response_writer import write_error, write_survey_response_document


@click.group()
@click.option("--database-url", default=None, envvar="OHMAGE_DATABASE_URL", help="Database URL")
@click.pass_context
def cli(ctx, database_url):
    """ohmage campaign access tools."""
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url or settings.database_url


def _engine(ctx):
    from ohmage.database import make_engine

    return make_engine(ctx.obj["database_url"])


@cli.command("init-db")
@click.pass_context
def init_db(ctx):
    """Create all tables."""
    from ohmage.database import create_db_and_tables

    create_db_and_tables(_engine(ctx))
    click.echo(f"Tables created in {ctx.obj['database_url']}")


@cli.command("project")
@click.argument("rows_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--columns", default="urn:ohmage:special:all", show_default=True, help="Comma separated column URNs")
@click.option("--prompt-ids", default=None, help="Comma separated prompt ids")
@click.option("--survey-ids", default=None, help="Comma separated survey ids")
@click.option("--campaign-name", default=None)
@click.option("--campaign-version", default=None)
@click.option("--suppress-metadata", is_flag=True)
@click.option("--enforce-grouping/--no-enforce-grouping", default=True, show_default=True)
def project_rows(rows_path, columns, prompt_ids, survey_ids, campaign_name, campaign_version, suppress_metadata, enforce_grouping):
    """Project a JSON array of result rows into a survey response document."""
    with open(rows_path, encoding="utf-8") as f:
        raw_rows = json.load(f)
    try:
        rows = [ResultRow(**raw) for raw in raw_rows]
    except TypeError as e:
        raise click.BadParameter(f"Row does not match the result row fields: {e}", param_hint="ROWS_PATH") from e
    try:
        document = project(
            rows,
            validate_id_list(columns),
            validate_id_list(prompt_ids),
            validate_id_list(survey_ids),
            settings.declared_columns,
            campaign_name,
            campaign_version,
            enforce_grouping=enforce_grouping,
        )
    except OhmageError as e:
        click.echo(json.dumps(write_error(e)), err=True)
        sys.exit(1)
    click.echo(json.dumps(write_survey_response_document(document, suppress_metadata=suppress_metadata), indent=2))


@cli.command("check-view-responses")
@click.argument("campaign_id")
@click.argument("requester")
@click.option("--target", default=None, help="User whose responses would be read")
@click.pass_context
def check_view_responses(ctx, campaign_id, requester, target):
    """Ask whether REQUESTER may read survey responses in CAMPAIGN_ID."""
    from sqlmodel import Session

    from ohmage.services.authorization_service import AuthorizationService
    from ohmage.services.fact_provider import SqlFactProvider

    with Session(_engine(ctx)) as session:
        authorization = AuthorizationService(SqlFactProvider(session))
        try:
            authorization.requester_can_view_users_survey_responses(campaign_id, requester, target)
        except OhmageError as e:
            click.echo(f"DENY {e}")
            sys.exit(1)
    click.echo("ALLOW")


def main():
    """Entry point for console_scripts."""
    cli(obj={})


if __name__ == "__main__":
    main()
