#!/usr/bin/env python3
"""
CLI tool for local Inkwell administration.

Provides commands for preparing storage, listing, exporting and deleting
documents, and checking the service configuration without the web UI.
"""

import os
import sys
import json
from typing import Optional

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from src.inkwell.config import load_config  # noqa: E402
from src.inkwell.auth import load_service_account  # noqa: E402
from src.inkwell.exports import EXPORT_FORMATS, render_document  # noqa: E402
from src.inkwell.providers import create_provider  # noqa: E402
from src.inkwell.services import build_services  # noqa: E402
from src.inkwell.utils.errors import APIError  # noqa: E402
from src.inkwell.utils.repository import create_database  # noqa: E402


class CliContext:
    """Storage and services, created on first use."""

    def __init__(self):
        self.config = load_config()
        self._database = None
        self._services = None

    @property
    def database(self):
        if self._database is None:
            self._database = create_database(self.config)
        return self._database

    @property
    def services(self):
        if self._services is None:
            self._services = build_services(self.database, self.config)
        return self._services


pass_context = click.make_pass_decorator(CliContext, ensure=True)


@click.group()
def cli():
    """CLI tool for local Inkwell administration."""


@cli.command('init-db')
@pass_context
def init_db(ctx: CliContext) -> None:
    """Create storage tables/indexes and check the connection."""
    database = ctx.database
    database.init_indexes()
    if not database.ping():
        click.echo(f"Error: {database.backend} storage is not reachable.", err=True)
        sys.exit(1)
    click.echo(f"✓ {database.backend} storage ready")


@cli.command('list-documents')
@click.option('--mode', type=click.Choice(['public', 'private']), default='public',
              help='public: all public documents; private: documents owned by --user')
@click.option('--user', 'uid', type=str, default='', help='Owner uid (required for --mode private)')
@click.option('--page', default=1, type=int, help='Page number (default: 1)')
@click.option('--per-page', default=20, type=int, help='Items per page (default: 20)')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'simple']),
              default='table', help='Output format (default: table)')
@pass_context
def list_documents(ctx: CliContext, mode: str, uid: str, page: int, per_page: int, output_format: str) -> None:
    """
    List documents with word counts.

    Raises:
        SystemExit: Exits with code 1 if listing fails.
    """
    if mode == 'private' and not uid:
        click.echo("Error: --user is required with --mode private.", err=True)
        sys.exit(1)

    try:
        result = ctx.services["documents"].list_documents(uid, mode=mode, page=page, per_page=per_page)
    except APIError as e:
        click.echo(f"Error listing documents: {e.message}", err=True)
        sys.exit(1)

    documents = result["documents"]
    pagination = result["pagination"]

    if output_format == 'json':
        click.echo(json.dumps(result, indent=2))
        return
    if output_format == 'simple':
        for doc in documents:
            click.echo(f"{doc['_id']}: {doc.get('title', '')} ({doc['wordCount']} words)")
        return

    if not documents:
        click.echo("No documents found.")
        return

    click.echo(f"\n{'ID':<26} {'Visibility':<11} {'Words':<8} {'Updated':<21} {'Title':<40}")
    click.echo("-" * 110)
    for doc in documents:
        title = doc.get('title', '')
        if len(title) > 38:
            title = title[:35] + "..."
        updated = str(doc.get('updatedAt', ''))[:19]
        click.echo(f"{doc['_id']:<26} {doc.get('visibility', ''):<11} {doc['wordCount']:<8} {updated:<21} {title:<40}")
    click.echo(f"\nTotal: {pagination['total']} documents (Page {pagination['page']}/{max(pagination['total_pages'], 1)})")


@cli.command('export')
@click.argument('document_id')
@click.argument('format_type', type=click.Choice(list(EXPORT_FORMATS)))
@click.option('--output', '-o', type=click.Path(), help='Output file path (default: auto-generated)')
@pass_context
def export(ctx: CliContext, document_id: str, format_type: str, output: Optional[str]) -> None:
    """
    Export a document to a file.

    Raises:
        SystemExit: Exits with code 1 if the document is missing, empty or export fails.
    """
    try:
        document = ctx.services["documents"].get_document(document_id)
        rendered = render_document(document, format_type)
    except APIError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    output = output or rendered.filename
    with open(output, 'wb') as f:
        f.write(rendered.data)
    click.echo(f"✓ Exported document '{document_id}' to '{output}' ({format_type.upper()})")


@cli.command('delete-document')
@click.argument('document_id')
@click.option('--confirm/--no-confirm', default=False, help='Skip confirmation prompt')
@pass_context
def delete_document(ctx: CliContext, document_id: str, confirm: bool) -> None:
    """Delete a document and all of its toolbox records."""
    documents = ctx.services["documents"]
    try:
        document = documents.get_document(document_id)
    except APIError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"Document ID: {document_id}")
    click.echo(f"Title: {document.get('title', '')}")
    click.echo(f"Owner: {document.get('userId', '')}")

    if not confirm and not click.confirm('\nAre you sure you want to delete this document?'):
        click.echo("Deletion cancelled.")
        return

    removed = documents.delete_document(document_id, document.get('userId'))
    click.echo(f"✓ Deleted document '{document_id}' ({sum(removed.values())} related records)")


@cli.command('check-setup')
@click.option('--skip-providers', is_flag=True, help='Do not contact AI providers')
@pass_context
def check_setup(ctx: CliContext, skip_providers: bool) -> None:
    """
    Check storage, Firebase credentials and AI provider configuration.

    Exits with code 1 if storage is unreachable.
    """
    ok = True

    click.echo("Storage:")
    try:
        database = ctx.database
        if database.ping():
            click.echo(f"  ✓ {database.backend} reachable")
        else:
            click.echo(f"  ✗ {database.backend} not reachable")
            ok = False
    except APIError as e:
        click.echo(f"  ✗ {e.message}")
        ok = False

    click.echo("\nAuthentication:")
    if load_service_account():
        click.echo("  ✓ Firebase service account configured")
    else:
        click.echo("  ⚠️  Firebase credentials not set (FIREBASE_CREDENTIALS_PATH or FIREBASE_* variables)")
        click.echo("     Authenticated requests will return 503 until they are configured")

    click.echo("\nAI providers:")
    for role, name in (("rewrite", ctx.config["AI_REWRITE_PROVIDER"]),
                       ("analysis", ctx.config["AI_ANALYSIS_PROVIDER"])):
        try:
            provider = create_provider(name)
        except ValueError as e:
            click.echo(f"  ⚠️  {role}: {e}")
            continue
        if skip_providers:
            click.echo(f"  ✓ {role}: {name} configured ({provider.model_name})")
        elif provider.check_availability():
            click.echo(f"  ✓ {role}: {name} ready ({provider.model_name})")
        else:
            click.echo(f"  ⚠️  {role}: {name} configured but model '{provider.model_name}' is not available")

    if os.getenv('REDIS_URL'):
        click.echo("\nRate limiting: Redis storage")
    else:
        click.echo("\nRate limiting: in-memory storage (set REDIS_URL for multiple workers)")

    if not ok:
        sys.exit(1)


if __name__ == '__main__':
    cli()
