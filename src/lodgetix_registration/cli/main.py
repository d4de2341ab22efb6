"""
LodgeTix Registration CLI

Command-line interface for quoting, validating and persisting registration
selections outside the web wizard.

Usage:
    lodgetix quote --catalog catalog.json --selections selections.json
    lodgetix validate --payload payload.json
    lodgetix convert-legacy --legacy legacy.json --catalog catalog.json
    lodgetix draft save --draft-id <id> --catalog catalog.json --selections selections.json
    lodgetix draft load --draft-id <id> --catalog catalog.json

Catalog files hold {"functionId", "tickets": [...], "packages": [...]} with
rows as the catalog service returns them. Selection files hold
{"registrationType", "attendees": {attendeeId: selection}, "lodgeBulkSelection"}
where each attendee selection may be in the enhanced or the legacy shape.
"""

import json
from pathlib import Path
from typing import Any, Optional

import typer
from typing_extensions import Annotated

from lodgetix_registration.catalog.models import Catalog, PackageDefinition, TicketDefinition
from lodgetix_registration.kernel.errors import LodgetixError
from lodgetix_registration.kernel.logging import configure_logging, is_production
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.persistence.client import DraftClient
from lodgetix_registration.pricing.aggregator import find_zero_priced_items
from lodgetix_registration.registration import RegistrationSession
from lodgetix_registration.selection.invariants import validate_ticket_selection_payload
from lodgetix_registration.selection.legacy import normalize_selection, to_enhanced
from lodgetix_registration.selection.models import SelectionState

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=is_production(), log_level="WARNING")

app = typer.Typer(
    name="lodgetix",
    help="LodgeTix registration selection and pricing engine",
    add_completion=False,
)

draft_app = typer.Typer(help="Draft persistence commands")
app.add_typer(draft_app, name="draft")


def _read_json(path: Path) -> Any:
    """Read a JSON file or exit with an error"""
    try:
        return json.loads(path.read_text())
    except FileNotFoundError:
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(1)


def load_catalog(path: Path) -> Catalog:
    """Load a catalog file into a captured Catalog"""
    data = _read_json(path)
    return Catalog.capture(
        data.get("functionId"),
        [TicketDefinition.from_record(row) for row in data.get("tickets", [])],
        [PackageDefinition.from_record(row) for row in data.get("packages", [])],
    )


def build_session(
    catalog: Catalog,
    selections: dict[str, Any],
    *,
    draft_id: Optional[str] = None,
    draft_client: Optional[DraftClient] = None,
) -> RegistrationSession:
    """Replay a selections file into a fresh session"""
    session = RegistrationSession(
        selections.get("functionId") or catalog.function_id,
        catalog,
        draft_id=draft_id,
        draft_client=draft_client,
    )
    session.start_new_registration(selections.get("registrationType", "individuals"))

    for attendee_id, raw in selections.get("attendees", {}).items():
        selection = normalize_selection(raw, catalog)
        for package in selection.packages:
            session.select_package(attendee_id, package.package_id, package.quantity)
        for ticket in selection.individual_tickets:
            session.select_ticket(attendee_id, ticket.ticket_id, ticket.quantity)

    bulk = selections.get("lodgeBulkSelection")
    if bulk:
        session.set_lodge_bulk_selection(bulk["packageId"], bulk["quantity"])
    return session


def _echo_summary(session: RegistrationSession, is_domestic: bool) -> None:
    summary = session.order_summary
    fees = session.fees(is_domestic)
    typer.echo(f"Registration type: {summary.registration_type.value if summary.registration_type else 'unset'}")
    typer.echo(f"  Attendees: {summary.total_attendees}")
    typer.echo(f"  Packages: {summary.total_packages}")
    typer.echo(f"  Tickets: {summary.total_tickets}")
    typer.echo(f"  Subtotal: {summary.subtotal}")
    typer.echo(f"  Processing fee: {fees.processing_fee}")
    typer.echo(f"  Total: {fees.total}")


@app.command()
def quote(
    catalog: Annotated[Path, typer.Option("--catalog", help="Catalog JSON file")],
    selections: Annotated[Path, typer.Option("--selections", help="Selections JSON file")],
    international: Annotated[
        bool,
        typer.Option("--international", help="Estimate fees for an international card"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Compute the order summary and fee estimate for a set of selections"""
    try:
        session = build_session(load_catalog(catalog), _read_json(selections))
    except LodgetixError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if json_output:
        output = {
            "orderSummary": session.order_summary.to_wire(),
            "fees": session.fees(not international).to_wire(),
        }
        typer.echo(json.dumps(output, indent=2))
    else:
        _echo_summary(session, not international)
        ticket_summary = session.ticket_summary()
        if ticket_summary.footer:
            typer.echo(f"  {ticket_summary.footer}")


@app.command()
def validate(
    payload: Annotated[Path, typer.Option("--payload", help="Ticket selection payload JSON file")],
) -> None:
    """Validate the structure of a ticket selection payload"""
    result = validate_ticket_selection_payload(_read_json(payload))
    if result.is_valid:
        typer.echo("✓ Payload is valid")
        return

    typer.echo(f"✗ Payload has {len(result.errors)} error(s):", err=True)
    for error in result.errors:
        typer.echo(f"  - {error}", err=True)
    raise typer.Exit(1)


@app.command("convert-legacy")
def convert_legacy(
    legacy: Annotated[Path, typer.Option("--legacy", help="Legacy attendee map JSON file")],
    catalog: Annotated[
        Optional[Path],
        typer.Option("--catalog", help="Catalog JSON file used to price converted entries"),
    ] = None,
) -> None:
    """Convert legacy {ticketDefinitionId, selectedEvents} selections to the enhanced shape"""
    captured = load_catalog(catalog) if catalog else None
    enhanced = to_enhanced(_read_json(legacy), captured)

    typer.echo(
        json.dumps(
            {attendee_id: selection.to_wire() for attendee_id, selection in enhanced.items()},
            indent=2,
        )
    )

    unpriced = find_zero_priced_items(SelectionState(attendee_selections=enhanced))
    for item in unpriced:
        typer.echo(
            f"Warning: {item.kind} {item.item_id} for attendee {item.attendee_id} has no price",
            err=True,
        )


# Draft commands


def _draft_client(base_url: Optional[str]) -> DraftClient:
    policy = EnginePolicy.from_env()
    return DraftClient(base_url, policy=policy)


@draft_app.command("save")
def draft_save(
    draft_id: Annotated[str, typer.Option("--draft-id", help="Draft ID")],
    catalog: Annotated[Path, typer.Option("--catalog", help="Catalog JSON file")],
    selections: Annotated[Path, typer.Option("--selections", help="Selections JSON file")],
    base_url: Annotated[
        Optional[str],
        typer.Option("--base-url", help="Draft API base URL (defaults to LODGETIX_DRAFT_API_BASE_URL)"),
    ] = None,
) -> None:
    """Save a set of selections as a draft"""
    try:
        session = build_session(
            load_catalog(catalog),
            _read_json(selections),
            draft_id=draft_id,
            draft_client=_draft_client(base_url),
        )
        result = session.save_draft()
    except LodgetixError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Saved draft: {result.draft_id}")
    typer.echo(f"  Attendees: {result.attendee_count}")
    typer.echo(f"  Subtotal: {session.order_summary.subtotal}")


@draft_app.command("load")
def draft_load(
    draft_id: Annotated[str, typer.Option("--draft-id", help="Draft ID")],
    catalog: Annotated[
        Optional[Path],
        typer.Option("--catalog", help="Catalog JSON file (prices entries saved without one)"),
    ] = None,
    base_url: Annotated[
        Optional[str],
        typer.Option("--base-url", help="Draft API base URL (defaults to LODGETIX_DRAFT_API_BASE_URL)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the restored document as JSON"),
    ] = False,
) -> None:
    """Load a draft and show its order summary"""
    captured = load_catalog(catalog) if catalog else None
    try:
        session = RegistrationSession.load_draft(draft_id, _draft_client(base_url), captured)
    except LodgetixError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(session.to_document(), indent=2))
    else:
        typer.echo(f"Draft: {draft_id}")
        _echo_summary(session, is_domestic=True)


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
