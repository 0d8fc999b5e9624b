"""Command-line interface for ludoteca.

Built with Typer for commands and Rich for output.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import Config, get_config
from .diagnostics import ErrorLog, configure_logging
from .errors import InsufficientPaymentError, LudotecaError, PersistenceError
from .export import ReportGenerator
from .lending import Game, LendingLedger, Loan, Member
from .persistence import FileStorage, LedgerStore

# Create the main app
app = typer.Typer(
    name="ludoteca",
    help="Lend board games to members and track late fines.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{escape(message)}[/dim]")


@dataclass
class Session:
    """Everything a command needs: config, ledger, store and error log."""

    config: Config
    store: LedgerStore
    error_log: ErrorLog
    ledger: LendingLedger

    def fail(self, exc: Exception, context: str) -> None:
        """Record a failed operation and tell the user."""
        self.error_log.record(exc, context)
        print_error(str(exc))

    def close(self) -> None:
        """Release the error log."""
        self.error_log.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def save(self) -> bool:
        """Save the ledger, reporting failures instead of raising."""
        try:
            self.store.save(self.ledger)
        except PersistenceError as e:
            self.fail(e, "save")
            return False
        return True


def open_session() -> Session:
    """Load configuration and saved state.

    A load failure is logged and the session starts with an empty ledger.
    The unreadable file is first copied aside so the next save cannot lose it.
    """
    config = get_config()
    for problem in config.validate():
        print_warning(problem)

    error_log = ErrorLog(config.log_path)
    state_storage = FileStorage(config.state_path)
    store = LedgerStore(
        state_storage,
        daily_fine_rate=config.daily_fine_rate,
        default_grace_days=config.grace_days,
    )
    try:
        ledger = store.load()
    except PersistenceError as e:
        error_log.record(e, "load")
        if state_storage.exists():
            try:
                kept = state_storage.copy_aside()
            except PersistenceError as copy_error:
                error_log.record(copy_error, "load")
            else:
                print_warning(f"Unreadable data copied to {kept}")
        print_warning(f"Could not load saved data, starting empty. See {config.log_path}")
        ledger = store.new_ledger()

    return Session(config=config, store=store, error_log=error_log, ledger=ledger)


def parse_amount(raw: str) -> Decimal:
    """Parse a money amount typed by the user."""
    try:
        amount = Decimal(raw.strip().replace(",", "."))
    except InvalidOperation:
        raise typer.BadParameter(f"Not a valid amount: {raw!r}")
    if not amount.is_finite() or amount < 0:
        raise typer.BadParameter(f"Not a valid amount: {raw!r}")
    return amount


def format_games_table(games: list[Game], title: str = "Games") -> Table:
    """Create a rich table for displaying games."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan", max_width=40)
    table.add_column("Category", style="green")
    table.add_column("Status")

    for game in games:
        status = "[yellow]on loan[/yellow]" if game.is_on_loan else "[green]available[/green]"
        table.add_row(str(game.id), escape(game.name), escape(game.category), status)

    return table


def format_members_table(members: list[Member]) -> Table:
    """Create a rich table for displaying members."""
    table = Table(title="Members", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Contact")

    for member in members:
        table.add_row(str(member.id), escape(member.name), escape(member.contact))

    return table


def format_loans_table(ledger: LendingLedger, loans: list[Loan]) -> Table:
    """Create a rich table for displaying loans."""
    snapshot = ledger.snapshot()
    table = Table(title="Loans", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Game", style="cyan", max_width=30)
    table.add_column("Member")
    table.add_column("Lent")
    table.add_column("Due")
    table.add_column("Status")

    for loan in loans:
        if loan.return_date is not None:
            status = f"[dim]returned {loan.return_date:%Y-%m-%d} (fine {loan.fine_paid:.2f})[/dim]"
        else:
            status = "[green]active[/green]"
        table.add_row(
            str(loan.id),
            escape(snapshot.game_name(loan.game_id)),
            escape(snapshot.member_name(loan.member_id)),
            f"{loan.loan_date:%Y-%m-%d}",
            f"{loan.due_date:%Y-%m-%d}",
            status,
        )

    return table


# ============================================================================
# Operations shared by commands and the menu
# ============================================================================


def _add_game(session: Session, name: str, category: str) -> bool:
    try:
        game = session.ledger.register_game(name, category)
    except LudotecaError as e:
        session.fail(e, "register game")
        return False
    print_success(f"Registered game #{game.id} - {game.name} ({game.category})")
    return True


def _add_member(session: Session, name: str, contact: str) -> bool:
    try:
        member = session.ledger.register_member(name, contact)
    except LudotecaError as e:
        session.fail(e, "register member")
        return False
    print_success(f"Registered member #{member.id} - {member.name}")
    return True


def _lend(
    session: Session,
    game_id: int,
    member_id: int,
    days: Optional[int],
    when: Optional[datetime],
) -> bool:
    try:
        loan = session.ledger.lend(game_id, member_id, loan_date=when, grace_days=days)
    except LudotecaError as e:
        session.fail(e, "lend")
        return False
    print_success(f"Created loan #{loan.id}, due {loan.due_date:%Y-%m-%d}")
    return True


def _return(
    session: Session,
    loan_id: int,
    paid: Optional[Decimal],
    when: Optional[datetime],
) -> bool:
    when = when or datetime.now()
    try:
        preview = session.ledger.preview_fine(loan_id, when)
        console.print(f"Fine: {preview.fine:.2f} (days late: {preview.days_late})")
        if paid is None:
            paid = parse_amount(typer.prompt("Amount paid", default=f"{preview.fine:.2f}"))
        receipt = session.ledger.return_loan(loan_id, return_date=when, amount_paid=paid)
    except InsufficientPaymentError as e:
        session.fail(e, "return")
        print_info(f"Loan #{loan_id} stays open until {e.amount_due:.2f} is paid.")
        return False
    except LudotecaError as e:
        session.fail(e, "return")
        return False
    print_success(f"Loan #{receipt.loan.id} returned. Fine charged: {receipt.fine:.2f}")
    return True


def _report(session: Session) -> bool:
    try:
        ReportGenerator().write(
            session.ledger.snapshot(), FileStorage(session.config.report_path)
        )
    except PersistenceError as e:
        session.fail(e, "report")
        return False
    print_success(f"Report written to {session.config.report_path}")
    return True


# ============================================================================
# Commands
# ============================================================================


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress messages"),
) -> None:
    """Lend board games to members and track late fines."""
    configure_logging(verbose)


@app.command("add-game")
def add_game(
    name: str = typer.Argument(..., help="Game name"),
    category: str = typer.Option("", "--category", "-c", help="Category (default: Other)"),
) -> None:
    """Register a new game."""
    with open_session() as session:
        if not _add_game(session, name, category) or not session.save():
            raise typer.Exit(1)


@app.command("add-member")
def add_member(
    name: str = typer.Argument(..., help="Member name"),
    contact: str = typer.Option("", "--contact", "-c", help="Phone or e-mail"),
) -> None:
    """Register a new member."""
    with open_session() as session:
        if not _add_member(session, name, contact) or not session.save():
            raise typer.Exit(1)


@app.command("games")
def list_games() -> None:
    """List all games."""
    with open_session() as session:
        games = session.ledger.list_games()
        if not games:
            print_info("No games registered")
            return
        console.print(format_games_table(games))


@app.command("members")
def list_members() -> None:
    """List all members."""
    with open_session() as session:
        members = session.ledger.list_members()
        if not members:
            print_info("No members registered")
            return
        console.print(format_members_table(members))


@app.command("loans")
def list_loans(
    active: bool = typer.Option(False, "--active", "-a", help="Show only active loans"),
    returned: bool = typer.Option(False, "--returned", "-r", help="Show only returned loans"),
) -> None:
    """List loan records."""
    with open_session() as session:
        state = None
        if active:
            state = True
        elif returned:
            state = False

        loans = session.ledger.list_loans(active=state)
        if not loans:
            print_info("No loans found")
            return
        console.print(format_loans_table(session.ledger, loans))


@app.command("lend")
def lend(
    game_id: int = typer.Argument(..., help="Game ID to lend"),
    member_id: int = typer.Argument(..., help="Borrowing member ID"),
    days: Optional[int] = typer.Option(None, "--days", "-d", min=0, help="Days until due"),
    when: Optional[datetime] = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="Loan date (default: now)"
    ),
) -> None:
    """Lend a game to a member."""
    with open_session() as session:
        if not _lend(session, game_id, member_id, days, when) or not session.save():
            raise typer.Exit(1)


@app.command("return")
def return_loan(
    loan_id: int = typer.Argument(..., help="Loan ID to return"),
    paid: Optional[str] = typer.Option(None, "--paid", "-p", help="Amount paid for the fine"),
    when: Optional[datetime] = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="Return date (default: now)"
    ),
) -> None:
    """Return a game and pay its fine."""
    amount = parse_amount(paid) if paid is not None else None
    with open_session() as session:
        if not _return(session, loan_id, amount, when) or not session.save():
            raise typer.Exit(1)


@app.command("report")
def report() -> None:
    """Write the text report."""
    with open_session() as session:
        if not _report(session):
            raise typer.Exit(1)


@app.command("menu")
def menu() -> None:
    """Run the interactive menu."""
    with open_session() as session:
        while True:
            console.print(Panel(
                "1 - Register game\n"
                "2 - Register member\n"
                "3 - List games\n"
                "4 - Lend game\n"
                "5 - Return game\n"
                "6 - Generate report\n"
                "7 - Save\n"
                "0 - Exit",
                title="LUDOTECA",
            ))
            option = typer.prompt("Option").strip()

            try:
                if option == "1":
                    name = typer.prompt("Game name", default="", show_default=False)
                    category = typer.prompt("Category", default="", show_default=False)
                    _add_game(session, name, category)
                elif option == "2":
                    name = typer.prompt("Member name", default="", show_default=False)
                    contact = typer.prompt(
                        "Contact (phone/e-mail)", default="", show_default=False
                    )
                    _add_member(session, name, contact)
                elif option == "3":
                    console.print(format_games_table(session.ledger.list_games()))
                elif option == "4":
                    game_id = typer.prompt("Game ID", type=int)
                    member_id = typer.prompt("Member ID", type=int)
                    days = typer.prompt(
                        "Days until due", type=int, default=session.ledger.default_grace_days
                    )
                    _lend(session, game_id, member_id, days, None)
                elif option == "5":
                    loan_id = typer.prompt("Loan ID", type=int)
                    _return(session, loan_id, None, None)
                elif option == "6":
                    _report(session)
                elif option == "7":
                    if session.save():
                        print_success(f"Data saved to {session.config.state_path}")
                elif option == "0":
                    if not session.save():
                        raise typer.Exit(1)
                    print_success("Data saved. Bye!")
                    return
                else:
                    print_warning("Invalid option.")
            except (typer.Exit, typer.Abort):
                raise
            except typer.BadParameter as e:
                print_error(e.format_message())
            except Exception as e:
                session.error_log.record(e, "menu")
                print_error(f"Unexpected error. Check {session.config.log_path}")

            console.print()


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"ludoteca version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
