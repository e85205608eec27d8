"""CLI for Splitly using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import SplitlyError
from .models import YOU_ID
from .service import LedgerService
from .ui import select_friend_interactive

app = typer.Typer(
    name="splitly",
    help="Track shared expenses with friends and settle up",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool) -> Iterator[LedgerService]:
    """Open the database, yield a service and report errors consistently."""
    setup_logging(verbose)
    db = None

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        yield LedgerService(settings, db)

    except SplitlyError as e:
        # Validation or lookup failure
        console.print(f"\n[bold yellow]⚠️  {e}[/bold yellow]\n")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def parse_share_options(shares: list[str]) -> dict[str, str]:
    """Parse repeated ``NAME=AMOUNT`` options into a mapping."""
    parsed = {}
    for item in shares:
        name, sep, amount = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME=AMOUNT, got '{item}'")
        parsed[name.strip()] = amount.strip()
    return parsed


def format_money(service: LedgerService, cents: int, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (₹85.02)
    Positive amounts have spaces:      ₹85.02
    The spaces ensure decimal points align in tables.
    """
    formatted = service.format(abs(cents))
    if cents < 0:
        return f"([red]{formatted}[/red])" if use_color else f"({formatted})"
    return f" [green]{formatted}[/green] " if use_color else f" {formatted} "


@app.command()
def add(
    description: str = typer.Argument(..., help="What the expense was for"),
    amount: str = typer.Argument(..., help="Total amount, e.g. 120.00"),
    friends: str = typer.Option(
        ..., "--with", "-w", help="Friends sharing the cost (comma separated)"
    ),
    paid_by: str = typer.Option(YOU_ID, "--paid-by", "-p", help="Who paid"),
    share: list[str] = typer.Option(
        [], "--share", "-s", help="Custom share as NAME=AMOUNT (use 'you' for yourself)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Add an expense split with friends.

    Splits evenly unless --share is given, in which case the shares must add
    up exactly to the total.
    """
    custom_shares = parse_share_options(share)

    with open_service(verbose) as service:
        expense = service.add_expense(
            description=description,
            amount=amount,
            friend_names=friends,
            paid_by=paid_by,
            split_type="custom" if custom_shares else "even",
            custom_shares=custom_shares,
        )
        display_expense(service, expense)
        console.print(f"\n[bold green]✓ Added expense {expense.id}[/bold green]\n")


@app.command()
def edit(
    expense_id: str = typer.Argument(..., help="ID of the expense to edit"),
    description: str | None = typer.Option(None, "--description", "-d"),
    amount: str | None = typer.Option(None, "--amount", "-a"),
    friends: str | None = typer.Option(
        None, "--with", "-w", help="Friends sharing the cost (comma separated)"
    ),
    paid_by: str | None = typer.Option(None, "--paid-by", "-p", help="Who paid"),
    even: bool = typer.Option(False, "--even", help="Switch to an even split"),
    share: list[str] = typer.Option(
        [], "--share", "-s", help="Custom share as NAME=AMOUNT (use 'you' for yourself)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Edit an expense. Fields not given keep their current values.
    """
    custom_shares = parse_share_options(share)

    with open_service(verbose) as service:
        form = service.edit_form(expense_id)

        if custom_shares:
            split_type, shares = "custom", custom_shares
        elif even:
            split_type, shares = "even", {}
        else:
            split_type, shares = form.split_type, form.custom_shares

        expense = service.edit_expense(
            expense_id,
            description=description if description is not None else form.description,
            amount=amount if amount is not None else form.amount,
            friend_names=friends if friends is not None else form.friend_names,
            paid_by=paid_by if paid_by is not None else form.paid_by,
            split_type=split_type,
            custom_shares=shares,
        )
        display_expense(service, expense)
        console.print(f"\n[bold green]✓ Saved changes to {expense.id}[/bold green]\n")


@app.command()
def remove(
    expense_id: str = typer.Argument(..., help="ID of the expense to remove"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Remove an expense."""
    with open_service(verbose) as service:
        service.delete_expense(expense_id)
        console.print(f"\n[bold green]✓ Removed expense {expense_id}[/bold green]\n")


@app.command(name="friends")
def list_friends(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List friends and what you owe each other."""
    with open_service(verbose) as service:
        friends = service.list_friends()
        if not friends:
            console.print(
                "[yellow]Add an expense to create your first friend.[/yellow]"
            )
            return

        balances = service.friend_balances()

        table = Table(title="Friends", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", width=10)
        table.add_column("Name", style="cyan")
        table.add_column("Balance", justify="right")

        for friend in friends:
            table.add_row(
                friend.id,
                friend.name,
                service.describe_friend_balance(balances.get(friend.id, 0)),
            )

        console.print(table)


@app.command()
def show(
    name: str | None = typer.Argument(None, help="Friend name (prompts if omitted)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show expenses shared with one friend."""
    with open_service(verbose) as service:
        if name is None:
            balances = service.friend_balances()
            friend_id = select_friend_interactive(
                service.list_friends(),
                {
                    fid: service.describe_friend_balance(balance)
                    for fid, balance in balances.items()
                },
            )
            if friend_id is None:
                console.print("[yellow]No friend selected.[/yellow]")
                return
        else:
            friend_id = service.find_friend(name).id

        friend_name = service.participant_name(friend_id)
        balance = service.friend_balances().get(friend_id, 0)

        console.print(f"\n[bold]{friend_name}[/bold]")
        console.print(f"  {service.describe_friend_balance(balance)}\n")

        expenses = service.expenses_with(friend_id)
        if not expenses:
            console.print("[dim]No expenses yet with this friend.[/dim]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", width=10)
        table.add_column("Date", width=8)
        table.add_column("Description", style="cyan", width=30)
        table.add_column("Details")
        table.add_column("Amount", justify="right", width=14)

        for expense in expenses:
            table.add_row(
                expense.id,
                expense.created_at.strftime("%b %d"),
                expense.description,
                service.describe_expense_line(expense, friend_id),
                service.format(expense.amount_cents),
            )

        console.print(table)


@app.command(name="drop-friend")
def drop_friend(
    name: str = typer.Argument(..., help="Friend name or ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Remove a friend.

    Their shares in past expenses are reassigned to the remaining
    participants. Friends who paid for an expense can't be removed.
    """
    with open_service(verbose) as service:
        friend = service.remove_friend(name)
        console.print(f"\n[bold green]✓ Removed {friend.name}[/bold green]\n")


@app.command()
def balances(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show everyone's net balance across all expenses."""
    with open_service(verbose) as service:
        group = service.group_balances()

        table = Table(title="Balances", show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Balance", justify="right", width=16)

        for participant_id, balance in group.items():
            table.add_row(
                service.participant_name(participant_id),
                format_money(service, balance),
            )

        console.print(table)

        # Verification
        if sum(group.values()) == 0:
            console.print("  [green]✓ Balances sum to zero[/green]")
        else:
            console.print(
                f"  [red]✗ Balances sum to {sum(group.values())} cents[/red]"
            )


@app.command()
def settle(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Suggest transfers that would settle everyone up."""
    with open_service(verbose) as service:
        transfers = service.settlements()
        if not transfers:
            console.print("[green]✓ Everyone is settled up.[/green]")
            return

        table = Table(
            title="Suggested Transfers", show_header=True, header_style="bold magenta"
        )
        table.add_column("From", style="cyan")
        table.add_column("To", style="cyan")
        table.add_column("Amount", justify="right", width=14)

        for transfer in transfers:
            table.add_row(
                service.participant_name(transfer.from_id),
                service.participant_name(transfer.to_id),
                service.format(transfer.amount_cents),
            )

        console.print(table)


def display_expense(service: LedgerService, expense):
    """Display an expense and its split in a table."""
    console.print(f"\n[bold]{expense.description}[/bold] [dim]({expense.id})[/dim]")
    console.print(f"  Total: {service.format(expense.amount_cents)}")
    console.print(f"  Paid by: {service.participant_name(expense.paid_by)}")
    console.print(f"  Split: {expense.split_type}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Participant", style="cyan")
    table.add_column("Share", justify="right", width=14)

    for participant_id, cents in expense.splits.items():
        table.add_row(service.participant_name(participant_id), service.format(cents))

    console.print(table)


if __name__ == "__main__":
    app()
