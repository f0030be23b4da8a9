"""CLI commands for producer wallets and withdrawals."""

from __future__ import annotations

import click

from mycomarket.application.dto import WithdrawalDTO
from mycomarket.application.request_withdrawal import RequestWithdrawalHandler
from mycomarket.application.resolve_withdrawal import (
    ListPendingWithdrawalsHandler,
    ResolveWithdrawalHandler,
)
from mycomarket.application.show_wallet import ShowWalletHandler
from mycomarket.domain.exceptions import AlreadyProcessed, DomainException
from mycomarket.domain.model.withdrawal import WithdrawalStatus
from mycomarket.infrastructure.bootstrap import (
    ledger_policy,
    notifier,
    retry_attempts,
    unit_of_work,
)


def _display_withdrawal(dto: WithdrawalDTO) -> None:
    line = f"Withdrawal #{dto.id}  {dto.amount}  ({dto.status})  requested {dto.requested_at}"
    if dto.processed_at:
        line += f", processed {dto.processed_at}"
    click.echo(line)
    if dto.processor_note:
        click.echo(f"  Note: {dto.processor_note}")


@click.command("show")
@click.option("--producer", "producer_id", required=True, help="Producer ID.")
def wallet_show(producer_id: str) -> None:
    """Show a producer's balances and recent activity."""
    try:
        dto = ShowWalletHandler(unit_of_work(), ledger_policy()).handle(producer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Wallet of producer {dto.producer_id}")
    click.echo(f"  {'Available':<16} {dto.balance:>16}")
    click.echo(f"  {'Pending':<16} {dto.pending_balance:>16}")
    click.echo(f"  {'Total earned':<16} {dto.total_earned:>16}")
    click.echo(f"  {'Total withdrawn':<16} {dto.total_withdrawn:>16}")

    if dto.transactions:
        click.echo()
        click.echo(f"  {'ID':<6} {'Type':<11} {'Status':<10} {'Amount':>12}  Description")
        click.echo(f"  {'-'*60}")
        for tx in dto.transactions:
            click.echo(
                f"  {tx.id:<6} {tx.type:<11} {tx.status:<10} {tx.amount:>12}  {tx.description}"
            )

    if dto.withdrawals:
        click.echo()
        for withdrawal in dto.withdrawals:
            _display_withdrawal(withdrawal)


@click.command("request")
@click.option("--producer", "producer_id", required=True, help="Producer ID.")
@click.option("--amount", required=True, help="Amount to withdraw (e.g. 100.00).")
@click.option("--iban", required=True, help="Destination IBAN.")
@click.option("--holder", required=True, help="Account holder name.")
def withdrawal_request(producer_id: str, amount: str, iban: str, holder: str) -> None:
    """Ask for a payout of available balance."""
    handler = RequestWithdrawalHandler(
        unit_of_work(),
        ledger_policy(),
        notifier=notifier(),
        retry_attempts=retry_attempts(),
    )

    try:
        dto = handler.handle(producer_id, amount, {"iban": iban, "accountHolder": holder})
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_withdrawal(dto)


@click.command("resolve")
@click.option("--id", "withdrawal_id", required=True, type=int, help="Withdrawal ID.")
@click.option("--approve", "outcome", flag_value=WithdrawalStatus.COMPLETED.value,
              help="Pay the withdrawal out.")
@click.option("--reject", "outcome", flag_value=WithdrawalStatus.REJECTED.value,
              help="Refuse the withdrawal (requires --note).")
@click.option("--note", default=None, help="Note shown to the producer.")
def withdrawal_resolve(withdrawal_id: int, outcome: str | None, note: str | None) -> None:
    """Approve or reject a pending withdrawal."""
    if outcome is None:
        raise click.UsageError("Pass either --approve or --reject")

    handler = ResolveWithdrawalHandler(
        unit_of_work(),
        ledger_policy(),
        notifier=notifier(),
        retry_attempts=retry_attempts(),
    )

    try:
        dto = handler.handle(withdrawal_id, outcome, note)
    except AlreadyProcessed:
        raise click.ClickException(
            f"Withdrawal #{withdrawal_id} has already been processed; nothing changed."
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_withdrawal(dto)


@click.command("pending")
def withdrawal_pending() -> None:
    """List withdrawals waiting for a decision."""
    withdrawals = ListPendingWithdrawalsHandler(unit_of_work()).handle()

    if not withdrawals:
        click.echo("No pending withdrawals.")
        return

    for dto in withdrawals:
        _display_withdrawal(dto)
