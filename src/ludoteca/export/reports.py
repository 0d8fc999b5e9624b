"""Plain-text library report.

Renders games, active loans and the return history from a ledger snapshot.
"""

from datetime import datetime
from typing import Optional

from ..lending.ledger import LedgerSnapshot
from ..persistence.storage import TextStorage

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ReportGenerator:
    """Generates the library report."""

    def render(self, snapshot: LedgerSnapshot, generated_at: Optional[datetime] = None) -> str:
        """Render a report as text.

        Args:
            snapshot: Ledger state to report on
            generated_at: Timestamp for the header (default: now)

        Returns:
            Report text
        """
        generated_at = generated_at or datetime.now()
        lines = [f"Report - {generated_at.strftime(TIMESTAMP_FORMAT)}"]

        lines.append("=== Games ===")
        for game in snapshot.games:
            on_loan = "yes" if game.is_on_loan else "no"
            lines.append(
                f"#{game.id} - {game.name} - Category: {game.category} - On loan: {on_loan}"
            )
        lines.append("")

        lines.append("=== Active loans ===")
        for loan in snapshot.active_loans:
            lines.append(
                f"Loan #{loan.id} - Game: {snapshot.game_name(loan.game_id)}"
                f" - Member: {snapshot.member_name(loan.member_id)}"
                f" - Lent: {loan.loan_date.strftime(DATE_FORMAT)}"
                f" - Due: {loan.due_date.strftime(DATE_FORMAT)}"
            )
        lines.append("")

        lines.append("=== Returned loans ===")
        for loan in snapshot.returned_loans:
            returned = loan.return_date.strftime(DATE_FORMAT) if loan.return_date else "-"
            lines.append(
                f"Loan #{loan.id} - Game: {snapshot.game_name(loan.game_id)}"
                f" - Member: {snapshot.member_name(loan.member_id)}"
                f" - Returned: {returned}"
                f" - Fine: {loan.fine_paid:.2f}"
            )

        return "\n".join(lines) + "\n"

    def write(
        self,
        snapshot: LedgerSnapshot,
        sink: TextStorage,
        generated_at: Optional[datetime] = None,
    ) -> str:
        """Render a report and write it to ``sink``.

        Raises:
            PersistenceError: If the sink cannot be written

        Returns:
            Report text that was written
        """
        text = self.render(snapshot, generated_at)
        sink.write_text(text)
        return text
