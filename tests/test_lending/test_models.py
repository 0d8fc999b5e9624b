"""Tests for the Game, Member and Loan records."""

from datetime import datetime
from decimal import Decimal

import pytest

from ludoteca.errors import AlreadyReturnedError, ErrorKind, ValidationError
from ludoteca.lending.models import Game, Loan, Member, to_money


class TestGame:
    """Tests for Game."""

    def test_trims_name_and_category(self):
        """Test name and category are trimmed."""
        game = Game(id=1, name="  Chess ", category=" Strategy  ")
        assert game.name == "Chess"
        assert game.category == "Strategy"
        assert game.is_on_loan is False

    @pytest.mark.parametrize("category", ["", "   ", None])
    def test_blank_category_defaults_to_other(self, category):
        """Test blank category becomes Other."""
        game = Game(id=1, name="Chess", category=category)
        assert game.category == "Other"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, name):
        """Test blank name raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            Game(id=1, name=name)
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_loan_flag(self):
        """Test marking on loan and available."""
        game = Game(id=1, name="Chess")
        game.mark_on_loan()
        assert game.is_on_loan
        game.mark_available()
        assert not game.is_on_loan


class TestMember:
    """Tests for Member."""

    def test_blank_contact_defaults_to_dash(self):
        """Test blank contact becomes a dash."""
        member = Member(id=1, name=" Ana ", contact="  ")
        assert member.name == "Ana"
        assert member.contact == "-"

    def test_contact_trimmed(self):
        """Test contact is trimmed."""
        member = Member(id=1, name="Ana", contact=" 555-1234 ")
        assert member.contact == "555-1234"

    def test_blank_name_rejected(self):
        """Test blank name raises ValidationError."""
        with pytest.raises(ValidationError):
            Member(id=1, name="  ")

    def test_is_immutable(self):
        """Test members cannot be changed after creation."""
        member = Member(id=1, name="Ana")
        with pytest.raises(AttributeError):
            member.name = "Other"


class TestLoan:
    """Tests for Loan."""

    def test_open_sets_due_date(self):
        """Test due date is loan date plus grace days."""
        loan = Loan.open(1, game_id=1, member_id=1, loan_date=datetime(2024, 1, 1), grace_days=7)
        assert loan.due_date == datetime(2024, 1, 8)
        assert loan.return_date is None
        assert loan.fine_paid == Decimal("0.00")
        assert loan.is_active
        assert not loan.is_returned

    def test_open_rejects_negative_grace(self):
        """Test negative grace days are rejected."""
        with pytest.raises(ValidationError):
            Loan.open(1, 1, 1, datetime(2024, 1, 1), grace_days=-1)

    def test_days_late_zero_while_active(self):
        """Test an active loan has no late days."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 1))
        assert loan.days_late == 0
        assert loan.compute_fine(Decimal("2.00")) == Decimal("0.00")

    def test_days_late_ignores_time_of_day(self):
        """Test lateness counts calendar days only."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 1, 23, 59), grace_days=7)
        assert loan.days_late_on(datetime(2024, 1, 8, 0, 1)) == 0
        assert loan.days_late_on(datetime(2024, 1, 9, 0, 1)) == 1

    def test_days_late_on_early_return(self):
        """Test returning before the due date is not late."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 1))
        assert loan.days_late_on(datetime(2024, 1, 3)) == 0

    def test_register_return(self):
        """Test registering a late return."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 1))
        loan.register_return(datetime(2024, 1, 10), Decimal("4"))
        assert loan.is_returned
        assert loan.days_late == 2
        assert loan.fine_paid == Decimal("4.00")
        assert loan.compute_fine(Decimal("2.00")) == Decimal("4.00")

    def test_register_return_only_once(self):
        """Test a second return is rejected and changes nothing."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 1))
        loan.register_return(datetime(2024, 1, 5), Decimal("0"))
        with pytest.raises(AlreadyReturnedError):
            loan.register_return(datetime(2024, 1, 20), Decimal("10"))
        assert loan.return_date == datetime(2024, 1, 5)
        assert loan.fine_paid == Decimal("0.00")

    def test_return_before_loan_rejected(self):
        """Test a return dated before the loan is rejected."""
        loan = Loan.open(1, 1, 1, datetime(2024, 1, 5))
        with pytest.raises(ValidationError):
            loan.register_return(datetime(2024, 1, 1), Decimal("0"))

    def test_due_before_loan_rejected(self):
        """Test constructing a loan due before it starts fails."""
        with pytest.raises(ValidationError):
            Loan(
                id=1,
                game_id=1,
                member_id=1,
                loan_date=datetime(2024, 1, 5),
                due_date=datetime(2024, 1, 1),
            )


class TestToMoney:
    """Tests for to_money."""

    def test_rounds_to_cents(self):
        """Test values are rounded to two places."""
        assert to_money("2") == Decimal("2.00")
        assert to_money(Decimal("1.005")) == Decimal("1.01")
        assert to_money(0.1) == Decimal("0.10")
