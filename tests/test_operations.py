"""Tests for feature operations (pure AppState transformations)."""

import pytest

from shopledger.analytics import net_profit
from shopledger.models import AppState, Debt, DebtStatus, EquityType, Loan, LoanStatus
from shopledger.operations import (
    InsufficientStockError,
    LedgerValidationError,
    RecordNotFoundError,
    add_debt,
    add_equity,
    add_expense,
    add_item,
    add_loan,
    delete_debt,
    delete_equity,
    delete_expense,
    delete_loan,
    delete_sale,
    edit_item,
    record_debt_payment,
    record_loan_payment,
    record_sale,
    remove_item,
)


class TestInventoryOperations:
    """Tests for adding, editing and removing items."""

    def test_add_item_appends(self, stocked_state):
        state = add_item(stocked_state, "Scarf", 200, 350, stock=4)
        assert [i.name for i in state.inventory] == ["Dress", "Scarf"]
        assert state.inventory[1].category == "General"

    def test_add_item_does_not_touch_input(self, stocked_state):
        add_item(stocked_state, "Scarf", 200, 350)
        assert len(stocked_state.inventory) == 1

    def test_add_item_collects_all_issues(self):
        """Test every bad field is reported at once."""
        with pytest.raises(LedgerValidationError) as exc_info:
            add_item(AppState(), "", 0, -5)
        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {"name", "buying_price", "selling_price"}

    def test_add_item_keeps_given_sku(self):
        state = add_item(AppState(), "Scarf", 200, 350, sku="SCF-9")
        assert state.inventory[0].sku == "SCF-9"

    def test_edit_item(self, stocked_state):
        state = edit_item(stocked_state, "item-dress", selling_price=1800, stock=12)
        item = state.find_item("item-dress")
        assert item.selling_price == 1800
        assert item.stock == 12
        assert item.name == "Dress"

    def test_edit_rejects_negative_stock(self, stocked_state):
        with pytest.raises(LedgerValidationError):
            edit_item(stocked_state, "item-dress", stock=-1)

    def test_edit_rejects_id_change(self, stocked_state):
        with pytest.raises(LedgerValidationError):
            edit_item(stocked_state, "item-dress", id="other")

    def test_edit_unknown_item(self, stocked_state):
        with pytest.raises(RecordNotFoundError):
            edit_item(stocked_state, "missing", stock=1)

    def test_remove_item_keeps_its_sales(self, stocked_state):
        """Test removing an item does not cascade to sales."""
        sold = record_sale(stocked_state, "item-dress", quantity=1)
        state = remove_item(sold, "item-dress")
        assert state.inventory == []
        assert state.sales[0].item_name == "Dress"


class TestSaleOperations:
    """Tests for recording sales."""

    def test_sale_updates_stock_and_history(self, stocked_state):
        """Test the Dress example: 2 sold at 1500 with cost 1000."""
        state = record_sale(stocked_state, "item-dress", quantity=2)

        assert state.find_item("item-dress").stock == 8
        sale = state.sales[0]
        assert sale.item_name == "Dress"
        assert sale.quantity == 2
        assert sale.total_price == 3000
        assert sale.profit == 1000
        assert net_profit(state) == 1000

    def test_sale_can_empty_stock(self, stocked_state):
        state = record_sale(stocked_state, "item-dress", quantity=10)
        assert state.find_item("item-dress").stock == 0

    def test_sale_rejects_more_than_stock(self, stocked_state):
        with pytest.raises(InsufficientStockError) as exc_info:
            record_sale(stocked_state, "item-dress", quantity=11)
        assert exc_info.value.available == 10
        assert exc_info.value.issues[0].issue_type == "insufficient_stock"

    def test_sale_rejects_zero_quantity(self, stocked_state):
        with pytest.raises(LedgerValidationError):
            record_sale(stocked_state, "item-dress", quantity=0)

    def test_sale_unknown_item(self, stocked_state):
        with pytest.raises(RecordNotFoundError):
            record_sale(stocked_state, "missing", quantity=1)

    def test_custom_price_below_cost(self, stocked_state):
        """Test a discounted sale records a loss."""
        state = record_sale(stocked_state, "item-dress", quantity=1, unit_price=900)
        assert state.sales[0].total_price == 900
        assert state.sales[0].profit == -100

    def test_sale_snapshot_survives_item_edit(self, stocked_state):
        state = record_sale(stocked_state, "item-dress", quantity=1)
        state = edit_item(state, "item-dress", name="Evening Dress", selling_price=5000)
        assert state.sales[0].item_name == "Dress"
        assert state.sales[0].total_price == 1500

    def test_sales_are_newest_first(self, stocked_state):
        state = record_sale(stocked_state, "item-dress", quantity=1, date="2024-05-01T10:00:00.000Z")
        state = record_sale(state, "item-dress", quantity=2, date="2024-05-02T10:00:00.000Z")
        assert [s.quantity for s in state.sales] == [2, 1]

    def test_delete_sale_does_not_restock(self, stocked_state):
        state = record_sale(stocked_state, "item-dress", quantity=2)
        state = delete_sale(state, state.sales[0].id)
        assert state.sales == []
        assert state.find_item("item-dress").stock == 8


class TestExpenseOperations:
    """Tests for expenses."""

    def test_add_and_delete_expense(self):
        state = add_expense(AppState(), "Rent", 500, category="Premises")
        assert state.expenses[0].category == "Premises"
        state = delete_expense(state, state.expenses[0].id)
        assert state.expenses == []

    def test_expense_requires_positive_amount(self):
        with pytest.raises(LedgerValidationError):
            add_expense(AppState(), "Rent", 0)

    def test_expense_requires_description(self):
        with pytest.raises(LedgerValidationError):
            add_expense(AppState(), "   ", 100)

    def test_delete_unknown_expense(self):
        with pytest.raises(RecordNotFoundError):
            delete_expense(AppState(), "missing")


class TestDebtOperations:
    """Tests for money owed to the shop."""

    @pytest.fixture
    def with_debt(self):
        return AppState(debts=[Debt(id="d1", creditor="Amina", amount=100, paid_amount=80)])

    def test_add_debt_starts_pending(self):
        state = add_debt(AppState(), "Amina", 100, due_date="2024-06-01")
        debt = state.debts[0]
        assert debt.status == DebtStatus.PENDING
        assert debt.paid_amount == 0
        assert debt.due_date == "2024-06-01"

    def test_overpayment_is_clamped(self, with_debt):
        """Test 80 paid + 30 more settles at exactly 100."""
        state = record_debt_payment(with_debt, "d1", 30)
        assert state.debts[0].paid_amount == 100
        assert state.debts[0].status == DebtStatus.PAID

    def test_partial_payment_stays_pending(self, with_debt):
        state = record_debt_payment(with_debt, "d1", 10)
        assert state.debts[0].paid_amount == 90
        assert state.debts[0].status == DebtStatus.PENDING

    def test_exact_payment_settles(self, with_debt):
        state = record_debt_payment(with_debt, "d1", 20)
        assert state.debts[0].is_settled is True

    def test_payment_must_be_positive(self, with_debt):
        with pytest.raises(LedgerValidationError):
            record_debt_payment(with_debt, "d1", 0)

    def test_payment_unknown_debt(self, with_debt):
        with pytest.raises(RecordNotFoundError):
            record_debt_payment(with_debt, "missing", 10)

    def test_delete_debt(self, with_debt):
        assert delete_debt(with_debt, "d1").debts == []


class TestLoanOperations:
    """Tests for money owed by the shop."""

    def test_add_loan(self):
        state = add_loan(AppState(), "Bank", 5000, interest_rate=12, term_months=6)
        loan = state.loans[0]
        assert loan.status == LoanStatus.ACTIVE
        assert loan.term_months == 6

    def test_repayment_clears_loan(self):
        state = AppState(loans=[Loan(id="l1", source="Bank", principal=1000)])
        state = record_loan_payment(state, "l1", 600)
        assert state.loans[0].status == LoanStatus.ACTIVE
        state = record_loan_payment(state, "l1", 600)
        assert state.loans[0].paid_amount == 1000
        assert state.loans[0].status == LoanStatus.CLEARED

    def test_loan_validation(self):
        with pytest.raises(LedgerValidationError) as exc_info:
            add_loan(AppState(), "", -1, term_months=0)
        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {"source", "principal", "term_months"}

    def test_delete_unknown_loan(self):
        with pytest.raises(RecordNotFoundError):
            delete_loan(AppState(), "missing")


class TestEquityOperations:
    """Tests for owner investments and drawals."""

    def test_add_drawal(self):
        state = add_equity(AppState(), "Owner", 2000, entry_type="drawal")
        assert state.equity[0].type == EquityType.DRAWAL

    def test_unknown_equity_type(self):
        with pytest.raises(LedgerValidationError):
            add_equity(AppState(), "Owner", 2000, entry_type="gift")

    def test_delete_equity(self):
        state = add_equity(AppState(), "Owner", 2000)
        assert delete_equity(state, state.equity[0].id).equity == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
