from datetime import date

import pytest

from ledger_recon.matching.engine import ReconciliationEngine, reconcile
from ledger_recon.matching.strategies import MatchBucket, NearestAmountStrategy
from ledger_recon.models.money import Money

from conftest import make_stmt, make_txn


def d(text):
    return date.fromisoformat(text)


def ids(records):
    return [getattr(r, "trx_id", None) or r.unique_identifier for r in records]


def assert_conservation(result):
    """Every in-window record is classified exactly once"""
    assert result.total_processed == (
        result.total_system_transactions + result.total_bank_transactions
    )
    assert result.matched_count + len(result.unmatched_system) == result.total_system_transactions
    assert result.matched_count + result.unmatched_bank_count == result.total_bank_transactions
    assert result.total_discrepancy == sum(
        (m.discrepancy for m in result.matches), Money.zero()
    )
    assert result.total_discrepancy >= Money.zero()


class TestScenarios:
    """End-to-end matching scenarios"""

    def test_basic_match_and_discrepancy(self):
        """Scenario A: two matches with a two-cent discrepancy"""
        system = [
            make_txn("TX1", "100.00", "DEBIT", "2025-08-01T10:00:00Z"),
            make_txn("TX2", "50.00", "CREDIT", "2025-08-01T11:00:00Z"),
        ]
        bank = [
            make_stmt("B1", "-100.00", "2025-08-01"),
            make_stmt("B2", "49.98", "2025-08-01"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matched_count == 2
        assert result.total_discrepancy == Money(2)
        assert str(result.total_discrepancy) == "0.02"
        assert result.unmatched_system == ()
        assert result.unmatched_bank_by_name == {}
        assert result.unmatched_total == 0
        assert_conservation(result)

    def test_unmatched_grouping(self):
        """Scenario B: leftovers grouped by bank name"""
        system = [make_txn("TX1", "100.00", "DEBIT", "2025-08-02T09:00:00Z")]
        bank = [
            make_stmt("B3", "-100.00", "2025-08-02", "Alpha"),
            make_stmt("B4", "75.00", "2025-08-02", "Beta"),
            make_stmt("B5", "-25.00", "2025-08-02", "Alpha"),
        ]

        result = reconcile(system, bank, d("2025-08-02"), d("2025-08-02"))

        assert result.matched_count == 1
        assert result.matches[0].bank_statement.unique_identifier == "B3"
        assert set(result.unmatched_bank_by_name) == {"Alpha", "Beta"}
        assert ids(result.unmatched_bank_by_name["Alpha"]) == ["B5"]
        assert ids(result.unmatched_bank_by_name["Beta"]) == ["B4"]
        assert result.unmatched_total == 2
        assert_conservation(result)

    def test_record_before_window_is_excluded(self):
        """Scenario C: an out-of-window system record cannot match"""
        system = [make_txn("TX0", "10.00", "CREDIT", "2025-07-31T12:00:00Z")]
        bank = [make_stmt("B1", "10.00", "2025-08-01")]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        assert result.total_system_transactions == 0
        assert result.total_bank_transactions == 1
        assert result.matched_count == 0
        assert result.unmatched_system == ()
        assert ids(result.unmatched_bank_by_name["Alpha"]) == ["B1"]
        assert_conservation(result)

    def test_timeframe_and_nearest(self):
        """Test window filtering on both sides with several equal candidates"""
        system = [
            make_txn("TX1", "10.00", "CREDIT", "2025-07-31T23:59:59Z"),
            make_txn("TX2", "10.00", "CREDIT", "2025-08-03T00:00:00Z"),
            make_txn("TX3", "10.00", "CREDIT", "2025-08-03T12:00:00Z"),
        ]
        bank = [
            make_stmt("BA", "10.00", "2025-08-03"),
            make_stmt("BB", "10.00", "2025-08-03"),
            make_stmt("BC", "10.00", "2025-08-04"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        assert result.total_system_transactions == 2
        assert result.total_bank_transactions == 2
        assert result.matched_count == 2
        assert result.unmatched_total == 0
        assert_conservation(result)


class TestSignPartitioning:
    """Debits and credits never match each other"""

    def test_opposite_signs_do_not_match(self):
        system = [make_txn("D", "12.34", "DEBIT", "2025-08-10T10:00:00Z")]
        bank = [make_stmt("Y", "12.34", "2025-08-10")]

        result = reconcile(system, bank, d("2025-08-10"), d("2025-08-10"))

        assert result.matched_count == 0
        assert ids(result.unmatched_system) == ["D"]
        assert ids(result.unmatched_bank_by_name["Alpha"]) == ["Y"]

    def test_credit_does_not_match_negative(self):
        system = [make_txn("C", "12.34", "CREDIT", "2025-08-10T10:00:00Z")]
        bank = [make_stmt("X", "-12.34", "2025-08-10")]

        result = reconcile(system, bank, d("2025-08-10"), d("2025-08-10"))

        assert result.matched_count == 0

    def test_each_sign_finds_its_own_bucket(self):
        system = [
            make_txn("D", "12.34", "DEBIT", "2025-08-10T10:00:00Z"),
            make_txn("C", "12.34", "CREDIT", "2025-08-10T10:00:00Z"),
        ]
        bank = [
            make_stmt("X", "-12.34", "2025-08-10"),
            make_stmt("Y", "12.34", "2025-08-10"),
        ]

        result = reconcile(system, bank, d("2025-08-10"), d("2025-08-10"))

        assert result.matched_count == 2
        assert result.total_discrepancy == Money.zero()
        pairs = {m.system_transaction.trx_id: m.bank_statement.unique_identifier for m in result.matches}
        assert pairs == {"D": "X", "C": "Y"}

    def test_zero_amounts_share_the_positive_bucket(self):
        """Zero debit, zero credit and zero bank rows all count as positive"""
        system = [make_txn("Z", "0.00", "DEBIT", "2025-08-10T10:00:00Z")]
        bank = [make_stmt("P", "0.50", "2025-08-10")]

        result = reconcile(system, bank, d("2025-08-10"), d("2025-08-10"))

        assert result.matched_count == 1
        assert result.total_discrepancy == Money(50)


class TestNearestAmount:
    """Candidate selection inside a bucket"""

    def test_nearest_amount_wins(self):
        system = [make_txn("TX1", "50.00", "CREDIT", "2025-08-01T10:00:00Z")]
        bank = [
            make_stmt("FAR", "20.00", "2025-08-01"),
            make_stmt("NEAR", "50.01", "2025-08-01"),
            make_stmt("MID", "45.00", "2025-08-01"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matches[0].bank_statement.unique_identifier == "NEAR"
        assert result.total_discrepancy == Money(1)
        assert ids(result.unmatched_bank_by_name["Alpha"]) == ["FAR", "MID"]

    def test_tie_goes_to_first_in_bucket(self):
        """Equal distance: the earlier-populated candidate is claimed"""
        system = [make_txn("TX1", "50.00", "CREDIT", "2025-08-01T10:00:00Z")]
        bank = [
            make_stmt("HIGH", "51.00", "2025-08-01"),
            make_stmt("LOW", "49.00", "2025-08-01"),
        ]

        for _ in range(3):
            result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))
            assert result.matches[0].bank_statement.unique_identifier == "HIGH"
            assert result.total_discrepancy == Money(100)

    def test_tie_order_follows_input_not_amount(self):
        system = [make_txn("TX1", "50.00", "CREDIT", "2025-08-01T10:00:00Z")]
        bank = [
            make_stmt("LOW", "49.00", "2025-08-01"),
            make_stmt("HIGH", "51.00", "2025-08-01"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matches[0].bank_statement.unique_identifier == "LOW"

    def test_candidate_claimed_at_most_once(self):
        system = [
            make_txn("TX1", "10.00", "CREDIT", "2025-08-01T09:00:00Z"),
            make_txn("TX2", "10.00", "CREDIT", "2025-08-01T10:00:00Z"),
        ]
        bank = [make_stmt("B1", "10.00", "2025-08-01")]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matched_count == 1
        assert ids(result.unmatched_system) == ["TX2"]
        assert result.unmatched_bank_by_name == {}

    def test_exhausted_bucket_leaves_later_records_unmatched(self):
        system = [
            make_txn("TX1", "10.00", "CREDIT", "2025-08-01T09:00:00Z"),
            make_txn("TX2", "30.00", "CREDIT", "2025-08-01T10:00:00Z"),
            make_txn("TX3", "20.00", "CREDIT", "2025-08-01T11:00:00Z"),
        ]
        bank = [
            make_stmt("B1", "25.00", "2025-08-01"),
            make_stmt("B2", "12.00", "2025-08-01"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        pairs = [(m.system_transaction.trx_id, m.bank_statement.unique_identifier) for m in result.matches]
        assert pairs == [("TX1", "B2"), ("TX2", "B1")]
        assert ids(result.unmatched_system) == ["TX3"]
        # |10.00 - 12.00| + |30.00 - 25.00|
        assert result.total_discrepancy == Money(700)
        assert_conservation(result)


class TestProcessingOrder:
    """System records are processed in ascending timestamp order"""

    def test_earlier_timestamp_claims_first(self):
        system = [
            make_txn("LATE", "10.00", "CREDIT", "2025-08-01T12:00:00Z"),
            make_txn("EARLY", "10.00", "CREDIT", "2025-08-01T09:00:00Z"),
        ]
        bank = [make_stmt("B1", "10.00", "2025-08-01")]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matches[0].system_transaction.trx_id == "EARLY"
        assert ids(result.unmatched_system) == ["LATE"]

    def test_equal_timestamps_keep_input_order(self):
        system = [
            make_txn("FIRST", "10.00", "CREDIT", "2025-08-01T09:00:00Z"),
            make_txn("SECOND", "10.00", "CREDIT", "2025-08-01T09:00:00Z"),
        ]
        bank = [make_stmt("B1", "10.00", "2025-08-01")]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matches[0].system_transaction.trx_id == "FIRST"

    def test_offsets_compare_as_instants(self):
        """09:00-05:00 is later than 10:00Z on the same calendar day"""
        system = [
            make_txn("NY", "10.00", "CREDIT", "2025-08-01T09:00:00-05:00"),
            make_txn("UTC", "10.00", "CREDIT", "2025-08-01T10:00:00Z"),
        ]
        bank = [make_stmt("B1", "10.00", "2025-08-01")]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-01"))

        assert result.matches[0].system_transaction.trx_id == "UTC"


class TestWindow:
    """Inclusive date window filtering"""

    @pytest.fixture
    def records(self):
        system = [
            make_txn("T0", "1.00", "CREDIT", "2025-07-31T12:00:00Z"),
            make_txn("T1", "1.00", "CREDIT", "2025-08-01T00:00:00Z"),
            make_txn("T2", "1.00", "CREDIT", "2025-08-05T23:59:59Z"),
            make_txn("T3", "1.00", "CREDIT", "2025-08-06T00:00:00Z"),
        ]
        bank = [
            make_stmt("B0", "5.00", "2025-07-31"),
            make_stmt("B1", "5.00", "2025-08-01"),
            make_stmt("B2", "5.00", "2025-08-05"),
            make_stmt("B3", "5.00", "2025-08-06"),
        ]
        return system, bank

    def test_bounds_are_inclusive(self, records):
        system, bank = records

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-05"))

        assert result.total_system_transactions == 2
        assert result.total_bank_transactions == 2
        assert sorted(m.system_transaction.trx_id for m in result.matches) == ["T1", "T2"]
        assert sorted(m.bank_statement.unique_identifier for m in result.matches) == ["B1", "B2"]

    def test_inverted_window_is_empty(self, records):
        system, bank = records

        result = reconcile(system, bank, d("2025-08-05"), d("2025-08-01"))

        assert result.total_processed == 0
        assert result.matched_count == 0
        assert result.unmatched_total == 0
        assert result.total_discrepancy == Money.zero()

    def test_system_date_uses_own_offset(self):
        """23:30 at -05:00 is still Aug 1 even though it is Aug 2 in UTC"""
        system = [make_txn("TX1", "10.00", "CREDIT", "2025-08-01T23:30:00-05:00")]
        bank = [
            make_stmt("AUG2", "10.00", "2025-08-02"),
            make_stmt("AUG1", "10.00", "2025-08-01"),
        ]

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-02"))

        assert result.matches[0].bank_statement.unique_identifier == "AUG1"

    def test_empty_inputs(self):
        result = reconcile([], [], d("2025-08-01"), d("2025-08-31"))

        assert result.total_processed == 0
        assert result.unmatched_bank_by_name == {}
        assert str(result.total_discrepancy) == "0.00"


class TestDeterminism:
    """Runs share no state and leave inputs untouched"""

    @pytest.fixture
    def records(self):
        system = [
            make_txn("TX1", "100.00", "DEBIT", "2025-08-02T09:00:00Z"),
            make_txn("TX2", "20.00", "CREDIT", "2025-08-01T09:00:00Z"),
            make_txn("TX3", "7.00", "CREDIT", "2025-08-03T09:00:00Z"),
        ]
        bank = [
            make_stmt("B1", "75.00", "2025-08-02", "Beta"),
            make_stmt("B2", "-99.00", "2025-08-02", "Alpha"),
            make_stmt("B3", "-25.00", "2025-08-02", "Gamma"),
            make_stmt("B4", "19.00", "2025-08-01", "Alpha"),
            make_stmt("B5", "3.00", "2025-08-01", "Beta"),
        ]
        return system, bank

    def test_idempotent(self, records):
        system, bank = records
        engine = ReconciliationEngine()

        first = engine.reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))
        second = engine.reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        assert first == second
        assert list(first.unmatched_bank_by_name) == list(second.unmatched_bank_by_name)

    def test_inputs_not_mutated(self, records):
        system, bank = records
        system_before = list(system)
        bank_before = list(bank)

        reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        assert system == system_before
        assert bank == bank_before

    def test_result_groups_are_read_only(self, records):
        system, bank = records

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        with pytest.raises(TypeError):
            result.unmatched_bank_by_name["Beta"] = ()
        with pytest.raises(TypeError):
            del result.unmatched_bank_by_name["Gamma"]
        assert list(result.unmatched_bank_by_name) == ["Beta", "Gamma"]

    def test_leftover_group_order(self, records):
        """Groups appear in bucket creation order, members in bucket order"""
        system, bank = records

        result = reconcile(system, bank, d("2025-08-01"), d("2025-08-03"))

        assert list(result.unmatched_bank_by_name) == ["Beta", "Gamma"]
        assert ids(result.unmatched_bank_by_name["Beta"]) == ["B1", "B5"]
        assert ids(result.unmatched_bank_by_name["Gamma"]) == ["B3"]
        assert ids(result.unmatched_system) == ["TX3"]
        assert result.total_discrepancy == Money(200)
        assert_conservation(result)


class TestMatchBucket:
    """Claim flags keep bucket indices stable"""

    def test_claim_skips_without_reordering(self):
        bucket = MatchBucket()
        for uid in ["A", "B", "C"]:
            bucket.add(make_stmt(uid, "1.00", "2025-08-01"))

        assert bucket.claim(1).unique_identifier == "B"
        assert len(bucket) == 2
        assert [i for i, _ in bucket.available()] == [0, 2]
        assert ids(bucket.remaining()) == ["A", "C"]

    def test_double_claim_raises(self):
        bucket = MatchBucket()
        bucket.add(make_stmt("A", "1.00", "2025-08-01"))
        bucket.claim(0)

        with pytest.raises(ValueError):
            bucket.claim(0)

    def test_strategy_on_exhausted_bucket(self):
        bucket = MatchBucket()
        bucket.add(make_stmt("A", "1.00", "2025-08-01"))
        bucket.claim(0)

        assert NearestAmountStrategy().select(Money(100), bucket) is None
