import textwrap
from datetime import date, datetime

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.models.money import Money
from ledger_recon.models.transaction import (
    BankStatement,
    SystemTransaction,
    TransactionType,
)


def make_txn(trx_id, amount, txn_type, timestamp):
    """Build a SystemTransaction from plain strings, e.g. ("TX1", "100.00", "DEBIT", "2025-08-01T10:00:00Z")."""
    return SystemTransaction(
        trx_id=trx_id,
        amount=Money.parse(amount),
        type=TransactionType(txn_type),
        transaction_time=datetime.fromisoformat(timestamp.replace("Z", "+00:00")),
    )


def make_stmt(uid, amount, day, bank="Alpha"):
    """Build a BankStatement from plain strings, e.g. ("B1", "-100.00", "2025-08-01")."""
    return BankStatement(
        unique_identifier=uid,
        amount=Money.parse(amount),
        date=date.fromisoformat(day),
        bank=bank,
    )


@pytest.fixture
def config():
    """Default configuration"""
    return ReconConfig()


@pytest.fixture
def write_csv(tmp_path):
    """Write dedented CSV text to a file under tmp_path and return its path"""
    def _write(name, content):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def system_csv(write_csv):
    """System ledger covering two days"""
    return write_csv(
        "system.csv",
        """
        trxID,amount,type,transactionTime
        TX1,100.00,DEBIT,2025-08-01T10:00:00Z
        TX2,50.00,CREDIT,2025-08-01T11:00:00Z
        TX3,100.00,DEBIT,2025-08-02T09:00:00Z
        """,
    )


@pytest.fixture
def alpha_csv(write_csv):
    """Bank file with its own bank column"""
    return write_csv(
        "alpha.csv",
        """
        unique_identifier,amount,date,bank
        B1,-100.00,2025-08-01,Alpha
        B2,49.98,2025-08-01,Alpha
        B3,-100.00,2025-08-02,Alpha
        B5,-25.00,2025-08-02,Alpha
        """,
    )


@pytest.fixture
def beta_csv(write_csv):
    """Bank file without a bank column; rows are named after the file"""
    return write_csv(
        "Beta.csv",
        """
        unique_identifier,amount,date
        B4,75.00,2025-08-02
        """,
    )
