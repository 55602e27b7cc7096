"""DBS transaction code reference table.

Maps the short ``Transaction Code`` column of a DBS/POSB account export to the
description DBS publishes for it. The resolved description, not the short
code, is what ends up on :attr:`lunchprep.models.Transaction.transaction_code`.

The table is read-only; unknown codes resolve to themselves.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

DBS_CODES: Mapping[str, str] = MappingProxyType(
    {
        "ADV": "Advice",
        "AMD": "Amendment",
        "ATM": "ATM Transaction",
        "ATR": "Cash Withdrawal at ATM",
        "AWL": "ATM Withdrawal",
        "BAL": "Balance Brought Forward",
        "BEX": "Bill Payment - Express",
        "BGC": "Bank Giro Credit",
        "BIL": "Bill Payment",
        "BPY": "Bill Payment via Internet Banking",
        "CAS": "Cash Transaction",
        "CCD": "Cash Deposit",
        "CCP": "Credit Card Payment",
        "CHG": "Charges",
        "CHQ": "Cheque",
        "CLR": "Cheque Clearing",
        "COM": "Commission",
        "COR": "Correction",
        "CPF": "CPF Contribution / Withdrawal",
        "CRI": "Credit Interest",
        "CSH": "Cash Withdrawal",
        "CTF": "Cash Transfer",
        "DBI": "Debit Interest",
        "DCR": "Debit Card Refund",
        "DEP": "Deposit",
        "DIV": "Dividend",
        "DSC": "Service Charge",
        "DTM": "Deposit at ATM",
        "EPS": "Electronic Payment for Shopping",
        "FEE": "Fee",
        "FX": "Foreign Exchange",
        "FXT": "Foreign Currency Transfer",
        "GIR": "GIRO Payment / Receipt",
        "GRO": "GIRO Standing Instruction",
        "IBG": "Interbank GIRO",
        "ICT": "FAST or PayNow Payment / Receipt",
        "IDP": "Inward Direct Payment",
        "INT": "Interest Earned",
        "INV": "Investment",
        "IRM": "Inward Remittance",
        "ITR": "Funds Transfer",
        "LNP": "Loan Payment",
        "MAS": "MEPS Payment",
        "MCP": "Mastercard Payment",
        "MST": "Debit Card Transaction",
        "NET": "NETS Transaction",
        "ORM": "Outward Remittance",
        "PAY": "Salary",
        "PMT": "Payment",
        "POS": "Point-of-Sale Transaction or Proceeds",
        "RCP": "Receipt",
        "REF": "Refund",
        "REV": "Reversal",
        "RTN": "Returned Item",
        "SAL": "Salary Credit",
        "SCH": "Service Charge",
        "SGX": "SGX / CDP Transaction",
        "SI": "Standing Instruction",
        "SRS": "Supplementary Retirement Scheme",
        "STO": "Standing Order",
        "TAX": "Tax Payment",
        "TFR": "Transfer",
        "TT": "Telegraphic Transfer",
        "TTR": "Telegraphic Transfer Remittance",
        "UMC": "Debit Card Transaction",
        "UMC-S": "Debit Card Transaction",
        "UPI": "Debit Card Transaction",
        "VCP": "Visa Card Payment",
        "WDL": "Withdrawal",
    }
)


def lookup_transaction_code(code: str) -> str:
    """Return the description for ``code``, or ``code`` itself when unknown."""

    return DBS_CODES.get(code, code)


__all__ = ["DBS_CODES", "lookup_transaction_code"]
