"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.transaction import ReconciliationResult
from ..utils.exceptions import ReportGenerationError
from .summary import format_timestamp

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        result: ReconciliationResult,
        output_path: Path,
        window_start: date,
        window_end: date,
        system_file: Optional[str] = None,
        bank_files: Sequence[str] = (),
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            result: Reconciliation result
            output_path: Path for output file
            window_start: First day of the reconciled window
            window_end: Last day of the reconciled window
            system_file: Name of the system ledger file
            bank_files: Names of the bank statement files

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be saved
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(
                wb, result, window_start, window_end, system_file, bank_files
            )
        if self.sheet_config.matched.enabled:
            self._create_matched_sheet(wb, result)
        if self.sheet_config.unmatched_system.enabled:
            self._create_unmatched_system_sheet(wb, result)
        if self.sheet_config.unmatched_bank.enabled:
            self._create_unmatched_bank_sheet(wb, result)

        # openpyxl cannot save a workbook without sheets
        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        result: ReconciliationResult,
        window_start: date,
        window_end: date,
        system_file: Optional[str],
        bank_files: Sequence[str],
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Ledger Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "Run Information"
        ws["A3"].font = Font(bold=True)

        run_info = [
            ("System File:", system_file or "-"),
            ("Bank Files:", ", ".join(bank_files) or "-"),
            ("Reconciliation Date:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Window:", f"{window_start} to {window_end}"),
        ]

        row = 4
        for label, value in run_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = str(value)
            row += 1

        row += 1
        ws[f"A{row}"] = "Transaction Counts"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        count_data = [
            ("Total System Transactions:", result.total_system_transactions),
            ("Total Bank Transactions:", result.total_bank_transactions),
            ("Total Processed:", result.total_processed),
            ("Matched:", result.matched_count),
            ("Unmatched System:", len(result.unmatched_system)),
            ("Unmatched Bank:", result.unmatched_bank_count),
            ("Unmatched Total:", result.unmatched_total),
        ]

        for label, value in count_data:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Match Rates"
        ws[f"A{row}"].font = Font(bold=True)
        ws[f"A{row + 1}"] = "System Match Rate:"
        ws[f"B{row + 1}"] = f"{result.match_rate_system:.1f}%"
        ws[f"A{row + 2}"] = "Bank Match Rate:"
        ws[f"B{row + 2}"] = f"{result.match_rate_bank:.1f}%"
        row += 4

        ws[f"A{row}"] = "Total Discrepancy:"
        ws[f"A{row}"].font = Font(bold=True)
        ws[f"B{row}"] = str(result.total_discrepancy)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, result: ReconciliationResult) -> None:
        """Create the matched transactions sheet."""
        ws = wb.create_sheet(self.sheet_config.matched.name)

        headers = [
            "System ID",
            "Transaction Time",
            "Type",
            "System Signed Amount",
            "Bank ID",
            "Bank Date",
            "Bank Signed Amount",
            "Bank",
            "Discrepancy",
        ]
        self._write_headers(ws, headers)

        for row_num, match in enumerate(result.matches, start=2):
            txn = match.system_transaction
            statement = match.bank_statement

            row_data = [
                txn.trx_id,
                format_timestamp(txn.transaction_time),
                txn.type.value,
                str(txn.signed_amount),
                statement.unique_identifier,
                statement.date.isoformat(),
                str(statement.amount),
                statement.bank,
                str(match.discrepancy),
            ]

            fill = MATCH_FILL if match.is_exact_match else VARIANCE_FILL
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = fill

        self._auto_fit_columns(ws)

    def _create_unmatched_system_sheet(
        self, wb: Workbook, result: ReconciliationResult
    ) -> None:
        """Create the unmatched system transactions sheet."""
        ws = wb.create_sheet(self.sheet_config.unmatched_system.name)

        self._write_headers(ws, ["System ID", "Transaction Time", "Type", "Signed Amount"])

        for row_num, txn in enumerate(result.unmatched_system, start=2):
            row_data = [
                txn.trx_id,
                format_timestamp(txn.transaction_time),
                txn.type.value,
                str(txn.signed_amount),
            ]

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _create_unmatched_bank_sheet(
        self, wb: Workbook, result: ReconciliationResult
    ) -> None:
        """Create the unmatched bank statements sheet, grouped by bank."""
        ws = wb.create_sheet(self.sheet_config.unmatched_bank.name)

        self._write_headers(ws, ["Bank", "Bank ID", "Date", "Signed Amount"])

        row_num = 2
        for bank, statements in result.unmatched_bank_by_name.items():
            for statement in statements:
                row_data = [
                    bank,
                    statement.unique_identifier,
                    statement.date.isoformat(),
                    str(statement.amount),
                ]

                for col, value in enumerate(row_data, start=1):
                    cell = ws.cell(row=row_num, column=col, value=value)
                    cell.border = THIN_BORDER
                    cell.fill = UNMATCHED_FILL
                row_num += 1

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
