"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any
import logging

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.transaction import (
    CategorizedTransaction,
    MatchedPair,
    ReconciliationResult,
    ReconciliationSummary,
)
from ..utils.exceptions import ReportGenerationError

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
    """Generates Excel reconciliation reports with one sheet per result section."""

    def __init__(self, config: ReconConfig):
        self.config = config
        self.sheet_config = config.output.sheets
        self.high_confidence = config.inference.high_confidence_threshold

    def generate_report(self, result: ReconciliationResult, output_path: Path) -> Path:
        """
        Write the reconciliation result to an .xlsx workbook.

        Args:
            result: Output of a reconciliation run
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, result.summary)
        if self.sheet_config.matched.enabled:
            self._create_matched_sheet(wb, result.match_result.pairs)
        if self.sheet_config.missing.enabled:
            self._create_missing_sheet(wb, result.categorized)
        if self.sheet_config.audit_trail.enabled:
            self._create_audit_trail_sheet(wb, result)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, summary: ReconciliationSummary) -> None:
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Bank to Ledger Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        rows: list[tuple[str, Any]] = [
            ("Account:", summary.account_id or "All accounts"),
            ("Reconciliation Date:", summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S")),
            ("Period:", f"{summary.period_start} to {summary.period_end}"),
            ("Strategy:", summary.strategy.value),
            ("Tolerance (Days):", summary.tolerance_days),
            ("", ""),
            ("Total Bank Transactions:", summary.total_bank_transactions),
            ("Total Ledger Transactions:", summary.total_ledger_transactions),
            ("Matched:", summary.matched_count),
            ("Missing From Ledger:", summary.missing_from_ledger_count),
            ("Categorized:", summary.categorized_count),
            ("Reconciled:", f"{summary.reconciliation_percentage:.1f}%"),
        ]
        for i, (label, value) in enumerate(rows, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value
            if label:
                ws[f"A{i}"].font = Font(bold=True)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _write_headers(self, ws: Worksheet, headers: list[str], row: int = 1) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER
            cell.alignment = Alignment(horizontal="center")

    def _create_matched_sheet(self, wb: Workbook, pairs: tuple[MatchedPair, ...]) -> None:
        ws = wb.create_sheet(self.sheet_config.matched.name)
        self._write_headers(
            ws,
            [
                "Bank ID",
                "Account",
                "Bank Date",
                "Amount",
                "Bank Description",
                "Ledger ID",
                "Ledger Date",
                "Ledger Payee",
                "Ledger Category",
                "Date Variance (Days)",
            ],
        )

        for row_num, pair in enumerate(pairs, start=2):
            bank_txn = pair.bank_transaction
            ledger_txn = pair.ledger_transaction
            row_data = [
                bank_txn.id,
                bank_txn.account_id,
                bank_txn.date,
                float(bank_txn.amount),
                bank_txn.description,
                ledger_txn.id,
                ledger_txn.date,
                ledger_txn.display_name,
                ledger_txn.category.name,
                pair.date_variance_days,
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = MATCH_FILL if pair.is_exact_date else VARIANCE_FILL

        self._auto_fit_columns(ws)

    def _create_missing_sheet(
        self, wb: Workbook, categorized: tuple[CategorizedTransaction, ...]
    ) -> None:
        ws = wb.create_sheet(self.sheet_config.missing.name)
        self._write_headers(
            ws,
            [
                "Bank ID",
                "Account",
                "Date",
                "Amount",
                "Description",
                "Merchant",
                "Memo",
                "Inferred Category",
                "Confidence",
                "Reasoning",
            ],
        )

        for row_num, item in enumerate(categorized, start=2):
            txn = item.transaction
            inference = item.inference
            row_data = [
                txn.id,
                txn.account_id,
                txn.date,
                float(txn.amount),
                txn.description,
                txn.merchant_name or "",
                txn.memo or "",
                inference.category.name,
                f"{inference.confidence:.2f}",
                inference.reasoning,
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if inference.is_high_confidence(self.high_confidence):
                    cell.fill = VARIANCE_FILL
                else:
                    cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _create_audit_trail_sheet(self, wb: Workbook, result: ReconciliationResult) -> None:
        ws = wb.create_sheet(self.sheet_config.audit_trail.name)
        summary = result.summary

        ws["A1"] = "Reconciliation Audit Trail"
        ws["A1"].font = Font(size=14, bold=True)

        audit_info = [
            ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File:", summary.config_file_used or "Default"),
            ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
        ]
        row = 3
        for label, value in audit_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Decision Log"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1
        self._write_headers(ws, ["Bank ID", "Outcome", "Ledger ID / Category", "Detail"], row)
        row += 1

        for pair in result.match_result.pairs:
            log_data = [
                pair.bank_transaction.id,
                "matched",
                pair.ledger_transaction.id,
                f"{pair.date_variance_days} day(s) apart",
            ]
            for col, value in enumerate(log_data, start=1):
                ws.cell(row=row, column=col, value=value)
            row += 1

        for item in result.categorized:
            log_data = [
                item.transaction.id,
                "missing",
                item.inference.category.name,
                item.inference.reasoning,
            ]
            for col, value in enumerate(log_data, start=1):
                ws.cell(row=row, column=col, value=value)
            row += 1

        self._auto_fit_columns(ws)

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
