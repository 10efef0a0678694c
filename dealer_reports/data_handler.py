import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)

RED_FILL = PatternFill(start_color="FF9999", end_color="FF9999", fill_type="solid")
YELLOW_FILL = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
GREEN_FILL = PatternFill(start_color="00FF00", end_color="00FF00", fill_type="solid")
PEACH_FILL = PatternFill(start_color="FFE5B4", end_color="FFE5B4", fill_type="solid")
HEADER_FONT = Font(bold=True)
MAX_COLUMN_WIDTH = 50


@dataclass
class ReportTable:
    """
    One block of rows in a sheet.
    Cells in a `highlights` column are filled red when the check is true.
    A `fills` rule picks the fill for each cell of its column (None leaves it plain).
    """

    df: pd.DataFrame
    title: Optional[str] = None
    highlights: dict[str, Callable[[Any], bool]] = field(default_factory=dict)
    fills: dict[str, Callable[[Any], Optional[PatternFill]]] = field(default_factory=dict)


@dataclass
class ReportSheet:
    name: str
    tables: list[ReportTable]


@dataclass
class ReportFile:
    filename: str
    sheets: list[ReportSheet]


def records_to_frame(records: list, columns: Optional[list[str]] = None) -> pd.DataFrame:
    """Dumps pydantic records with their header aliases, in `columns` order when given."""
    df = pd.DataFrame([record.model_dump(by_alias=True) for record in records])
    if columns is not None:
        df = df.reindex(columns=columns)
    return df


def _style_table(ws: Worksheet, table: ReportTable, header_row: int) -> None:
    for col_idx in range(1, len(table.df.columns) + 1):
        ws.cell(row=header_row, column=col_idx).font = HEADER_FONT

    for column, check in table.highlights.items():
        if column not in table.df.columns:
            continue
        col_idx = table.df.columns.get_loc(column) + 1
        for offset, value in enumerate(table.df[column], start=1):
            if check(value):
                ws.cell(row=header_row + offset, column=col_idx).fill = RED_FILL

    for column, pick_fill in table.fills.items():
        if column not in table.df.columns:
            continue
        col_idx = table.df.columns.get_loc(column) + 1
        for offset, value in enumerate(table.df[column], start=1):
            fill = pick_fill(value)
            if fill is not None:
                ws.cell(row=header_row + offset, column=col_idx).fill = fill


def autosize_columns(ws: Worksheet) -> None:
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col_idx, width in widths.items():
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, MAX_COLUMN_WIDTH)


def save_report(report: ReportFile, output_dir: Path) -> Path:
    """
    Writes every sheet of the report to one workbook in `output_dir`.
    Tables in a sheet are stacked top to bottom with a blank row between them,
    each under its optional bold title.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / report.filename

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet in report.sheets:
            start_row = 0
            for table in sheet.tables:
                data_row = start_row + 1 if table.title else start_row
                table.df.to_excel(writer, sheet_name=sheet.name, startrow=data_row, index=False)
                ws = writer.sheets[sheet.name]

                if table.title:
                    ws.cell(row=start_row + 1, column=1, value=table.title).font = HEADER_FONT
                _style_table(ws, table, header_row=data_row + 1)
                start_row = data_row + len(table.df) + 2

            autosize_columns(writer.sheets[sheet.name])

    logger.info(f"✅ Report saved to: {path}")
    return path
