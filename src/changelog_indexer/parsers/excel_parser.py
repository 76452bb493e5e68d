"""
Excel parser using pandas
"""
import io

import pandas as pd

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions


class ExcelParser(BaseParser):
    """Parser for Excel workbooks using pandas"""

    kind = ContentKind.SPREADSHEET

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        """
        Render every sheet as CSV

        Args:
            file_content: Excel file bytes
            options: Unused

        Returns:
            str: One CSV block per sheet, each under a sheet header
        """
        excel_file = pd.ExcelFile(io.BytesIO(file_content))

        all_content = []
        total_rows = 0

        for sheet_name in excel_file.sheet_names:
            # header=None keeps the first row as data
            df = pd.read_excel(excel_file, sheet_name=sheet_name, header=None)
            sheet_csv = df.to_csv(index=False, header=False).strip()
            all_content.append(f"--- Sheet: {sheet_name} ---\n{sheet_csv}")
            total_rows += len(df)

        content = "\n\n".join(all_content)

        self.logger.info(
            f"Extracted Excel text ({len(excel_file.sheet_names)} sheets, {total_rows} rows)"
        )
        return content
