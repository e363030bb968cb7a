"""Build upload payloads in memory."""

import csv
import io
import zipfile

from openpyxl import Workbook


def make_xlsx(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Import"
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_csv(rows) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf)
    for row in rows:
        writer.writerow(["" if c is None else c for c in row])
    return buf.getvalue().encode("utf-8")


def replace_part(payload: bytes, member: str, data: bytes) -> bytes:
    """Return a copy of an .xlsx package with one zip member swapped out."""
    src = zipfile.ZipFile(io.BytesIO(payload))
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as out:
        for info in src.infolist():
            out.writestr(info, data if info.filename == member else src.read(info))
    return buf.getvalue()


def read_part(payload: bytes, member: str) -> bytes:
    return zipfile.ZipFile(io.BytesIO(payload)).read(member)


def garbage_workbook_xml() -> bytes:
    payload = make_xlsx([["Name"], ["Ann"]])
    return replace_part(payload, "xl/workbook.xml", b"<not xml")


def truncated_sheet_xml() -> bytes:
    payload = make_xlsx([["Name", "Age"]] + [[f"Person {i}", i] for i in range(50)])
    sheet = read_part(payload, "xl/worksheets/sheet1.xml")
    return replace_part(payload, "xl/worksheets/sheet1.xml", sheet[: len(sheet) // 2])
