"""CSV rendering of commission reports."""
import csv
import io

from app.models.commission_report import CommissionReport
from app.utils.commission_math import format_cents

BREAKDOWN_HEADERS = [
    "Owner ID",
    "Owner Name",
    "Owner Type",
    "Gross Revenue",
    "Commission Amount",
    "Net Revenue",
    "Transaction Count",
]


def render_report_csv(report: CommissionReport, currency: str = "PHP") -> str:
    """
    Render a report as CSV: a summary block, a blank row, then one row per
    owner in breakdown order. Fields are quoted only when they contain a
    delimiter, quote or newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Commission Report", report.report_period.value.upper()])
    writer.writerow(["Report ID", report.id])
    writer.writerow(["Start Date", report.start_date.isoformat()])
    writer.writerow(["End Date", report.end_date.isoformat()])
    writer.writerow(["Currency", currency])
    writer.writerow(["Total Gross Revenue", format_cents(report.total_gross_revenue_cents)])
    writer.writerow(["Total Commission", format_cents(report.total_commission_amount_cents)])
    writer.writerow(["Total Net Revenue", format_cents(report.total_net_revenue_cents)])
    writer.writerow(["Total Transactions", report.transaction_count])
    writer.writerow([])

    writer.writerow(BREAKDOWN_HEADERS)
    for owner in report.owner_breakdown:
        writer.writerow([
            owner.owner_account_id,
            owner.owner_name,
            owner.owner_type.value,
            format_cents(owner.gross_revenue_cents),
            format_cents(owner.commission_amount_cents),
            format_cents(owner.net_revenue_cents),
            owner.transaction_count,
        ])

    return buffer.getvalue()
