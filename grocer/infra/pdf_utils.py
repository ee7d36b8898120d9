import io
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

_TIMEFRAME_TITLES = {"all": "All time", "week": "Last 7 days", "month": "Last 30 days", "year": "Last 365 days"}


def _table(data):
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#2B4936")),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (1,1), (-1,-1), "RIGHT"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("BOTTOMPADDING", (0,0), (-1,0), 8),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
    ]))
    return table


def generate_pdf_for_expenses(summary: dict, customer_name: str = "") -> bytes:
    """Render an expense statement: totals per shop, per month, and recent transactions."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, rightMargin=24, leftMargin=24, topMargin=24, bottomMargin=24)
    styles = getSampleStyleSheet()

    period = _TIMEFRAME_TITLES.get(summary.get("timeframe", "all"), summary.get("timeframe", ""))
    title = f"Expense statement - {customer_name}" if customer_name else "Expense statement"
    elements = [
        Paragraph(title, styles["Title"]),
        Paragraph(f"{period} - total spent: {summary.get('totalSpent', 0):.2f}", styles["Heading2"]),
        Spacer(1, 12),
    ]

    shop_rows = [["Shop", "Orders", "Refills", "Total"]]
    for s in summary.get("shopWiseSpending", []):
        shop_rows.append([s["shopName"], s["orders"], s["refills"], f"{s['total']:.2f}"])
    elements += [Paragraph("By shop", styles["Heading3"]), _table(shop_rows), Spacer(1, 12)]

    month_rows = [["Month", "Total"]]
    for m in summary.get("monthlySpending", []):
        month_rows.append([m["label"], f"{m['total']:.2f}"])
    elements += [Paragraph("By month", styles["Heading3"]), _table(month_rows), Spacer(1, 12)]

    recent_rows = [["Date", "Type", "Shop", "Amount"]]
    for t in summary.get("recentTransactions", []):
        recent_rows.append([t["date"][:10], t["type"], t["shopName"], f"{t['amount']:.2f}"])
    elements += [Paragraph("Recent transactions", styles["Heading3"]), _table(recent_rows)]

    doc.build(elements)
    return buf.getvalue()
