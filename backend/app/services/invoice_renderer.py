"""
Invoice HTML rendering (college letterhead, fee table, payment block).

Pure function of the Invoice row; the invoice service decides where the
document is written.
"""

from datetime import datetime
from html import escape
from typing import Any, Optional

from app.models.invoice import FEE_COMPONENTS


FEE_DESCRIPTIONS = {
    "admissionFee": "Admission Fee",
    "amenitiesFund": "Hostel Amenities &amp; Appliances Fund",
    "blockAdvance": "Block Advance (Refundable)",
    "roomRent": "Room Rent (Annual)",
    "electricityCharges": "Electricity Charges (Annual)",
    "waterCharges": "Water Charges (Annual)",
    "establishmentCharges": "Establishment Charges (Annual)",
    "messAdvance": "Mess Advance (Annual)",
}

_STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; background: #fff; }
        .invoice-container { max-width: 800px; margin: 20px auto; padding: 20px; box-shadow: 0 0 20px rgba(0,0,0,0.1); }
        .header { text-align: center; border-bottom: 3px solid #1e3a8a; padding-bottom: 20px; margin-bottom: 30px; }
        .college-name { font-size: 28px; font-weight: bold; color: #1e3a8a; margin-bottom: 5px; }
        .college-address { font-size: 14px; color: #666; margin-bottom: 5px; }
        .affiliation { font-size: 12px; color: #888; font-style: italic; }
        .invoice-title { text-align: center; font-size: 22px; font-weight: bold; margin-bottom: 20px; }
        .invoice-info { display: flex; justify-content: space-between; margin-bottom: 30px; }
        .info-section h3 { color: #1e3a8a; margin-bottom: 10px; }
        .label { font-weight: bold; }
        .fee-table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
        .fee-table th, .fee-table td { border: 1px solid #ddd; padding: 10px; }
        .fee-table th { background-color: #1e3a8a; color: white; }
        .amount { text-align: right; font-weight: bold; }
        .total-row { background-color: #1e3a8a; color: white; font-weight: bold; }
        .payment-status { text-align: center; margin: 30px 0; padding: 15px; background-color: #10b981;
                          color: white; border-radius: 8px; font-size: 18px; font-weight: bold; }
        .notes { background-color: #f8f9fa; padding: 15px; border-left: 4px solid #1e3a8a; margin: 20px 0; }
        .notes li { margin-left: 20px; margin-bottom: 5px; font-size: 12px; }
        @media print { .invoice-container { box-shadow: none; margin: 0; } }
"""


def format_inr(amount: int) -> str:
    """Indian digit grouping: 46800 -> 46,800 ; 150000 -> 1,50,000"""
    digits = str(int(amount))
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_date(value: Any) -> str:
    """'19 October 2026' for datetimes or ISO strings, '-' when missing"""
    if not value:
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return escape(value)
    return f"{value.day} {value:%B %Y}"


def _text(value: Optional[Any]) -> str:
    return escape(str(value)) if value not in (None, "") else "-"


def render_invoice_html(invoice) -> str:
    college = invoice.college_details or {}
    student = invoice.student_details or {}
    payment = invoice.payment_details or {}
    fees = invoice.fee_details or {}

    fee_rows = "\n".join(
        f"""                <tr>
                    <td>{FEE_DESCRIPTIONS[name]}</td>
                    <td class="amount">{format_inr(fees.get(name, amount))}</td>
                </tr>"""
        for name, amount in FEE_COMPONENTS
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Hostel Fee Invoice - {_text(invoice.invoice_number)}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="invoice-container">
        <div class="header">
            <div class="college-name">{_text(college.get("name"))}</div>
            <div class="college-address">{_text(college.get("address"))}</div>
            <div class="college-address">Phone: {_text(college.get("phone"))} | Email: {_text(college.get("email"))}</div>
            <div class="college-address">Website: {_text(college.get("website"))}</div>
            <div class="affiliation">Affiliated to {_text(college.get("affiliatedTo"))}</div>
        </div>

        <div class="invoice-title">Hostel Fee Invoice</div>

        <div class="invoice-info">
            <div class="info-section">
                <h3>Invoice Details</h3>
                <div><span class="label">Invoice Number:</span> {_text(invoice.invoice_number)}</div>
                <div><span class="label">Invoice Date:</span> {format_date(invoice.invoice_date)}</div>
                <div><span class="label">Academic Year:</span> {_text(invoice.academic_year)}</div>
                <div><span class="label">Payment Date:</span> {format_date(payment.get("paymentDate"))}</div>
            </div>
            <div class="info-section">
                <h3>Student Details</h3>
                <div><span class="label">Name:</span> {_text(student.get("name"))}</div>
                <div><span class="label">Register Number:</span> {_text(student.get("registerNumber"))}</div>
                <div><span class="label">Course:</span> {_text(student.get("course"))}</div>
                <div><span class="label">Year:</span> {_text(student.get("year"))}</div>
                <div><span class="label">Gender:</span> {_text(student.get("gender"))}</div>
                <div><span class="label">Hostel:</span> {_text(student.get("hostelType"))}</div>
            </div>
        </div>

        <table class="fee-table">
            <thead>
                <tr>
                    <th>Fee Description</th>
                    <th>Amount (&#8377;)</th>
                </tr>
            </thead>
            <tbody>
{fee_rows}
                <tr class="total-row">
                    <td><strong>Total Amount</strong></td>
                    <td class="amount"><strong>&#8377; {format_inr(fees.get("totalAmount", 0))}</strong></td>
                </tr>
            </tbody>
        </table>

        <div class="payment-status">PAYMENT COMPLETED SUCCESSFULLY</div>

        <div class="info-section">
            <h3>Payment Information</h3>
            <div><span class="label">Payment ID:</span> {_text(payment.get("paymentId"))}</div>
            <div><span class="label">Transaction ID:</span> {_text(payment.get("transactionId"))}</div>
            <div><span class="label">Payment Method:</span> {_text(payment.get("paymentMethod"))}</div>
            <div><span class="label">Payment Status:</span> {_text(payment.get("paymentStatus"))}</div>
        </div>

        <div class="notes">
            <h4>Important Notes:</h4>
            <ul>
                <li>This is a computer-generated invoice and does not require a physical signature.</li>
                <li>Block advance of &#8377;5,000 is refundable at the end of the academic year.</li>
                <li>Hostel allocation will be confirmed separately by the hostel administration.</li>
                <li>All fees are for the academic year {_text(invoice.academic_year)}.</li>
                <li>For any queries, please contact the hostel office.</li>
            </ul>
        </div>
    </div>
</body>
</html>
"""
