# core/reports.py

"""
Weekly SitRep report.

Builds the Monday-to-Sunday situation report from a snapshot and renders it
as an Excel workbook (openpyxl) or a PDF (reportlab).
"""

from datetime import datetime
from decimal import Decimal
from io import BytesIO
import logging

from django.http import HttpResponse
from django.utils import timezone
from django.utils.html import escape

# Excel export
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

# PDF export
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.enums import TA_CENTER

from utils.utils import to_decimal
from finance.utils import (
    calculate_monthly_total, calculate_daily_fixed_overhead, calculate_weekly_profit_and_loss,
    calculate_cash_runway_days, format_runway, get_calendar_week_range, is_within_window
)
from staff.utils import summarize_employee_logs

logger = logging.getLogger(__name__)

WORKING_DAYS_PER_WEEK = Decimal('5')


# =============================================================================
# REPORT DATA
# =============================================================================

def build_weekly_sitrep(snapshot, today=None):
    """
    Situation report for the calendar week (Monday to Sunday) containing `today`.

    Burn is labor plus seven days of fixed overhead. Runway divides cash on
    hand by the burn of one working day (weekly burn / 5).

    Returns:
        dict: {
            'week_start', 'week_end', 'production_cost', 'labor_cost',
            'fixed_overhead', 'total_burn', 'net', 'runway_days',
            'runway_display', 'staff', 'new_active_clients',
            'churned_clients', 'at_risk_clients'
        }
    """
    week_start, week_end = get_calendar_week_range(today)

    monthly_total = calculate_monthly_total(snapshot.financials, snapshot.custom_expenses)
    pnl = calculate_weekly_profit_and_loss(
        snapshot.task_logs,
        snapshot.income_entries,
        snapshot.employees,
        calculate_daily_fixed_overhead(monthly_total),
        week_start,
        week_end
    )

    total_burn = pnl['expenses']
    cash_on_hand = to_decimal(getattr(snapshot.financials, 'cash_on_hand', None))
    runway_days = calculate_cash_runway_days(cash_on_hand, total_burn / WORKING_DAYS_PER_WEEK)

    weekly_logs = [log for log in snapshot.task_logs if is_within_window(log.date, week_start, week_end)]

    new_active_clients = [
        client for client in snapshot.clients
        if client.status == 'active' and is_within_window(client.last_communication, week_start, week_end)
    ]

    return {
        'week_start': week_start,
        'week_end': week_end,
        'production_cost': pnl['production_cost'],
        'labor_cost': pnl['labor_cost'],
        'fixed_overhead': pnl['fixed_overhead'],
        'total_burn': total_burn,
        'net': -pnl['production_cost'],
        'income': pnl['income'],
        'cash_on_hand': cash_on_hand,
        'runway_days': runway_days,
        'runway_display': format_runway(runway_days),
        'staff': [summarize_employee_logs(employee, weekly_logs) for employee in snapshot.employees],
        'new_active_clients': len(new_active_clients),
        'churned_clients': sum(1 for client in snapshot.clients if client.status == 'churned'),
        'at_risk_clients': [
            {'id': str(client.id), 'name': client.name, 'sponsor_name': client.sponsor_name}
            for client in snapshot.clients if client.status == 'risk'
        ],
    }


def _money(value):
    return f"${to_decimal(value):,.2f}"


def _period_label(report):
    start = report['week_start'].strftime('%b %d')
    end = report['week_end'].strftime('%b %d, %Y')
    return f"{start} - {end}"


def _filename(extension):
    return f"weekly_sitrep_{timezone.localtime().strftime('%Y%m%d_%H%M%S')}.{extension}"


def _summary_rows(report):
    return [
        ('Production Cost', _money(report['production_cost'])),
        ('Labor Cost', _money(report['labor_cost'])),
        ('Fixed Overhead', _money(report['fixed_overhead'])),
        ('Total Burn', _money(report['total_burn'])),
        ('Net', _money(report['net'])),
        ('Cash Runway', report['runway_display']),
        ('New Active Clients', report['new_active_clients']),
        ('Churned Clients', report['churned_clients']),
        ('At-Risk Clients', len(report['at_risk_clients'])),
    ]


STAFF_HEADERS = ['#', 'Employee', 'Role', 'Hours', 'Labor Cost', 'Production Cost', 'Efficiency', 'Status']


def _staff_rows(report):
    rows = []
    for idx, summary in enumerate(report['staff'], start=1):
        rows.append([
            idx,
            summary['name'],
            summary['role'],
            float(summary['hours']),
            _money(summary['labor_cost']),
            _money(summary['production_cost']),
            f"{summary['efficiency']:.2f}x",
            'Profitable' if summary['is_profitable'] else 'Loss',
        ])
    return rows


# =============================================================================
# EXCEL EXPORT
# =============================================================================

def export_sitrep_excel(report):
    """Render the SitRep as an .xlsx attachment."""

    wb = Workbook()
    ws = wb.active
    ws.title = "Weekly SitRep"

    # Define styles
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    border_style = Border(
        left=Side(style='thin', color='000000'),
        right=Side(style='thin', color='000000'),
        top=Side(style='thin', color='000000'),
        bottom=Side(style='thin', color='000000')
    )

    # Title row
    ws.merge_cells('A1:H1')
    title_cell = ws['A1']
    title_cell.value = "Weekly SitRep"
    title_cell.font = Font(bold=True, size=16, color="4472C4")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    ws.merge_cells('A2:H2')
    subtitle_cell = ws['A2']
    subtitle_cell.value = f"Period: {_period_label(report)} | Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
    subtitle_cell.font = Font(size=10, italic=True)
    subtitle_cell.alignment = Alignment(horizontal="center")

    ws.append([])

    # Staff table
    ws.append(STAFF_HEADERS)
    header_row = ws[4]
    for cell in header_row:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = border_style

    for row_data in _staff_rows(report):
        ws.append(row_data)
        current_row = ws.max_row
        for cell in ws[current_row]:
            cell.border = border_style
            cell.alignment = Alignment(vertical="center", wrap_text=True)

    column_widths = {'A': 5, 'B': 25, 'C': 20, 'D': 10, 'E': 15, 'F': 18, 'G': 12, 'H': 14}
    for col, width in column_widths.items():
        ws.column_dimensions[col].width = width

    # Summary at bottom
    summary_row = ws.max_row + 2
    for offset, (label, value) in enumerate(_summary_rows(report)):
        ws[f'A{summary_row + offset}'] = label
        ws[f'A{summary_row + offset}'].font = Font(bold=True)
        ws.merge_cells(f'A{summary_row + offset}:B{summary_row + offset}')
        ws[f'C{summary_row + offset}'] = value

    if report['at_risk_clients']:
        risk_row = ws.max_row + 2
        ws[f'A{risk_row}'] = 'At-Risk Clients'
        ws[f'A{risk_row}'].font = Font(bold=True, color="C00000")
        for offset, client in enumerate(report['at_risk_clients'], start=1):
            ws[f'B{risk_row + offset}'] = client['name']
            ws[f'C{risk_row + offset}'] = client['sponsor_name']

    ws.freeze_panes = 'A5'

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{_filename("xlsx")}"'

    wb.save(response)
    return response


# =============================================================================
# PDF EXPORT
# =============================================================================

def export_sitrep_pdf(report):
    """Render the SitRep as a landscape A4 PDF attachment."""

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=18,
    )

    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'SitRepTitle',
        parent=styles['Heading1'],
        fontSize=24,
        textColor=colors.HexColor('#4472C4'),
        spaceAfter=12,
        alignment=TA_CENTER,
    )
    subtitle_style = ParagraphStyle(
        'SitRepSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=20,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph("Weekly SitRep", title_style))
    elements.append(Paragraph(
        f"Period: {_period_label(report)} | Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        subtitle_style
    ))
    elements.append(Spacer(1, 0.2*inch))

    # Financial summary
    summary_table = Table(
        [[label, str(value)] for label, value in _summary_rows(report)],
        colWidths=[2.5*inch, 2*inch]
    )
    summary_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, colors.lightgrey),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 0.3*inch))

    # Staff productivity
    data = [STAFF_HEADERS]
    for row in _staff_rows(report):
        data.append([str(cell)[:30] for cell in row])

    table = Table(data, colWidths=[
        0.4*inch,  # #
        2*inch,    # Employee
        1.6*inch,  # Role
        0.8*inch,  # Hours
        1.2*inch,  # Labor
        1.4*inch,  # Production
        1*inch,    # Efficiency
        1*inch,    # Status
    ])
    table.setStyle(TableStyle([
        # Header
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 10),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),

        # Data rows
        ('BACKGROUND', (0, 1), (-1, -1), colors.white),
        ('TEXTCOLOR', (0, 1), (-1, -1), colors.black),
        ('ALIGN', (0, 1), (0, -1), 'CENTER'),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),

        # Grid
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(table)

    if report['at_risk_clients']:
        elements.append(Spacer(1, 0.3*inch))
        names = '<br/>'.join(
            f"{escape(client['name'])} (sponsor: {escape(client['sponsor_name'] or 'N/A')})"
            for client in report['at_risk_clients']
        )
        elements.append(Paragraph(f"<b>At-Risk Clients:</b><br/>{names}", styles['Normal']))

    doc.build(elements)

    pdf = buffer.getvalue()
    buffer.close()

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{_filename("pdf")}"'
    response.write(pdf)

    return response
