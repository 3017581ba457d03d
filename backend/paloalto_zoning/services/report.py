"""
PDF report generator for planning and validation workflows.
Uses ReportLab; one report per terminal workflow record.

Planning report sections:
  1. Cover (address, zone, lot size, workflow status)
  2. Phase results (tasks per phase, constraints)
  3. Design parameters (height, FAR, setbacks, parking, coverage)
  4. Next steps
  5. Disclaimers

Validation report sections:
  1. Cover (address, zone, overall status)
  2. Violation summary and per-phase status
  3. Phase results (checks per phase)
  4. Violations by severity
  5. Next steps & estimated resolution
  6. Disclaimers
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from paloalto_zoning.config import settings
from paloalto_zoning.models.schemas import (
    PlanningWorkflow,
    ValidationPhaseResult,
    ValidationWorkflow,
    Violation,
)

logger = logging.getLogger(__name__)

BLUE = colors.HexColor('#1C3D5A')
DARK = colors.HexColor('#2D2D2D')
GREY = colors.HexColor('#7A7A7A')
LIGHT_BG = colors.HexColor('#F7F6F3')
GRID_COLOR = colors.HexColor('#DCDAD5')
WHITE = colors.white

RESULT_COLORS = {
    "PASS": colors.HexColor('#2E7D32'),
    "FAIL": colors.HexColor('#B23B3B'),
    "WARNING": colors.HexColor('#B8860B'),
    "INFO": GREY,
    "N/A": GREY,
}

PAGE_W, PAGE_H = letter
MARGIN = 0.85 * inch
CONTENT_W = PAGE_W - 2 * MARGIN

DISCLAIMERS = [
    "This report is a preliminary zoning screen, not a permit determination.",
    "All values should be verified by a licensed architect against the current "
    "Palo Alto Municipal Code.",
    "Daylight plane and environmental encroachment results rely on values "
    "declared in the design submission; no geometry was analyzed.",
    "Historic review, variances and discretionary approvals are outside the "
    "scope of this report.",
]


# ──────────────────────────────────────────────────────────────────
# PAGE DECORATION
# ──────────────────────────────────────────────────────────────────

def _header_footer(canvas, doc):
    canvas.saveState()
    canvas.setFillColor(DARK)
    canvas.setFont('Helvetica', 8.5)
    canvas.drawString(doc.leftMargin, PAGE_H - 40, settings.app_name.upper())
    canvas.setStrokeColor(GRID_COLOR)
    canvas.setLineWidth(0.5)
    canvas.line(doc.leftMargin, PAGE_H - 52, PAGE_W - doc.rightMargin, PAGE_H - 52)

    canvas.setLineWidth(0.25)
    canvas.line(doc.leftMargin, 40, PAGE_W - doc.rightMargin, 40)
    canvas.setFillColor(colors.HexColor('#AAAAAA'))
    canvas.setFont('Helvetica', 7)
    canvas.drawString(doc.leftMargin, 28, datetime.now().strftime('%B %d, %Y'))
    canvas.drawRightString(PAGE_W - doc.rightMargin, 28, f"{doc.page}")
    canvas.restoreState()


# ──────────────────────────────────────────────────────────────────
# STYLES & TABLES
# ──────────────────────────────────────────────────────────────────

def _get_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ReportTitle', fontSize=26, fontName='Helvetica-Bold',
        spaceAfter=6, textColor=DARK, alignment=TA_CENTER, leading=32,
    ))
    styles.add(ParagraphStyle(
        name='Subtitle', fontSize=11, fontName='Helvetica',
        alignment=TA_CENTER, textColor=GREY, leading=14,
    ))
    styles.add(ParagraphStyle(
        name='SectionHeader', fontSize=16, fontName='Helvetica-Bold',
        textColor=DARK, leading=22,
    ))
    styles.add(ParagraphStyle(
        name='SubSection', fontSize=11, fontName='Helvetica-Bold',
        spaceAfter=5, spaceBefore=10, textColor=DARK,
    ))
    styles.add(ParagraphStyle(
        name='Body', fontSize=10, fontName='Helvetica',
        spaceAfter=5, leading=14, textColor=DARK,
    ))
    styles.add(ParagraphStyle(
        name='Cell', fontSize=8.5, fontName='Helvetica', leading=11, textColor=DARK,
    ))
    styles.add(ParagraphStyle(
        name='StatusBadge', fontSize=20, fontName='Helvetica-Bold',
        textColor=BLUE, alignment=TA_CENTER, leading=26, spaceBefore=12,
    ))
    styles.add(ParagraphStyle(
        name='Disclaimer', fontSize=7.5, fontName='Helvetica',
        textColor=colors.HexColor('#999999'), alignment=TA_CENTER, leading=10,
    ))
    return styles


def _section_header(text, styles):
    """Section title with a thin blue rule beneath."""
    t = Table([[Paragraph(escape(text), styles['SectionHeader'])]], colWidths=[CONTENT_W])
    t.setStyle(TableStyle([
        ('TOPPADDING', (0, 0), (-1, -1), 10),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ('LINEBELOW', (0, 0), (-1, -1), 1, BLUE),
    ]))
    return t


def _make_kv_table(data: list[list[str]], col_widths=None) -> Table:
    """Key-value table with alternating row shading."""
    if col_widths is None:
        col_widths = [2.4 * inch, CONTENT_W - 2.4 * inch]
    t = Table(data, colWidths=col_widths)
    style_cmds = [
        ('FONTSIZE', (0, 0), (-1, -1), 9.5),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, 0), (0, -1), DARK),
        ('TEXTCOLOR', (1, 0), (-1, -1), colors.HexColor('#444444')),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('LEFTPADDING', (0, 0), (-1, -1), 6),
        ('RIGHTPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, GRID_COLOR),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]
    for i in range(len(data)):
        if i % 2 == 1:
            style_cmds.append(('BACKGROUND', (0, i), (-1, i), LIGHT_BG))
    t.setStyle(TableStyle(style_cmds))
    return t


def _make_data_table(data: list[list], col_widths=None, result_col: Optional[int] = None) -> Table:
    """Header-row table. *result_col* colours PASS/FAIL/... cells."""
    if col_widths is None:
        ncols = len(data[0]) if data else 1
        col_widths = [CONTENT_W / ncols] * ncols
    t = Table(data, colWidths=col_widths, repeatRows=1)
    style_cmds = [
        ('FONTSIZE', (0, 0), (-1, -1), 8.5),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BACKGROUND', (0, 0), (-1, 0), BLUE),
        ('TEXTCOLOR', (0, 0), (-1, 0), WHITE),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('LEFTPADDING', (0, 0), (-1, -1), 6),
        ('RIGHTPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, 1), (-1, -1), 0.25, GRID_COLOR),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]
    for i in range(1, len(data)):
        if i % 2 == 0:
            style_cmds.append(('BACKGROUND', (0, i), (-1, i), LIGHT_BG))
        if result_col is not None:
            color = RESULT_COLORS.get(str(data[i][result_col]))
            if color is not None:
                style_cmds.append(('TEXTCOLOR', (result_col, i), (result_col, i), color))
                style_cmds.append(('FONTNAME', (result_col, i), (result_col, i), 'Helvetica-Bold'))
    t.setStyle(TableStyle(style_cmds))
    return t


def _cell(text, styles) -> Paragraph:
    return Paragraph(escape(str(text or "")), styles['Cell'])


def _bullets(story, items: list[str], styles):
    for item in items:
        story.append(Paragraph(f"• {escape(item)}", styles['Body']))


def _sf(value: float) -> str:
    return f"{value:,.0f} sq ft"


def _ft(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:g} ft"


# ──────────────────────────────────────────────────────────────────
# SHARED SECTIONS
# ──────────────────────────────────────────────────────────────────

def _build_cover(story, styles, title, site, status_label, report_id):
    story.append(Spacer(1, 1.2 * inch))
    story.append(Paragraph(escape(title), styles['ReportTitle']))
    story.append(Paragraph(escape(site.address), styles['Subtitle']))
    story.append(Spacer(1, 18))
    story.append(Paragraph(escape(status_label), styles['StatusBadge']))
    story.append(Spacer(1, 24))

    rows = [
        ["Address", site.address],
        ["Zone District", site.zone],
        ["Lot Size", _sf(site.lot_size)],
        ["Lot Type", site.lot_type.value.title()],
        ["Corner Lot", "Yes" if site.is_corner_lot else "No"],
    ]
    if site.apn:
        rows.insert(1, ["APN", site.apn])
    if site.historic_category:
        rows.append(["Historic Category", site.historic_category])
    if site.creek_areas or site.easements:
        rows.append(["Creek Areas / Easements",
                     f"{_sf(site.creek_areas)} / {_sf(site.easements)}"])
    rows.append(["Report ID", report_id])
    story.append(_make_kv_table(rows))


def _build_disclaimers(story, styles, report_id):
    story.append(Spacer(1, 20))
    story.append(HRFlowable(width="100%", thickness=0.5, color=GREY))
    story.append(_section_header("Disclaimers & Limitations", styles))
    story.append(Spacer(1, 4))
    _bullets(story, DISCLAIMERS, styles)
    story.append(Spacer(1, 10))
    story.append(Paragraph(
        f"Report generated: {datetime.now().strftime('%B %d, %Y %H:%M')}. "
        f"Report ID: {report_id}.",
        styles['Disclaimer'],
    ))


# ──────────────────────────────────────────────────────────────────
# PLANNING
# ──────────────────────────────────────────────────────────────────

def _build_planning_phases(story, styles, workflow: PlanningWorkflow):
    story.append(_section_header("Planning Phases", styles))
    for key, phase in workflow.phases:
        if phase is None:
            continue
        story.append(Paragraph(
            escape(f"Phase {phase.phase}: {phase.phase_name} ({phase.status.value})"),
            styles['SubSection'],
        ))
        rows = [["Task", "Status", "Notes"]]
        for task in phase.tasks:
            notes = task.message or "; ".join(task.recommendations)
            rows.append([_cell(task.name, styles), task.status.value, _cell(notes, styles)])
        story.append(_make_data_table(
            rows, col_widths=[2.0 * inch, 0.9 * inch, CONTENT_W - 2.9 * inch],
        ))
        for constraint in phase.constraints:
            story.append(Paragraph(
                escape(f"Constraint: {constraint.description} ({constraint.impact})"),
                styles['Body'],
            ))
        for rec in phase.recommendations:
            text = rec.message + (f" {rec.action}" if rec.action else "")
            story.append(Paragraph(escape(f"[{rec.type.value}] {text}"), styles['Body']))


def _build_design_parameters(story, styles, workflow: PlanningWorkflow):
    report = workflow.final_report
    if report is None:
        return
    story.append(PageBreak())
    story.append(_section_header("Design Parameters", styles))

    design = report.design_parameters
    if design is not None:
        far = design.far_breakdown
        story.append(_make_kv_table([
            ["Maximum Height", _ft(design.max_height)],
            ["Maximum Floor Area", _sf(design.max_floor_area)],
            ["FAR: first 5,000 sq ft @ 45%", _sf(far.first_5000_allowance)],
            ["FAR: excess @ 30%", _sf(far.excess_allowance)],
            ["Front Setback", _ft(design.setbacks.front)],
            ["Interior Side Setback", _ft(design.setbacks.interior_side)],
            ["Street Side Setback", _ft(design.setbacks.street_side)],
            ["Rear Setback", _ft(design.setbacks.rear)],
            ["Daylight Plane", f"{design.building_envelope.daylight_plane.angle:g} degrees "
                               f"from {design.building_envelope.daylight_plane.measurement_height:g} ft"],
        ]))

    parking = report.parking_parameters
    if parking is not None:
        story.append(Paragraph("Parking & Access", styles['SubSection']))
        story.append(_make_kv_table([
            ["Required Spaces", f"{parking.required.total_required} "
                                f"({parking.required.covered_required} covered)"],
            ["Driveway Width", f"{parking.driveway.min_surface_width:g} ft surface, "
                               f"{parking.driveway.min_clearance_width:g} ft clearance"],
            ["Approved Materials", ", ".join(parking.driveway.approved_materials)],
            ["Garage Front Setback", _ft(parking.garage.front_setback)],
            ["Garage Street Side Setback", _ft(parking.garage.street_side_setback)],
            ["Backing Distance", _ft(parking.access.min_backing_distance)],
        ]))

    features = report.feature_parameters
    if features is not None:
        story.append(Paragraph("Special Features & Coverage", styles['SubSection']))
        second_unit = (
            f"Feasible, up to {features.second_unit.max_size:g} sq ft "
            f"({features.second_unit.max_size_percent:g}% of main house)"
            if features.second_unit else "Not feasible on this lot"
        )
        story.append(_make_kv_table([
            ["Second Dwelling Unit", second_unit],
            ["Accessory Structures", f"{features.accessory_structures.max_height:g} ft max height, "
                                     f"{features.accessory_structures.min_setbacks:g} ft setbacks"],
            ["Pool / Spa", f"{features.pool_spa.min_setbacks:g} ft setbacks, barriers required"],
            ["Maximum Lot Coverage", _sf(features.coverage.total_max_coverage)],
        ]))

    story.append(Paragraph("Next Steps", styles['SubSection']))
    _bullets(story, report.next_steps, styles)
    story.append(Paragraph(
        escape(f"Estimated timeline: {report.estimated_timeline}"), styles['Body'],
    ))


def _planning_story(workflow: PlanningWorkflow, report_id: str) -> list:
    styles = _get_styles()
    story = []
    status = workflow.overall_status.upper()
    if workflow.stop_reason:
        status = f"{status}: {workflow.stop_reason}"
    _build_cover(story, styles, "R-1 Planning Report", workflow.site_data, status, report_id)
    if workflow.final_report is not None:
        story.append(Spacer(1, 12))
        story.append(Paragraph(
            escape(f"Compliance status: {workflow.final_report.compliance_status}"),
            styles['Body'],
        ))
    story.append(PageBreak())
    _build_planning_phases(story, styles, workflow)
    _build_design_parameters(story, styles, workflow)
    _build_disclaimers(story, styles, report_id)
    return story


# ──────────────────────────────────────────────────────────────────
# VALIDATION
# ──────────────────────────────────────────────────────────────────

def _build_validation_summary(story, styles, workflow: ValidationWorkflow):
    report = workflow.final_report
    if report is None:
        return
    story.append(Spacer(1, 12))
    summary = report.violation_summary
    story.append(_make_data_table(
        [["Total", "Critical", "Major", "Design", "Process"],
         [summary.total, summary.critical, summary.major, summary.design, summary.process]],
    ))
    story.append(Spacer(1, 8))
    phases = report.phase_results
    story.append(_make_kv_table([
        [f"Phase {n}", getattr(phases, f"phase{n}")] for n in range(1, 6)
    ]))


def _build_validation_phases(story, styles, workflow: ValidationWorkflow):
    story.append(_section_header("Validation Checks", styles))
    for key, phase in workflow.phases:
        if phase is None:
            continue
        _build_phase_checks(story, styles, phase)


def _build_phase_checks(story, styles, phase: ValidationPhaseResult):
    story.append(Paragraph(
        escape(f"Phase {phase.phase}: {phase.phase_name} "
               f"({phase.status.value}, {phase.passed} passed, {phase.failed} failed)"),
        styles['SubSection'],
    ))
    rows = [["Check", "Rule", "Result", "Message"]]
    for check in phase.validation_checks:
        rows.append([
            _cell(check.check_name, styles),
            check.rule_id or "",
            check.result.value,
            _cell(check.message, styles),
        ])
    story.append(_make_data_table(
        rows,
        col_widths=[1.8 * inch, 0.6 * inch, 0.7 * inch, CONTENT_W - 3.1 * inch],
        result_col=2,
    ))
    for warning in phase.warnings:
        text = warning.message + (f" ({warning.impact})" if warning.impact else "")
        story.append(Paragraph(escape(f"Warning: {text}"), styles['Body']))


def _build_violations(story, styles, workflow: ValidationWorkflow):
    report = workflow.final_report
    if report is None:
        return
    story.append(PageBreak())
    story.append(_section_header("Violations by Severity", styles))
    groups: list[tuple[str, list[Violation]]] = [
        ("Critical (absolute stoppers)", report.violations.critical),
        ("Major", report.violations.major),
        ("Design", report.violations.design),
        ("Process", report.violations.process),
    ]
    if not any(items for _, items in groups):
        story.append(Paragraph("No violations found.", styles['Body']))
    for label, items in groups:
        if not items:
            continue
        story.append(Paragraph(escape(f"{label} ({len(items)})"), styles['SubSection']))
        rows = [["Rule", "Category", "Description", "Remediation"]]
        for v in items:
            rows.append([
                v.rule_id or "",
                _cell(v.category, styles),
                _cell(v.description, styles),
                _cell(v.remediation, styles),
            ])
        story.append(_make_data_table(
            rows, col_widths=[0.6 * inch, 1.3 * inch, 2.5 * inch, CONTENT_W - 4.4 * inch],
        ))

    story.append(Paragraph("Next Steps", styles['SubSection']))
    _bullets(story, report.next_steps, styles)
    story.append(Paragraph(
        escape(f"Estimated resolution: {report.estimated_resolution}"), styles['Body'],
    ))


def _validation_story(workflow: ValidationWorkflow, report_id: str) -> list:
    styles = _get_styles()
    story = []
    if workflow.final_report is not None:
        status = workflow.final_report.overall_status.value
    else:
        status = workflow.overall_status.upper()
    if workflow.stop_reason:
        status = f"{status}: {workflow.stop_reason}"
    _build_cover(story, styles, "R-1 Design Validation Report",
                 workflow.site_data, status, report_id)
    _build_validation_summary(story, styles, workflow)
    story.append(PageBreak())
    _build_validation_phases(story, styles, workflow)
    _build_violations(story, styles, workflow)
    _build_disclaimers(story, styles, report_id)
    return story


# ──────────────────────────────────────────────────────────────────
# MAIN ENTRY POINTS
# ──────────────────────────────────────────────────────────────────

def _render(story: list) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=letter,
        topMargin=1.0 * inch, bottomMargin=0.8 * inch,
        leftMargin=MARGIN, rightMargin=MARGIN,
    )
    doc.build(story, onFirstPage=_header_footer, onLaterPages=_header_footer)
    return buffer.getvalue()


def _write(pdf_bytes: bytes, prefix: str, report_id: str, output_dir: Optional[str]) -> str:
    output_dir = output_dir or settings.report_output_dir
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, f"{prefix}_{report_id}.pdf")
    with open(filepath, 'wb') as f:
        f.write(pdf_bytes)
    logger.info("Report written to %s", filepath)
    return filepath


def generate_planning_report_bytes(workflow: PlanningWorkflow) -> bytes:
    """Render a planning workflow to PDF bytes (for API streaming)."""
    report_id = str(uuid.uuid4())[:8]
    return _render(_planning_story(workflow, report_id))


def generate_planning_report(workflow: PlanningWorkflow, output_dir: Optional[str] = None) -> str:
    """Render a planning workflow to a PDF file and return its path."""
    report_id = str(uuid.uuid4())[:8]
    return _write(_render(_planning_story(workflow, report_id)),
                  "planning_report", report_id, output_dir)


def generate_validation_report_bytes(workflow: ValidationWorkflow) -> bytes:
    """Render a validation workflow to PDF bytes (for API streaming)."""
    report_id = str(uuid.uuid4())[:8]
    return _render(_validation_story(workflow, report_id))


def generate_validation_report(
    workflow: ValidationWorkflow, output_dir: Optional[str] = None,
) -> str:
    """Render a validation workflow to a PDF file and return its path."""
    report_id = str(uuid.uuid4())[:8]
    return _write(_render(_validation_story(workflow, report_id)),
                  "validation_report", report_id, output_dir)
