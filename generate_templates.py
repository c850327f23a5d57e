"""Generate sample cover-page templates (docxtpl tags) into the template directory.

Usage:
    python generate_templates.py [TEMPLATE_DIR] [COLLEGE_CODE ...]

Writes default_individual.docx and default_group.docx, plus
{CODE}_individual.docx / {CODE}_group.docx for every college code given.
"""
import sys
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt


def add_centered(doc, text, size=12, bold=False):
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    return p


def add_field(doc, label, tag):
    p = doc.add_paragraph()
    run = p.add_run(f"{label}: ")
    run.bold = True
    p.add_run(tag)
    return p


def add_members_table(doc):
    """Group members table; the middle row is repeated once per member."""
    table = doc.add_table(rows=4, cols=4)
    table.style = 'Table Grid'
    for cell, text in zip(table.rows[0].cells, ('S/N', 'Name', 'Registration No.', 'Phone')):
        cell.text = text
        cell.paragraphs[0].runs[0].bold = True

    table.rows[1].cells[0].text = '{%tr for m in group_members %}'

    row = table.rows[2].cells
    row[0].text = '{{ m.sn }}'
    row[1].text = '{{ m.name }}'
    row[2].text = '{{ m.registration_no }}'
    row[3].text = '{{ m.phone_number }}'

    table.rows[3].cells[0].text = '{%tr endfor %}'
    return table


def build_template(template_type):
    """Return a cover-page template document for 'individual' or 'group' work."""
    doc = Document()

    style = doc.styles['Normal']
    style.font.name = 'Times New Roman'
    style.font.size = Pt(12)

    # ==================== HEADER ====================
    add_centered(doc, '{{ college_name }}', size=16, bold=True)
    add_centered(doc, '{{ program_name }}', size=13)
    add_centered(doc, '{{ module_code }} {{ module_name }}', size=13)
    doc.add_paragraph()

    # ==================== TITLE ====================
    add_centered(doc, '{{ title }}', size=14, bold=True)
    doc.add_paragraph()

    # ==================== DETAILS ====================
    add_field(doc, 'Instructor', '{{ instructor_name }}')
    if template_type == 'group':
        add_field(doc, 'Group', '{{ group_name }}')
        doc.add_paragraph('{%p if has_group_members %}')
        add_members_table(doc)
        doc.add_paragraph('{%p endif %}')
    else:
        add_field(doc, 'Student', '{{ student_name }}')
        add_field(doc, 'Registration No.', '{{ registration_number }}')
    add_field(doc, 'Submission Date', '{{ submission_date }}')

    return doc


def main(argv):
    out_dir = Path(argv[1] if len(argv) > 1 else './templates')
    out_dir.mkdir(parents=True, exist_ok=True)

    codes = ['default'] + [code.upper() for code in argv[2:]]
    for code in codes:
        for template_type in ('individual', 'group'):
            path = out_dir / f'{code}_{template_type}.docx'
            build_template(template_type).save(str(path))
            print(f'Wrote {path}')


if __name__ == '__main__':
    main(sys.argv)
