from __future__ import annotations

from ..models.column_mapping import CanonicalField

"""Known header synonyms per canonical field.

Order is priority: the first alias is the most likely exact match for
SAP / ERP work-order exports. Note that "Operation" is listed for both work
center and part; whichever field is resolved first claims nothing, both may
point at the same header.
"""

FIELD_ALIASES: dict[CanonicalField, tuple[str, ...]] = {
    CanonicalField.COMPANY: (
        'Company', 'List name', 'name', 'customer', 'company_name',
        'Customer', 'Cust.Name', 'Customer Name', 'Ship-to Party',
        'Sold-to Party', 'Client', 'Client Name',
    ),
    CanonicalField.JOB: (
        'Sales Document', 'Order', 'job_id', 'Job', 'job', 'Project',
        'Sales Order', 'SalesDoc.', 'SO Number', 'Order Number',
        'PO', 'PO Number', 'Purchase Order',
    ),
    CanonicalField.WORK_CENTER: (
        'Oper.WorkCenter', 'work_center', 'WorkCenter', 'Work Center',
        'WrkCtr', 'WorkCtr', 'Resource', 'Production Line', 'Workcenter',
        'Operation', 'Manufacturing',
    ),
    CanonicalField.PART: (
        'Opr. short text', 'part_id', 'Part', 'part', 'Material',
        'Mat.Number', 'Part Number', 'Material Number', 'Item',
        'Operation', 'Description', 'Item Description', 'ProductId',
    ),
    CanonicalField.PLANNED_HOURS: (
        'Work', 'planned_hours', 'Planned Hours', 'planned hours',
        'Target Qty', 'Plan Hours', 'Standard Hours', 'Estimated Hours',
        'Target Hour', 'Norm. Time', 'Planned', 'Plan', 'Target',
    ),
    CanonicalField.ACTUAL_HOURS: (
        'Actual work', 'actual_hours', 'Actual Hours', 'actual hours',
        'Act.Hours', 'Actual Hour', 'Confirmed Hours', 'Conf. Work',
        'Yield', 'Actual', 'Actuals', 'Real',
    ),
    CanonicalField.DATE: (
        'Basic fin. date', 'date', 'Date', 'Finish Date', 'Confirm. Date',
        'Actual Finish', 'Confirmation Date', 'Created On', 'Entry Date',
        'Order Date', 'PO Date', 'Transaction Date',
    ),
    CanonicalField.LABOR_RATE: (
        'labor_rate', 'Labor Rate', 'Labour Rate', 'Hourly Rate',
        'Rate/Hour', 'Cost Rate',
    ),
}
