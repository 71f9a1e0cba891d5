from ..base_model import OdooFloat, OdooInt, OdooRecord, OdooStr


class Move(OdooRecord):
    """
    An accounting entry ('account.move'): invoices, bills and journal entries.

    `partner_id` is a many-to-one field: the server sends `[id, name]` and the
    record keeps the id only.
    """

    __odoo_model__ = "account.move"

    id: OdooInt = 0
    name: OdooStr = ""
    partner_id: OdooInt = 0
    invoice_date: OdooStr = ""
    """ISO date ('YYYY-MM-DD'), empty for drafts without a date."""

    amount_total: OdooFloat = 0.0
    state: OdooStr = ""
