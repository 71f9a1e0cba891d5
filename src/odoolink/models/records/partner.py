from ..base_model import OdooBool, OdooInt, OdooRecord, OdooStr


class Partner(OdooRecord):
    """A contact or a company ('res.partner')."""

    __odoo_model__ = "res.partner"

    id: OdooInt = 0
    name: OdooStr = ""
    email: OdooStr = ""
    is_company: OdooBool = False
