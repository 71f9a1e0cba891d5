from ..base_model import OdooBool, OdooFloat, OdooInt, OdooRecord, OdooStr


class Product(OdooRecord):
    """A product variant ('product.product')."""

    __odoo_model__ = "product.product"

    id: OdooInt = 0
    name: OdooStr = ""
    type: OdooStr = ""
    """Product type (e.g. 'consu', 'service')."""

    sale_ok: OdooBool = False
    purchase_ok: OdooBool = False
    list_price: OdooFloat = 0.0
    """Sales price."""

    standard_price: OdooFloat = 0.0
    """Cost."""
