from .config import ClientConfig as ClientConfig
from .odoo_client import OdooClient as OdooClient
