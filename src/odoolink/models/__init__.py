from .base_model import (
    OdooBool as OdooBool,
    OdooFloat as OdooFloat,
    OdooInt as OdooInt,
    OdooRecord as OdooRecord,
    OdooStr as OdooStr,
)
from .mapper import (
    map_record as map_record,
    map_records as map_records,
)
from .records import (
    Move as Move,
    Partner as Partner,
    Product as Product,
)
