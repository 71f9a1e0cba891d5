from .move import Move as Move
from .partner import Partner as Partner
from .product import Product as Product
