from .helpers import (
    id_domain as id_domain,
    pack_endpoint_url as pack_endpoint_url,
    truncate_long_strings as truncate_long_strings,
)
from .image import (
    encode_image as encode_image,
    image_to_base64 as image_to_base64,
)
