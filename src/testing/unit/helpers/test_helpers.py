from odoolink.helpers import id_domain, pack_endpoint_url, truncate_long_strings


def test_pack_endpoint_url():
    assert (
        pack_endpoint_url("https://erp.example.com/", "/xmlrpc/2/common")
        == "https://erp.example.com/xmlrpc/2/common"
    )
    assert (
        pack_endpoint_url("http://localhost:8069", "xmlrpc/2/object")
        == "http://localhost:8069/xmlrpc/2/object"
    )


def test_id_domain():
    assert id_domain((4, 5)) == [["id", "in", [4, 5]]]
    assert id_domain([]) == [["id", "in", []]]


def test_truncate_long_strings():
    data = {"name": "x" * 10, "tags": ["y" * 3, ("z" * 10,)], "id": 1}
    assert truncate_long_strings(data, max_length=4) == {
        "name": "xxxx...",
        "tags": ["yyy", ("zzzz...",)],
        "id": 1,
    }
