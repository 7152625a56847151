import logging

import pytest

from nebterm.errors import ProtocolError, RemoteApiError
from nebterm.rpc import ProtocolValue, ValueKind, decode_response, encode_call
from tests.conftest import rpc_fault, rpc_success


def _response(value_xml: str) -> str:
    return (
        "<methodResponse><params><param>"
        f"<value>{value_xml}</value>"
        "</param></params></methodResponse>"
    )


class TestEncode:
    def test_method_and_params_in_order(self):
        body = encode_call("one.vm.info", ["oneadmin:pw", 42])

        assert body.startswith('<?xml version="1.0"?>')
        assert "<methodName>one.vm.info</methodName>" in body
        assert body.index("<string>oneadmin:pw</string>") < body.index("<int>42</int>")

    def test_text_is_escaped(self):
        body = encode_call("m", ["<a & b>"])
        assert "&lt;a &amp; b&gt;" in body
        assert "<a & b>" not in body

    def test_booleans_are_numeric(self):
        body = encode_call("m", [True, False])
        assert "<boolean>1</boolean>" in body
        assert "<boolean>0</boolean>" in body

    def test_struct_and_array(self):
        body = encode_call("m", [{"b": 1, "a": [1, "x"]}])
        assert "<member><name>b</name>" in body
        assert "<array><data><value><int>1</int></value>" in body


@pytest.mark.parametrize(
    "value",
    ['quotes " and <tags> & amps', -7, True, False, 3.25],
)
def test_leaf_values_round_trip(value):
    # A methodCall carries the same params section a response does
    decoded = decode_response(encode_call("m", [value]))
    assert decoded.value.to_python() == value
    assert type(decoded.value.to_python()) is type(value)


class TestDecode:
    def test_untyped_value_is_string(self):
        response = decode_response(_response("plain text"))
        assert response.value == ProtocolValue.string("plain text")

    def test_i4_and_int(self):
        assert decode_response(_response("<i4>5</i4>")).value.value == 5
        assert decode_response(_response("<int> -3 </int>")).value.value == -3

    def test_boolean_accepts_true_literal(self):
        assert decode_response(_response("<boolean>TRUE</boolean>")).value.value is True
        assert decode_response(_response("<boolean>0</boolean>")).value.value is False

    def test_non_numeric_int_decodes_to_zero_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nebterm.rpc.codec"):
            response = decode_response(_response("<int>abc</int>"))
        assert response.value == ProtocolValue(ValueKind.INT, 0)
        assert "abc" in caplog.text

    def test_non_numeric_double_decodes_to_zero(self):
        assert decode_response(_response("<double>n/a</double>")).value.value == 0.0

    def test_struct_member_order_preserved(self):
        response = decode_response(_response(
            "<struct>"
            "<member><name>z</name><value><int>1</int></value></member>"
            "<member><name>a</name><value>two</value></member>"
            "<member><name>m</name></member>"
            "</struct>"
        ))
        assert [name for name, _ in response.value.value] == ["z", "a", "m"]
        assert response.value.member("a").value == "two"
        assert response.value.member("m").value == ""

    def test_array_without_data_wrapper(self):
        response = decode_response(_response(
            "<array><value><int>1</int></value><value><int>2</int></value></array>"
        ))
        assert response.value.to_python() == [1, 2]

    def test_envelope_array(self):
        response = decode_response(rpc_success("<VM/>", code=7))
        assert not response.is_fault
        assert response.value.to_python() == [True, "<VM/>", 7]

    def test_fault(self):
        response = decode_response(rpc_fault("No such method", code=-32601))

        assert response.is_fault
        assert response.fault_string == "No such method"
        assert response.fault_code == -32601
        with pytest.raises(RemoteApiError) as excinfo:
            response.unwrap()
        assert "No such method" in str(excinfo.value)
        assert excinfo.value.code == -32601

    def test_malformed_xml(self):
        with pytest.raises(ProtocolError):
            decode_response("<methodResponse><params>")

    def test_missing_sections(self):
        with pytest.raises(ProtocolError, match="no fault or params"):
            decode_response("<methodResponse></methodResponse>")


class TestProtocolValue:
    def test_integer_range_checked(self):
        with pytest.raises(ValueError):
            ProtocolValue.integer(2**31)

    def test_from_python_prefers_bool(self):
        assert ProtocolValue.from_python(True).kind == ValueKind.BOOLEAN

    def test_from_python_rejects_unsupported(self):
        with pytest.raises(TypeError):
            ProtocolValue.from_python(object())

    def test_member_on_non_struct(self):
        assert ProtocolValue.string("x").member("x") is None
