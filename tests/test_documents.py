import pytest

from nebterm.documents import MISSING, extract, extract_items, transcode
from nebterm.errors import DocumentError


class TestTranscode:
    def test_single_object(self):
        doc = transcode("<VM><ID>7</ID><NAME>web1</NAME></VM>")
        assert doc == {"VM": {"ID": "7", "NAME": "web1"}}

    def test_repeated_siblings_become_list_in_order(self):
        doc = transcode(
            "<VM_POOL><VM><ID>1</ID></VM><VM><ID>2</ID></VM><VM><ID>3</ID></VM></VM_POOL>"
        )
        assert doc == {"VM_POOL": {"VM": [{"ID": "1"}, {"ID": "2"}, {"ID": "3"}]}}

    def test_repeated_leaf_siblings(self):
        doc = transcode("<G><ID>1</ID><ID>4</ID></G>")
        assert doc == {"G": {"ID": ["1", "4"]}}

    def test_self_closing_element_is_null(self):
        doc = transcode("<VM><ID>1</ID><USER_TEMPLATE/></VM>")
        assert doc == {"VM": {"ID": "1", "USER_TEMPLATE": None}}

    def test_text_is_trimmed(self):
        assert transcode("<A>\n   padded  \n</A>") == {"A": "padded"}

    def test_cdata_content(self):
        doc = transcode("<VM><NAME><![CDATA[a < b]]></NAME></VM>")
        assert doc == {"VM": {"NAME": "a < b"}}

    def test_namespaces_are_stripped(self):
        doc = transcode('<VM xmlns="http://opennebula.org/XMLSchema"><ID>1</ID></VM>')
        assert doc == {"VM": {"ID": "1"}}

    def test_non_markup_payload_is_text(self):
        assert transcode(" 6.8.0 ") == "6.8.0"

    def test_empty_payload(self):
        assert transcode("") == {}

    def test_malformed_payload(self):
        with pytest.raises(DocumentError):
            transcode("<VM><ID>1</VM>")


NESTED = {
    "VM": {
        "ID": "7",
        "NAME": "web1",
        "DEPLOYED": True,
        "CPU": 1.5,
        "USER_TEMPLATE": None,
        "TEMPLATE": {
            "DISK": [{"SIZE": "10240"}, {"SIZE": "2048"}],
            "NIC": {"IP": "10.0.0.5"},
            "CONTEXT": {"NETWORK": "YES"},
            "TAGS": [],
            "LABELS": ["prod"],
        },
    }
}


class TestExtract:
    def test_example_document(self):
        doc = transcode("<VM><ID>7</ID><NAME>web1</NAME></VM>")
        assert extract(doc, "VM.NAME") == "web1"

    @pytest.mark.parametrize("doc", [NESTED, {}, {"X": None}, "text", [1, 2]])
    def test_absent_first_segment_is_missing(self, doc):
        assert extract(doc, "NOPE.ID") == MISSING

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("VM.ID", "7"),
            ("VM.DEPLOYED", "true"),
            ("VM.CPU", "1.5"),
            ("VM.USER_TEMPLATE", MISSING),
            ("VM.TEMPLATE.DISK", "[2 items]"),
            ("VM.TEMPLATE.CONTEXT", "[object]"),
            ("VM.TEMPLATE.TAGS", MISSING),
            ("VM.TEMPLATE.DISK[1].SIZE", "2048"),
            ("VM.TEMPLATE.DISK[2].SIZE", MISSING),
            ("VM.ID.MORE", MISSING),
        ],
    )
    def test_terminal_rendering(self, path, expected):
        assert extract(NESTED, path) == expected

    def test_single_element_list_collapses(self):
        assert extract(NESTED, "VM.TEMPLATE.LABELS") == extract("prod", "")
        wrapped = {"A": [{"B": "x"}]}
        assert extract(wrapped, "A") == extract({"B": "x"}, "")
        assert extract(wrapped, "A.B") == MISSING

    def test_lone_value_addressable_by_index_zero(self):
        assert extract(NESTED, "VM.TEMPLATE.NIC[0].IP") == "10.0.0.5"
        assert extract(NESTED, "VM.TEMPLATE.NIC[1].IP") == MISSING

    def test_false_boolean(self):
        assert extract({"A": False}, "A") == "false"


class TestExtractItems:
    def test_pool_list_in_order(self):
        doc = {"VM_POOL": {"VM": [{"ID": "1"}, {"ID": "2"}]}}
        items = extract_items(doc, "VM_POOL.VM")
        assert [item["ID"] for item in items] == ["1", "2"]

    def test_single_item_is_wrapped(self):
        doc = {"VM_POOL": {"VM": {"ID": "1"}}}
        assert extract_items(doc, "VM_POOL.VM") == [{"ID": "1"}]

    def test_empty_pool(self):
        assert extract_items({"VM_POOL": None}, "VM_POOL.VM") == []
        assert extract_items({"VM_POOL": {}}, "VM_POOL.VM") == []

    def test_returns_a_copy(self):
        pool = [{"ID": "1"}]
        items = extract_items({"P": pool}, "P")
        items.append({"ID": "2"})
        assert len(pool) == 1

    def test_path_through_text_fails(self):
        with pytest.raises(DocumentError, match="not found in response"):
            extract_items({"VM_POOL": "oops"}, "VM_POOL.VM")
