"""Unit tests for field enrichment."""

from partner_master.dictionary import EMPTY_DICTIONARY, build_field_dictionary
from partner_master.enrichment import dictionary_key, enrich_row, is_omitted

CONTACTS = build_field_dictionary([
    {"Table Name": "Contacts", "Alias DD Item": "AN8", "DD Item Description": "Address Number"},
    {"Table Name": "Contacts", "Alias DD Item": "MLNM", "DD Item Description": "Mailing Name"},
])


class TestOmission:
    """Null and whitespace-only values are dropped; everything else kept."""

    def test_null_and_blank_strings_omitted(self) -> None:
        row = {"AN8": "4242", "Description": "   ", "Tab": "\t\n", "Empty": "", "Missing": None}
        enriched = enrich_row(row, CONTACTS, "Contacts")
        assert list(enriched) == ["AN8"]

    def test_falsy_values_retained(self) -> None:
        row = {"Zero": 0, "Flag": False, "List": [], "Obj": {}, "Float": 0.0}
        enriched = enrich_row(row, EMPTY_DICTIONARY, "Contacts")
        assert list(enriched) == ["Zero", "Flag", "List", "Obj", "Float"]
        assert enriched["Zero"].value == 0
        assert enriched["Flag"].value is False

    def test_is_omitted(self) -> None:
        assert is_omitted(None)
        assert is_omitted("  ")
        assert not is_omitted(" x ")
        assert not is_omitted(0)


class TestMetadataAttachment:
    """details is set exactly when "<table>_<field>" is in the dictionary."""

    def test_known_field_gets_details(self) -> None:
        enriched = enrich_row({"MLNM": "Jane Roe"}, CONTACTS, "Contacts")
        assert enriched["MLNM"].value == "Jane Roe"
        assert enriched["MLNM"].details is not None
        assert enriched["MLNM"].details.description == "Mailing Name"

    def test_unknown_field_has_null_details(self) -> None:
        enriched = enrich_row({"PH1": "555-0100"}, CONTACTS, "Contacts")
        assert "PH1" in enriched
        assert enriched["PH1"].details is None

    def test_lookup_uses_table_name(self) -> None:
        enriched = enrich_row({"AN8": "1"}, CONTACTS, "Supplier")
        assert enriched["AN8"].details is None

    def test_keys_and_order_follow_raw_row(self) -> None:
        row = {"MLNM": "Jane", "X": None, "AN8": "1", "PH1": "555"}
        enriched = enrich_row(row, CONTACTS, "Contacts")
        assert list(enriched) == ["MLNM", "AN8", "PH1"]
        assert all(k in row for k in enriched)

    def test_does_not_mutate_input(self) -> None:
        row = {"AN8": "1", "Blank": " "}
        enrich_row(row, CONTACTS, "Contacts")
        assert row == {"AN8": "1", "Blank": " "}


class TestPrefixedColumns:
    """Remote rows carry "<table>_<field>" columns; spreadsheet rows carry bare headers."""

    def test_prefixed_column_looked_up_as_is(self) -> None:
        enriched = enrich_row({"Contacts_MLNM": "Jane Roe", "Contacts_AN8": 4242}, CONTACTS, "Contacts")
        assert list(enriched) == ["Contacts_MLNM", "Contacts_AN8"]
        assert enriched["Contacts_MLNM"].details.description == "Mailing Name"
        assert enriched["Contacts_AN8"].details.field_key == "Contacts_AN8"

    def test_other_table_prefix_not_trusted(self) -> None:
        enriched = enrich_row({"Supplier_AN8": 1}, CONTACTS, "Contacts")
        assert enriched["Supplier_AN8"].details is None

    def test_dictionary_key(self) -> None:
        assert dictionary_key("F0101", "F0101_ALPH") == "F0101_ALPH"
        assert dictionary_key("F0101", "ALPH") == "F0101_ALPH"
        assert dictionary_key("F0101", "F01011_X") == "F0101_F01011_X"
