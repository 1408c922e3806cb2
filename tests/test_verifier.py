"""Tests for import bundle verification."""

import pytest

from ledgerkit.domain.verifier import find_bundle_problems, verify_bundle


def test_valid_bundle_passes(bundle_data):
    assert verify_bundle(bundle_data)
    assert find_bundle_problems(bundle_data) == []


def test_empty_collections_pass():
    data = {"accountTypes": [], "accounts": [], "categories": [], "ledgerYears": [], "transactions": []}
    assert verify_bundle(data)


@pytest.mark.parametrize("value", [None, [], "bundle", 42])
def test_non_mapping_fails(value):
    assert not verify_bundle(value)


@pytest.mark.parametrize(
    "key", ["accountTypes", "accounts", "categories", "ledgerYears", "transactions"]
)
def test_missing_collection_fails(bundle_data, key):
    del bundle_data[key]
    problems = find_bundle_problems(bundle_data)
    assert problems == [f"missing collection '{key}'"]


def test_non_list_collection_fails(bundle_data):
    bundle_data["accounts"] = {"id": 1}
    assert not verify_bundle(bundle_data)


def test_non_object_record_fails(bundle_data):
    bundle_data["categories"].append("Food")
    assert find_bundle_problems(bundle_data) == ["categories[2]: record is not an object"]


class TestAccountTypes:
    def test_missing_label_fails(self, bundle_data):
        del bundle_data["accountTypes"][0]["type"]
        assert "accountTypes[0]: missing type" in find_bundle_problems(bundle_data)

    def test_label_alias_accepted(self, bundle_data):
        bundle_data["accountTypes"][0] = {"id": 100, "label": "Checking"}
        assert verify_bundle(bundle_data)

    @pytest.mark.parametrize("value", ["", " \t"])
    def test_blank_label_fails(self, bundle_data, value):
        bundle_data["accountTypes"][1]["type"] = value
        assert find_bundle_problems(bundle_data) == ["accountTypes[1]: missing type"]


class TestAccounts:
    @pytest.mark.parametrize("field", ["id", "startingBalance", "accountTypeId", "isDefault"])
    def test_missing_required_field_fails(self, bundle_data, field):
        del bundle_data["accounts"][0][field]
        assert f"accounts[0]: missing {field}" in find_bundle_problems(bundle_data)

    def test_name_alias_accepted(self, bundle_data):
        account = bundle_data["accounts"][0]
        account["accountName"] = account.pop("name")
        account["institutionName"] = account.pop("institution")
        assert verify_bundle(bundle_data)

    def test_unknown_account_type_fails(self, bundle_data):
        bundle_data["accounts"][0]["accountTypeId"] = 999
        problems = find_bundle_problems(bundle_data)
        assert problems == ["accounts[0]: accountTypeId 999 has no account type in the bundle"]

    def test_non_numeric_balance_fails(self, bundle_data):
        bundle_data["accounts"][0]["startingBalance"] = "lots"
        assert not verify_bundle(bundle_data)

    def test_negative_balance_allowed(self, bundle_data):
        bundle_data["accounts"][0]["startingBalance"] = -25.5
        assert verify_bundle(bundle_data)

    @pytest.mark.parametrize("value", [1e30, -1e30, "10000000000"])
    def test_out_of_range_balance_fails(self, bundle_data, value):
        bundle_data["accounts"][0]["startingBalance"] = value
        assert verify_bundle(bundle_data) is False
        assert find_bundle_problems(bundle_data) == [
            f"accounts[0]: startingBalance {value!r} is not a number in the supported range"
        ]

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_name_fails(self, bundle_data, value):
        bundle_data["accounts"][1]["name"] = value
        assert find_bundle_problems(bundle_data) == ["accounts[1]: missing name"]


class TestCategories:
    def test_invalid_color_fails(self, bundle_data):
        bundle_data["categories"][0]["colorCode"] = "notacolor"
        assert find_bundle_problems(bundle_data) == ["categories[0]: invalid colorCode 'notacolor'"]

    def test_short_color_passes(self, bundle_data):
        bundle_data["categories"][0]["colorCode"] = "#abc"
        bundle_data["transactions"][0]["categoryColor"] = "#abc"
        assert verify_bundle(bundle_data)

    @pytest.mark.parametrize("field", ["id", "name", "colorCode", "icon"])
    def test_missing_field_fails(self, bundle_data, field):
        del bundle_data["categories"][1][field]
        assert not verify_bundle(bundle_data)

    @pytest.mark.parametrize("field", ["name", "colorCode", "icon"])
    def test_blank_field_fails(self, bundle_data, field):
        bundle_data["categories"][1][field] = "  "
        assert find_bundle_problems(bundle_data) == [f"categories[1]: missing {field}"]

    def test_color_with_trailing_newline_fails(self, bundle_data):
        bundle_data["categories"][1]["colorCode"] = "#ffffff\n"
        assert not verify_bundle(bundle_data)


class TestLedgerYears:
    @pytest.mark.parametrize("value", [None, "2023", 2023.5, True, 0])
    def test_invalid_year_fails(self, bundle_data, value):
        bundle_data["ledgerYears"].append(value)
        assert not verify_bundle(bundle_data)


class TestTransactions:
    @pytest.mark.parametrize("field", ["id", "title", "amount", "date", "type", "accountId"])
    def test_missing_required_field_fails(self, bundle_data, field):
        del bundle_data["transactions"][2][field]
        assert f"transactions[2]: missing {field}" in find_bundle_problems(bundle_data)

    def test_unknown_category_fails(self, bundle_data):
        bundle_data["transactions"][0]["categoryId"] = 77
        problems = find_bundle_problems(bundle_data)
        assert problems == ["transactions[0]: categoryId 77 has no category in the bundle"]

    def test_unknown_account_fails(self, bundle_data):
        bundle_data["transactions"][1]["accountId"] = 1
        assert not verify_bundle(bundle_data)

    @pytest.mark.parametrize("field", ["categoryName", "categoryColor", "categoryIcon"])
    def test_category_display_fields_required_with_category(self, bundle_data, field):
        del bundle_data["transactions"][0][field]
        assert not verify_bundle(bundle_data)

    def test_invalid_category_color_fails(self, bundle_data):
        bundle_data["transactions"][0]["categoryColor"] = "#12345"
        assert not verify_bundle(bundle_data)

    def test_display_fields_not_required_without_category(self, bundle_data):
        txn = bundle_data["transactions"][2]
        assert "categoryName" not in txn
        assert verify_bundle(bundle_data)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("type", "transfer"),
            ("amount", -4.5),
            ("amount", "four"),
            ("date", "yesterday"),
            ("date", "2023-13-01"),
            ("accountId", "50"),
        ],
    )
    def test_invalid_values_fail(self, bundle_data, field, value):
        bundle_data["transactions"][0][field] = value
        assert not verify_bundle(bundle_data)

    def test_datetime_date_accepted(self, bundle_data):
        bundle_data["transactions"][0]["date"] = "2023-05-01T00:00:00Z"
        assert verify_bundle(bundle_data)

    @pytest.mark.parametrize("value", [1e30, "99999999999"])
    def test_out_of_range_amount_fails(self, bundle_data, value):
        bundle_data["transactions"][1]["amount"] = value
        assert verify_bundle(bundle_data) is False

    @pytest.mark.parametrize("field", ["title", "type", "date"])
    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_field_fails(self, bundle_data, field, value):
        bundle_data["transactions"][2][field] = value
        assert find_bundle_problems(bundle_data) == [f"transactions[2]: missing {field}"]

    def test_blank_category_display_field_fails(self, bundle_data):
        bundle_data["transactions"][0]["categoryIcon"] = ""
        assert find_bundle_problems(bundle_data) == [
            "transactions[0]: categoryId is set but categoryIcon is missing"
        ]


def test_every_problem_is_reported(bundle_data):
    bundle_data["categories"][0]["colorCode"] = "red"
    bundle_data["transactions"][1]["accountId"] = 999
    assert len(find_bundle_problems(bundle_data)) == 2
