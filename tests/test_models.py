from auditor.core.models import (InventoryItem, ItemCategory, filter_items, group_by_category,
                                 sanitize_name, sort_by_name)


def test_sanitize_name_replaces_whitespace():
    assert sanitize_name("Jane Doe") == "Jane_Doe"
    assert sanitize_name("Jane\tvan Doe") == "Jane_van_Doe"


def test_sanitize_name_keeps_other_characters():
    assert sanitize_name("Doe, Jane") == "Doe,_Jane"


def test_sanitize_name_empty_becomes_unnamed():
    assert sanitize_name("") == "Unnamed"
    assert sanitize_name("   ") == "Unnamed"
    assert sanitize_name(None) == "Unnamed"


def test_placeholder_flag_and_dict():
    item = InventoryItem.placeholder(ItemCategory.PRINTER, "No Printers", "No printers configured", "Printer")
    assert item.is_placeholder
    assert item.source_path is None

    data = item.to_dict()
    assert data['category'] == "Printers"
    assert data['name'] == "No Printers"
    assert data['is_placeholder'] is True


def test_group_by_category_lists_every_category_in_order():
    items = [
        InventoryItem(ItemCategory.PRINTER, "B", ""),
        InventoryItem(ItemCategory.SYSTEM_SPEC, "A", ""),
        InventoryItem(ItemCategory.PRINTER, "C", ""),
    ]
    grouped = group_by_category(items)

    assert list(grouped) == list(ItemCategory)
    assert [item.name for item in grouped[ItemCategory.PRINTER]] == ["B", "C"]
    assert grouped[ItemCategory.FONT] == []


def test_sort_by_name_is_case_insensitive():
    items = [InventoryItem(ItemCategory.FONT, name, "") for name in ("beta", "Alpha", "gamma", "Beta2")]
    assert [item.name for item in sort_by_name(items)] == ["Alpha", "beta", "Beta2", "gamma"]


def test_filter_items_by_query_and_category():
    items = [
        InventoryItem(ItemCategory.MAIN_APP, "Preview", "/Applications/Preview.app", "Installed App"),
        InventoryItem(ItemCategory.INSTALLED_APP, "Word", "16.0", "Microsoft"),
        InventoryItem(ItemCategory.PRINTER, "Office Laser", "Driver Captured", "Printer"),
    ]

    assert [i.name for i in filter_items(items, "micro")] == ["Word"]
    assert [i.name for i in filter_items(items, "PRINTERS")] == ["Office Laser"]
    assert [i.name for i in filter_items(items, "", [ItemCategory.MAIN_APP])] == ["Preview"]
    assert filter_items(items, "word", [ItemCategory.MAIN_APP]) == []
    assert filter_items(items) == items
