from querymine.log_analysis.field_projector import extract_field_names, extract_field_values


def test_field_names_sorted_and_filtered():
    doc = {"status": "A", "_id": 1, "$or": [{"x": 1}], "age": {"$gt": 3}, "name": "n"}
    assert extract_field_names(doc) == ["age", "name", "status"]


def test_field_names_non_object():
    assert extract_field_names([{"a": 1}]) == []
    assert extract_field_names("a") == []
    assert extract_field_names(None) == []


def test_scalar_values():
    doc = {"s": "open", "i": 42, "f": 1.5, "t": True, "n": False, "z": None, "_id": "x", "$comment": "c"}
    assert extract_field_values(doc) == {"s": "open", "i": "42", "f": "1.5", "t": "true", "n": "false"}


def test_string_truncation():
    exact = "a" * 50
    long = "b" * 60
    values = extract_field_values({"exact": exact, "long": long})
    assert values["exact"] == exact
    assert values["long"] == "b" * 47 + "..."
    assert len(values["long"]) == 50


def test_arrays():
    doc = {"short": ["a", 1, True], "long": [1, 2, 3, 4], "empty": [], "mixed": [None, {"k": 1}]}
    values = extract_field_values(doc)
    assert values["short"] == "[a,1,true]"
    assert values["long"] == "[4 items]"
    assert values["empty"] == "[]"
    assert values["mixed"] == '[null,{"k":1}]'


def test_nested_paths_and_operators():
    doc = {"customer": {"tier": "gold", "address": {"city": "Paris"}}, "qty": {"$lt": 30}}
    values = extract_field_values(doc)
    assert values == {"customer.tier": "gold", "customer.address.city": "Paris"}


def test_depth_bound():
    doc = {"l1": {"l2": {"l3": {"l4": {"l5": "deep"}, "v3": 3}, "v2": 2}, "v1": 1}}
    values = extract_field_values(doc)
    assert values == {"l1.v1": "1", "l1.l2.v2": "2"}
    assert not any(path.startswith("l1.l2.l3") for path in values)


def test_prefix_and_depth_arguments():
    assert extract_field_values({"a": 1}, "root") == {"root.a": "1"}
    assert extract_field_values({"a": 1}, "", 3) == {}
    assert extract_field_values({"a": {"b": 1}}, "", 0, 1) == {}


def test_non_object():
    assert extract_field_values(["a"]) == {}


def test_float_rendering():
    doc = {"big": 1e16, "small": 1.5e-7, "tiny": 1e-5, "neg": -2.5e-5, "plain": 100.0, "frac": 0.25, "arr": [1e20, 0.5]}
    values = extract_field_values(doc)
    assert values["big"] == "1e16"
    assert values["small"] == "1.5e-7"
    assert values["tiny"] == "0.00001"
    assert values["neg"] == "-0.000025"
    assert values["plain"] == "100.0"
    assert values["frac"] == "0.25"
    assert values["arr"] == "[1e20,0.5]"
