from netlayout.utils.yaml_utils import normalize_yaml_dict_keys


def test_normalize_converts_keys_and_keeps_order() -> None:
    data = {True: "lan", 10: "dmz", "home": "wifi", False: "off"}
    assert list(normalize_yaml_dict_keys(data).items()) == [
        ("True", "lan"),
        ("10", "dmz"),
        ("home", "wifi"),
        ("False", "off"),
    ]


def test_normalize_leaves_values_untouched() -> None:
    value = {"nested": {1: "x"}}
    out = normalize_yaml_dict_keys({"a": value})
    assert out["a"] is value


def test_normalize_empty() -> None:
    assert normalize_yaml_dict_keys({}) == {}
