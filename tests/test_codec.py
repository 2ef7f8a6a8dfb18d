import logging
from dataclasses import dataclass

import pytest
from graphcodec.codec import (
	UNDEFINED,
	BackReference,
	FunctionPayload,
	GraphCodec,
	decode,
	encode,
)
from graphcodec.errors import DecodeError
from graphcodec.literal import MAX_DECODED_INT_DIGITS, parse_literal
from graphcodec.options import CodecOptions
from graphcodec.values import Record


def helper(x: int) -> int:
	return x + 1


class Base:
	proto = True


class WithMethod:
	def greet(self) -> str:
		return "hi"


@dataclass
class Point:
	x: int
	y: int


def test_acyclic_roundtrip():
	data = {
		"a": 1,
		"b": [2, 3.5, {"c": 'x\ny"z\\'}],
		"t": True,
		"f": False,
		"n": None,
		"empty_list": [],
		"empty_dict": {},
		"neg": -12,
		"exp": 1e-7,
	}
	assert decode(encode(data)) == data


def test_output_format():
	assert encode({"a": 1, "b": [1, 2]}) == '{"a":1,\n"b":[1,\n2]}'


def test_compact_output_only_affects_mappings():
	assert encode({"a": 1, "b": [1, 2]}, compact_output=True) == '{"a":1,"b":[1,\n2]}'


def test_self_reference_roundtrip():
	a: dict[str, object] = {}
	a["self"] = a

	text = encode(a)
	assert text == '{"self":"JSONcircRef:"}'

	b = decode(text)
	assert b["self"] is b


def test_shared_subtree_is_preserved():
	shared = {"x": 1}
	root = {"a": shared, "b": shared}

	text = encode(root)
	assert text == '{"a":{"x":1},\n"b":"JSONcircRef:a"}'

	parsed = decode(text)
	assert parsed["a"] is parsed["b"]
	assert parsed["a"] == {"x": 1}


def test_list_cycle():
	items: list[object] = [1]
	items.append(items)

	text = encode(items)
	assert text == '[1,\n"JSONcircRef:"]'

	parsed = decode(text)
	assert parsed[0] == 1
	assert parsed[1] is parsed


def test_reference_into_sequence():
	first = {"k": 1}
	root = {"items": [first, first], "again": first}

	text = encode(root)
	assert '"JSONcircRef:items[0]"' in text

	parsed = decode(text)
	assert parsed["items"][1] is parsed["items"][0]
	assert parsed["again"] is parsed["items"][0]


def test_deep_cycles_and_shared_refs():
	shared = {"v": 42}
	root: dict[str, object] = {"left": {"shared": shared}, "right": {"shared": shared}}
	root["self"] = root

	parsed = decode(encode(root))

	assert parsed["left"]["shared"] is parsed["right"]["shared"]
	assert parsed["self"] is parsed
	assert parsed["left"]["shared"]["v"] == 42


def test_separate_calls_do_not_share_visited_state():
	shared = {"x": 1}
	assert encode(shared) == '{"x":1}'
	assert encode(shared) == '{"x":1}'
	assert encode([shared]) == '[{"x":1}]'


def test_functions_dropped_by_default():
	text = encode({"f": lambda: None, "n": 1})
	assert '"f"' not in text
	assert text == '{"n":1}'

	text = encode({"n": 1, "f": helper})
	assert text == '{"n":1}'


def test_function_in_sequence_becomes_null():
	assert encode([helper, 1]) == "[null,\n1]"


def test_included_functions_roundtrip():
	text = encode({"f": helper, "g": len}, include_functions=True)
	assert '"JSONincludedFunc:builtins:len"' in text
	assert f'"JSONincludedFunc:{helper.__module__}:helper"' in text

	parsed = decode(text, include_functions=True)
	assert parsed["f"] is helper
	assert parsed["g"] is len


def test_included_functions_stay_strings_without_flag():
	text = encode({"g": len}, include_functions=True)
	assert decode(text) == {"g": "JSONincludedFunc:builtins:len"}


def test_unresolvable_function_payload_kept_as_string():
	text = encode({"f": lambda: None}, include_functions=True)
	parsed = decode(text, include_functions=True)
	assert isinstance(parsed["f"], str)
	assert parsed["f"].startswith("JSONincludedFunc:")


def test_custom_function_resolver():
	codec = GraphCodec(function_resolver=lambda ref: helper if ref == "x:y" else None)
	parsed = codec.decode('{"f":"JSONincludedFunc:x:y"}', include_functions=True)
	assert parsed["f"] is helper


def test_malformed_input_returns_empty_mapping():
	assert decode("not { valid at all <script>") == {}
	assert decode("") == {}
	assert decode("{") == {}
	assert decode("[1,]") == {}


def test_strict_decode_raises():
	with pytest.raises(DecodeError):
		decode("not { valid at all <script>", strict=True)
	with pytest.raises(DecodeError):
		decode('{"a":', strict=True)


def test_inherited_class_attributes_excluded_by_default():
	o = Base()
	o.own = 1  # pyright: ignore[reportAttributeAccessIssue]

	assert encode(o) == '{"own":1}'
	assert encode(o, include_inherited=True) == '{"own":1,\n"proto":true}'


def test_own_value_equal_to_inherited_one_is_filtered():
	record = Record({"x": 1, "y": 2}, base={"y": 2, "z": 3})
	assert encode(record) == '{"x":1}'
	assert encode(record, include_inherited=True) == '{"x":1,\n"y":2,\n"z":3}'


def test_overridden_value_is_kept():
	record = Record({"y": 5}, base={"y": 2})
	assert encode(record) == '{"y":5}'


def test_inherited_methods_need_both_flags():
	obj = WithMethod()
	assert encode(obj, include_inherited=True) == "{}"
	text = encode(obj, include_inherited=True, include_functions=True)
	assert text == '{"greet":"JSONincludedFunc:%s:WithMethod.greet"}' % __name__


def test_without_circular_detection_shared_content_is_repeated():
	shared = {"x": 1}
	text = encode({"a": shared, "b": shared}, detect_circular=False)
	assert text == '{"a":{"x":1},\n"b":{"x":1}}'


def test_restoration_can_be_disabled():
	text = '{"a":{"x":1},\n"b":"JSONcircRef:a"}'
	parsed = decode(text, restore_circular=False)
	assert parsed["b"] == "JSONcircRef:a"


def test_undefined_dropped_from_mappings_null_in_sequences():
	assert encode({"a": UNDEFINED, "b": None}) == '{"b":null}'
	assert encode([UNDEFINED]) == "[null]"


def test_tuples_and_dataclasses():
	assert encode((1, 2)) == "[1,\n2]"
	assert encode(Point(1, 2)) == '{"x":1,\n"y":2}'
	assert decode(encode({"p": Point(3, 4)})) == {"p": {"x": 3, "y": 4}}


def test_unrepresentable_values_are_dropped():
	assert encode({"raw": b"bytes", "n": 1}) == '{"n":1}'
	assert encode([float("nan"), float("inf")]) == "[null,\nnull]"


def test_non_string_keys_are_stringified():
	assert encode({1: "a"}) == '{"1":"a"}'


def test_dangling_reference_is_skipped():
	assert decode('{"a":"JSONcircRef:missing"}') == {"a": "JSONcircRef:missing"}
	with pytest.raises(DecodeError):
		decode('{"a":"JSONcircRef:missing"}', strict=True)


def test_root_reference_string_is_left_alone():
	assert decode('"JSONcircRef:"') == "JSONcircRef:"


def test_keys_with_separators_roundtrip():
	shared: dict[str, object] = {}
	root = {"a.b": shared, "c": shared}

	text = encode(root)
	assert '"JSONcircRef:[\\"a.b\\"]"' in text

	parsed = decode(text)
	assert parsed["c"] is parsed["a.b"]


def test_digit_keys_not_confused_with_indices():
	root: dict[str, object] = {"0": {"v": 1}, "list": [{"w": 2}]}
	root["r1"] = root["0"]
	root["r2"] = root["list"][0]  # pyright: ignore[reportIndexIssue]

	parsed = decode(encode(root))
	assert parsed["r1"] is parsed["0"]
	assert parsed["r2"] is parsed["list"][0]


def test_string_escapes_roundtrip():
	data = ["tab\tand\rcr", "line\u2028sep", "café", "\U0001f600", "\x01ctl"]
	assert decode(encode(data)) == data


def test_collect_lists_restore_instructions():
	codec = GraphCodec()
	skeleton = parse_literal('{"a":{"x":1},\n"b":"JSONcircRef:a","f":"JSONincludedFunc:m:n"}')

	assert codec.collect(skeleton) == [BackReference(target=("b",), source=("a",))]
	assert codec.collect(skeleton, CodecOptions(include_functions=True)) == [
		BackReference(target=("b",), source=("a",)),
		FunctionPayload(target=("f",), reference="m:n"),
	]


def test_codec_options_from_env(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv("GRAPHCODEC_COMPACT", "1")
	codec = GraphCodec.from_env()
	assert codec.options.compact_output is True
	assert codec.encode({"a": 1, "b": 2}) == '{"a":1,"b":2}'


def test_per_call_options_override_codec_options():
	codec = GraphCodec(CodecOptions(compact_output=True))
	assert codec.encode({"a": 1, "b": 2}, compact_output=False) == '{"a":1,\n"b":2}'
	assert codec.encode({"a": 1, "b": 2}) == '{"a":1,"b":2}'


@pytest.mark.parametrize(
	"text",
	["[" * 5000, "[" * 5000 + "]" * 5000, '{"a":' * 5000 + "1" + "}" * 5000],
)
def test_deeply_nested_input_returns_empty_mapping(text: str):
	assert decode(text) == {}
	with pytest.raises(DecodeError, match="nested too deeply"):
		decode(text, strict=True)


def test_huge_integers_roundtrip():
	n = 10**5000
	text = encode({"n": n, "neg": -n})
	assert decode(text) == {"n": n, "neg": -n}


def test_long_integer_literal_decodes():
	assert decode("1" * 5000) == (10**5000 - 1) // 9


def test_integer_literal_over_digit_cap_is_rejected():
	text = "1" * (MAX_DECODED_INT_DIGITS + 1)
	assert decode(text) == {}
	with pytest.raises(DecodeError, match="too long"):
		decode(text, strict=True)


def test_tuples_are_never_shared_after_decode():
	parsed = decode(encode({"a": (), "b": (), "c": frozenset(), "d": frozenset()}))
	parsed["a"].append(1)
	parsed["c"].append(1)
	assert parsed["b"] == []
	assert parsed["d"] == []


def test_cycle_through_tuple_still_terminates():
	items: list[object] = []
	wrapper = (items,)
	items.append(wrapper)

	parsed = decode(encode(wrapper))
	assert parsed[0][0][0] is parsed[0]


def test_bound_method_logs_missing_instance(caplog: pytest.LogCaptureFixture):
	caplog.set_level(logging.DEBUG, logger="graphcodec.codec")
	text = encode({"m": WithMethod().greet}, include_functions=True)

	assert text == f'{{"m":"JSONincludedFunc:{WithMethod.__module__}:WithMethod.greet"}}'
	assert "without its instance" in caplog.text
