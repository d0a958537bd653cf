import json
from querymine.log_analysis.query_analyzer import QueryPattern, analyze_query_pattern, parse_fragment
from tests.log.mocking import slow_query

slow_find = '{"t":{"$date":"2025-09-25T23:41:05.344+02:00"},"s":"I",  "c":"COMMAND",  "id":51803,   "ctx":"conn26","msg":"Slow query","attr":{"type":"command","ns":"Restaurant.pizzas","appName":"mongosh 2.5.6","command":{"find":"pizzas","filter":{"size":"medium","_id":{"$oid":"68d5b5d1c2a0a5f2e2a9a1b3"}},"sort":{"price":-1,"name":1},"$db":"Restaurant"},"planSummary":"COLLSCAN","keysExamined":0,"docsExamined":10000,"nreturned":101,"durationMillis":20}}'
slow_getmore = '{"t":{"$date":"2025-09-25T23:41:05.347+02:00"},"s":"I",  "c":"COMMAND",  "id":51803,   "ctx":"conn26","msg":"Slow query","attr":{"type":"command","ns":"Restaurant.pizzas","command":{"getMore":5190539785396356839,"collection":"pizzas","$db":"Restaurant"},"originatingCommand":{"find":"pizzas","filter":{"size":{"$in":["small","large"]}},"sort":{"price":1}},"planSummary":"IXSCAN { size: 1 }","durationMillis":25}}'
list_databases = '{"t":{"$date":"2025-09-25T23:41:05.343+02:00"},"s":"I","c":"COMMAND","id":51803,"msg":"Slow query","attr":{"type":"command","ns":"admin.$cmd","command":{"listDatabases":1,"nameOnly":true,"$db":"admin"},"durationMillis":3}}'


def test_find_pattern():
    pattern = analyze_query_pattern(slow_find)
    assert pattern.collection == "pizzas"
    assert pattern.operation == "find"
    assert pattern.filter_fields == ("size",)
    assert pattern.sort_fields == ("name", "price")
    assert pattern.plan_summary == "COLLSCAN"
    assert pattern.index_used == "unknown"
    assert pattern.duration_ms == 20
    assert pattern.field_values == {"size": "medium"}
    assert str(pattern) == "Collection: pizzas | Operation: find | Filter fields: [size] | Sort fields: [name, price] | Plan: COLLSCAN"


def test_getmore_uses_originating_command():
    pattern = analyze_query_pattern(slow_getmore)
    assert pattern.operation == "getMore"
    assert pattern.filter_fields == ("size",)
    assert pattern.sort_fields == ("price",)
    assert pattern.plan_summary == "IXSCAN { size: 1 }"
    # $in is an operator, so the sampled value lives under no user path
    assert pattern.field_values == {}


def test_getmore_without_originating_command():
    text = slow_query(command={"getMore": 1, "collection": "orders"})
    pattern = analyze_query_pattern(text)
    assert pattern.operation == "getMore"
    assert pattern.filter_fields == ()
    assert pattern.sort_fields == ()


def test_other_operations():
    pattern = analyze_query_pattern(list_databases)
    assert pattern.operation == "listDatabases"
    assert pattern.collection == "$cmd"
    assert pattern.plan_summary == "unknown"
    assert str(pattern) == "Collection: $cmd | Operation: listDatabases"

    pattern = analyze_query_pattern(slow_query(command={"insert": "orders", "documents": [{"a": 1}]}))
    assert pattern.operation == "other"
    assert pattern.filter_fields == ()


def test_optional_attributes():
    text = json.dumps({"attr": {"command": {"find": "orders", "filter": {"a": 1}}}})
    pattern = analyze_query_pattern(text)
    assert pattern.collection == ""
    assert pattern.operation == "find"
    assert pattern.plan_summary == "unknown"
    assert pattern.duration_ms is None

    text = json.dumps({"attr": {"ns": "shop.orders"}})
    pattern = analyze_query_pattern(text)
    assert pattern.collection == "orders"
    assert pattern.operation == ""

    text = json.dumps({"attr": {"ns": "orders", "command": {"find": "orders"}, "durationMillis": 1.5}})
    pattern = analyze_query_pattern(text)
    assert pattern.collection == ""
    assert pattern.duration_ms is None


def test_rejected_fragments():
    assert analyze_query_pattern("{not json}") is None
    assert analyze_query_pattern('{"msg": "no attr"}') is None
    assert analyze_query_pattern('{"attr": "not an object"}') is None
    assert analyze_query_pattern('{"attr": {"planSummary": "COLLSCAN"}}') is None
    assert analyze_query_pattern('{"attr": {"ns": "nodot"}}') is None


def test_parse_fragment():
    assert parse_fragment('{"a": 1}') == {"a": 1}
    assert parse_fragment('{"a": 1') is None
    assert parse_fragment('{"$oid": "zz"}') is None


def test_identity_ignores_values_and_duration():
    a = analyze_query_pattern(slow_query(duration=10))
    b = analyze_query_pattern(slow_query(duration=99, command={"find": "orders", "filter": {"status": "closed"}}))
    assert a.key == b.key
    assert a == b
    assert a.field_values != b.field_values


def test_to_dict():
    pattern = QueryPattern(collection="orders", operation="find", filter_fields=("a",), field_values={"a": "1"})
    assert pattern.to_dict() == {
        "collection": "orders",
        "operation": "find",
        "filter_fields": ["a"],
        "sort_fields": [],
        "index_used": "unknown",
        "plan_summary": "unknown",
        "duration_ms": None,
        "field_values": {"a": "1"},
    }


def test_malformed_fragments_are_skipped():
    deep = '{"a":' * 3500 + "1" + "}" * 3500
    bad_decimal = '{"attr":{"ns":"db.orders","command":{"find":"orders","filter":{"price":{"$numberDecimal":"abc"}}}}}'
    bad_date = '{"attr":{"ns":"db.orders","command":{"find":"orders","filter":{"created":{"$date":1e400}}}}}'
    for fragment in [deep, bad_decimal, bad_date]:
        assert parse_fragment(fragment) is None
        assert analyze_query_pattern(fragment) is None


def test_non_standard_numbers_are_rejected():
    for token in ["NaN", "Infinity", "-Infinity", "1e400"]:
        fragment = '{"attr":{"ns":"db.o","command":{"find":"o","filter":{"a":%s}}}}' % token
        assert analyze_query_pattern(fragment) is None


def test_run_continues_after_malformed_fragments():
    from querymine.log_analysis.framework import collect_patterns

    fields = [
        '{"a":' * 3500 + "1" + "}" * 3500,
        '{"attr":{"ns":"db.orders","command":{"find":"orders","filter":{"p":{"$numberDecimal":"abc"}}}}}',
        '{"attr":{"ns":"db.orders","command":{"find":"orders","filter":{"d":{"$date":1e400}}}}}',
        '{"attr":{"ns":"db.o","command":{"find":"o","filter":{"a":NaN}}}}',
        slow_query(),
    ]
    aggregator = collect_patterns(fields)
    results = aggregator.results()
    assert aggregator.fragments_found == 5
    assert len(results) == 1
    assert results[0][0].collection == "orders"
    assert results[0][1] == 1
