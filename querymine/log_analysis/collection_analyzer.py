from querymine.log_analysis.shared import COLLSCAN, UNKNOWN

FILTER_TAG = "filter:"
SORT_TAG = "sort:"
OPERATION_TAG = "operation:"
PLAN_TAG = "plan:"


def analyze_collection_field_patterns(patterns):
    """
    Sum occurrence counts per collection and tagged key.

    Tagged keys are `filter:<field>`, `sort:<field>`, `operation:<op>` and
    `plan:<summary>`. Both levels are returned in lexicographic order.
    """
    stats = {}
    for pattern, count in patterns:
        coll_stats = stats.setdefault(pattern.collection, {})
        keys = [f"{FILTER_TAG}{f}" for f in pattern.filter_fields]
        keys.extend(f"{SORT_TAG}{f}" for f in pattern.sort_fields)
        keys.append(f"{OPERATION_TAG}{pattern.operation}")
        if pattern.plan_summary and pattern.plan_summary != UNKNOWN:
            keys.append(f"{PLAN_TAG}{pattern.plan_summary}")
        for key in keys:
            coll_stats[key] = coll_stats.get(key, 0) + count
    return {coll: dict(sorted(stats[coll].items())) for coll in sorted(stats)}


def suggested_index(collection, fields):
    spec = ", ".join(f"{f}: 1" for f in fields)
    return f"db.{collection}.createIndex({{ {spec} }})"


def collection_recommendations(collection, field_stats, top=10):
    """
    Index hints for one collection, looking at its `top` most used tagged keys.

    Returns:
        dict: with `top_keys` (list of `(key, count)`), `collscan_count`,
        `filter_fields`, `sort_fields`, `index_fields` (filter fields worth an
        index when collection scans were seen), `sort_index_fields` and
        `compound_index` (None when filters or sorts are missing).
    """
    top_keys = sorted(field_stats.items(), key=lambda kv: kv[1], reverse=True)[:top]
    collscan_count = 0
    filters = []
    sorts = []
    for key, count in top_keys:
        if key.startswith(f"{PLAN_TAG}{COLLSCAN}"):
            collscan_count = count
        elif key.startswith(FILTER_TAG):
            filters.append(key[len(FILTER_TAG):])
        elif key.startswith(SORT_TAG):
            sorts.append(key[len(SORT_TAG):])

    compound_index = None
    if filters and sorts:
        compound_index = suggested_index(collection, filters[:2] + sorts[:1])
    return {
        "top_keys": top_keys,
        "collscan_count": collscan_count,
        "filter_fields": filters,
        "sort_fields": sorts,
        "index_fields": filters[:3] if collscan_count > 0 else [],
        "sort_index_fields": sorts[:2] if collscan_count > 0 else [],
        "compound_index": compound_index,
    }
