from lazyforms.ranking import group_by_context_type, sort_by_specificity, specificity


def test_specificity_order(make_entry):
    entries = [make_entry(t, "*") for t in ("urlPattern", "all", "domain", "url", "fieldOnly")]
    ranked = sort_by_specificity(entries)
    assert [e.context_type for e in ranked] == ["fieldOnly", "url", "domain", "all", "urlPattern"]


def test_unknown_types_sort_last(make_entry):
    unknown = make_entry("somethingNew", "*")
    ranked = sort_by_specificity([unknown, make_entry("urlPattern", "*")])
    assert ranked[-1] is unknown
    assert specificity(unknown) == 99


def test_order_takes_precedence_over_created_at(make_entry):
    late = make_entry("url", "x", createdAt=100, order=1)
    early = make_entry("url", "x", createdAt=1, order=2)
    unordered = make_entry("url", "x", createdAt=50)
    ranked = sort_by_specificity([early, unordered, late])
    assert ranked == [late, early, unordered]


def test_equal_keys_keep_input_order(make_entry):
    a = make_entry("domain", "x", createdAt=5, id="a")
    b = make_entry("domain", "x", createdAt=5, id="b")
    assert [e.id for e in sort_by_specificity([a, b])] == ["a", "b"]
    assert [e.id for e in sort_by_specificity([b, a])] == ["b", "a"]


def test_group_by_context_type(make_entry):
    entries = [
        make_entry("urlPattern", "*", createdAt=3),
        make_entry("fieldOnly", "#a", createdAt=2),
        make_entry("fieldOnly", "#b", createdAt=1),
        make_entry("unknown", "*"),
    ]
    groups = group_by_context_type(entries)
    assert [e.context_key for e in groups["fieldOnly"]] == ["#b", "#a"]
    assert len(groups["pattern"]) == 2
    assert groups["url"] == groups["domain"] == groups["all"] == []
