from trainlog.services.pr_service import PRDeduplicator


def test_latest_entry_and_history_count(make_test):
    history = [
        make_test("grip_strength", 100, days=60),
        make_test("grip_strength", 110, days=30),
        make_test("grip_strength", 120, days=1),
    ]

    (latest,) = PRDeduplicator().latest_per_type(history)

    assert latest.record.result_value == 120
    assert latest.history_count == 3
    assert latest.history_label == "3 entries"


def test_one_entry_per_type_newest_first(make_test):
    history = [
        make_test("wrist_curl", 50, days=2),
        make_test("grip_strength", 100, days=20),
        make_test("pronation", 40, days=10),
        make_test("wrist_curl", 45, days=40),
    ]

    latest = PRDeduplicator().latest_per_type(history)

    assert [pr.test_type for pr in latest] == ["wrist_curl", "pronation", "grip_strength"]
    assert [pr.history_count for pr in latest] == [2, 1, 1]
    assert latest[-1].history_label == "1 entry"


def test_input_order_does_not_matter(make_test):
    older = make_test("cupping", 30, days=5)
    newer = make_test("cupping", 35, days=1)

    deduplicator = PRDeduplicator()

    assert deduplicator.latest_per_type([older, newer]) == deduplicator.latest_per_type([newer, older])


def test_differently_spelled_types_share_a_history(make_test):
    history = [
        make_test("Max Wrist Curl", 60, days=9),
        make_test("max-wrist-curl", 65, days=3),
    ]

    deduplicator = PRDeduplicator()
    (latest,) = deduplicator.latest_per_type(history)

    assert latest.test_type == "max_wrist_curl"
    assert latest.history_count == 2
    assert deduplicator.history_count_for_type(history, "Max Wrist Curl") == 2


def test_history_for_type_is_oldest_first(make_test):
    history = [
        make_test("grip_strength", 120, days=1),
        make_test("grip_strength", 100, days=60),
        make_test("rising", 80, days=5),
    ]

    values = [t.result_value for t in PRDeduplicator().history_for_type(history, "grip_strength")]

    assert values == [100, 120]


def test_empty_history():
    assert PRDeduplicator().latest_per_type([]) == ()
