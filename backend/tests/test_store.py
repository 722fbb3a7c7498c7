import asyncio

import pytest

from fairway.store import StaleRowsError, StoreError, select_or_empty


def _holes(course, numbers, par=4):
    return [{"course_name": course, "hole_number": n, "par": par} for n in numbers]


def test_insert_generates_ids_and_returns_rows_in_order(store, run):
    rows = run(store.insert("course_holes", _holes("Links", [3, 1, 2])))
    assert [r["hole_number"] for r in rows] == [3, 1, 2]
    assert all(len(r["id"]) == 32 for r in rows)


def test_select_filters_order_and_in(store, run):
    run(store.insert("course_holes", _holes("Links", [1, 2, 3]) + _holes("Other", [1])))

    ordered = run(store.select("course_holes", {"course_name": "Links"}, order=["-hole_number"]))
    assert [r["hole_number"] for r in ordered] == [3, 2, 1]

    subset = run(
        store.select(
            "course_holes",
            {"course_name": "Links", "hole_number": [1, 3]},
            order=["hole_number"],
            columns=["hole_number"],
        )
    )
    assert subset == [{"hole_number": 1}, {"hole_number": 3}]
    assert run(store.first("course_holes", {"course_name": "Nowhere"})) is None


def test_update_returns_changed_rows_and_requires_filters(store, run):
    run(store.insert("course_holes", _holes("Links", [1, 2])))
    updated = run(store.update("course_holes", {"par": 5}, {"course_name": "Links", "hole_number": 2}))
    assert [(r["hole_number"], r["par"]) for r in updated] == [(2, 5)]

    with pytest.raises(StoreError):
        run(store.update("course_holes", {"par": 3}, {}))


def test_upsert_updates_by_id_and_inserts_new(store, run):
    (hole,) = run(store.insert("course_holes", _holes("Links", [1])))
    rows = run(
        store.upsert(
            "course_holes",
            [{**hole, "par": 3}, {**hole, "id": None, "hole_number": 2, "par": 5}],
        )
    )
    assert [(r["hole_number"], r["par"]) for r in rows] == [(1, 3), (2, 5)]
    assert rows[0]["id"] == hole["id"]
    assert len(run(store.select("course_holes"))) == 2


def test_delete_requires_filters(store, run):
    run(store.insert("course_holes", _holes("Links", [1, 2])))
    with pytest.raises(StoreError):
        run(store.delete("course_holes", {}))
    run(store.delete("course_holes", {"hole_number": 1}))
    assert [r["hole_number"] for r in run(store.select("course_holes"))] == [2]


def test_constraint_violation_raises_store_error(store, run):
    run(store.insert("course_holes", _holes("Links", [1])))
    with pytest.raises(StoreError) as excinfo:
        run(store.insert("course_holes", _holes("Links", [1])))
    assert excinfo.value.table == "course_holes"
    assert excinfo.value.operation == "insert"
    assert excinfo.value.original is not None
    # the session is usable again after the rollback
    assert len(run(store.select("course_holes"))) == 1


def test_unknown_table_or_column(store, run):
    with pytest.raises(StoreError):
        run(store.select("no_such_table"))
    with pytest.raises(StoreError):
        run(store.select("course_holes", {"colour": "green"}))


def test_concurrent_calls_on_one_client(store, run):
    async def scenario():
        await asyncio.gather(
            *(store.insert("course_holes", _holes("Links", [n])) for n in range(1, 10))
        )
        return await asyncio.gather(
            *(store.select("course_holes", {"hole_number": n}) for n in range(1, 10))
        )

    results = run(scenario())
    assert [len(rows) for rows in results] == [1] * 9


def test_select_or_empty_degrades(store, run, caplog):
    assert run(select_or_empty(store, "no_such_table")) == []
    assert "Falling back to no no_such_table rows" in caplog.text


def test_update_each_is_guarded_and_all_or_nothing(store, run):
    one, two = run(store.insert("course_holes", _holes("Links", [1, 2])))
    rows = run(
        store.update_each(
            "course_holes",
            [({"par": 3}, {"id": one["id"], "par": 4}), ({"par": 5}, {"id": two["id"], "par": 4})],
        )
    )
    assert [(r["hole_number"], r["par"]) for r in rows] == [(1, 3), (2, 5)]

    # the second guard no longer holds, so the first change is rolled back too
    with pytest.raises(StaleRowsError) as excinfo:
        run(
            store.update_each(
                "course_holes",
                [({"par": 4}, {"id": one["id"], "par": 3}), ({"par": 4}, {"id": two["id"], "par": 4})],
            )
        )
    assert excinfo.value.misses == [1]
    current = run(store.select("course_holes", {"course_name": "Links"}, order=["hole_number"]))
    assert [r["par"] for r in current] == [3, 5]


def test_replace_keeps_old_rows_when_the_insert_fails(store, run):
    run(store.insert("course_holes", _holes("Links", [1, 2, 3])))

    rows = run(store.replace("course_holes", {"course_name": "Links"}, _holes("Links", [1, 2], par=5)))
    assert [(r["hole_number"], r["par"]) for r in rows] == [(1, 5), (2, 5)]

    with pytest.raises(StoreError):
        run(store.replace("course_holes", {"course_name": "Links"}, _holes("Links", [1, 1])))
    current = run(store.select("course_holes", {"course_name": "Links"}, order=["hole_number"]))
    assert [(r["hole_number"], r["par"]) for r in current] == [(1, 5), (2, 5)]
