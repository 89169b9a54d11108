import pytest
from hypothesis import given, strategies as st

from forkpool.exceptions import GroupNotFoundError, WorkerAlreadyRegisteredError
from forkpool.pool import Registry

group_names = st.lists(
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8),
    min_size=1,
    max_size=5,
    unique=True,
)

# (group index, pid) pairs; indexes are reduced modulo the number of groups
assignments = st.lists(
    st.tuples(st.integers(min_value=0, max_value=10), st.integers(min_value=1, max_value=10_000)),
    max_size=40,
    unique_by=lambda pair: pair[1],
)


def _build(names: list[str], pairs: list[tuple[int, int]]) -> tuple[Registry, dict[int, str]]:
    registry = Registry()
    for name in names:
        registry.add_group(name, {"group": name})
    owners: dict[int, str] = {}
    for index, pid in pairs:
        group = names[index % len(names)]
        registry.add_worker(group, pid)
        owners[pid] = group
    return registry, owners


@given(names=group_names, pairs=assignments)
def test_every_pid_belongs_to_exactly_one_group(
    names: list[str], pairs: list[tuple[int, int]]
) -> None:
    registry, owners = _build(names, pairs)

    pids = registry.worker_pids()
    assert len(pids) == len(set(pids))
    assert set(pids) == set(owners)
    for pid, group in owners.items():
        assert registry.group(pid) == group


@given(names=group_names, pairs=assignments)
def test_worker_counts_sum_to_total(names: list[str], pairs: list[tuple[int, int]]) -> None:
    registry, _ = _build(names, pairs)

    assert sum(registry.worker_count(name) for name in names) == len(registry.worker_pids())
    assert registry.has_workers() == bool(pairs)


@given(names=group_names, pairs=assignments)
def test_worker_pids_follow_group_then_insertion_order(
    names: list[str], pairs: list[tuple[int, int]]
) -> None:
    registry, owners = _build(names, pairs)

    expected = [
        pid for name in names for _, pid in pairs if owners[pid] == name
    ]
    assert registry.worker_pids() == expected


@given(names=group_names, pairs=assignments, data=st.data())
def test_removing_a_worker_leaves_other_groups_untouched(
    names: list[str], pairs: list[tuple[int, int]], data: st.DataObject
) -> None:
    registry, owners = _build(names, pairs)
    if not owners:
        return
    victim = data.draw(st.sampled_from(sorted(owners)))
    before = {name: registry.worker_count(name) for name in names}

    registry.remove_worker(victim)

    assert not registry.includes_worker(victim)
    for name in names:
        expected = before[name] - (1 if owners[victim] == name else 0)
        assert registry.worker_count(name) == expected
    with pytest.raises(GroupNotFoundError):
        _ = registry.group(victim)


@given(names=group_names, pairs=assignments.filter(bool), data=st.data())
def test_a_tracked_pid_cannot_join_another_group(
    names: list[str], pairs: list[tuple[int, int]], data: st.DataObject
) -> None:
    registry, owners = _build(names, pairs)
    pid = data.draw(st.sampled_from(sorted(owners)))
    target = data.draw(st.sampled_from(names))

    with pytest.raises(WorkerAlreadyRegisteredError):
        registry.add_worker(target, pid)

    assert registry.group(pid) == owners[pid]
