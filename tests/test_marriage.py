from datetime import date

import pytest

from groupfun.marriage import ALL_GROUPS, Couple, MarriageRegistry, Status, slice_name

DAY1 = date(2022, 8, 1)
DAY2 = date(2022, 8, 2)


@pytest.fixture
def registry(tmp_path):
    reg = MarriageRegistry(tmp_path / "register.db")
    yield reg
    reg.close()


def test_check_update_new_group_records_today(registry):
    assert registry.check_update(10, DAY1) == DAY1
    assert registry.check_update(10, DAY2) == DAY1


def test_register_and_lookup(registry):
    couple = registry.register(10, 1, 2, "alice", "bob", DAY1)
    assert couple.updatetime == "2022/08/01"
    assert registry.lookup(10, 1) == (couple, Status.HUSBAND)
    assert registry.lookup(10, 2) == (couple, Status.WIFE)
    assert registry.lookup(10, 3) == (None, Status.SINGLE)
    assert registry.lookup(11, 1) == (None, Status.SINGLE)


def test_single_noble_is_registered_but_not_in_roster(registry):
    registry.register(10, 5, 0, "", "", DAY1)
    info, status = registry.lookup(10, 5)
    assert status == Status.HUSBAND
    assert info.target == 0
    assert registry.roster(10) == []


def test_roster_lists_couples_ordered_by_user(registry):
    registry.register(10, 7, 8, "g", "h", DAY1)
    registry.register(10, 3, 4, "c", "d", DAY1)
    registry.register(11, 1, 2, "a", "b", DAY1)
    assert [c.user for c in registry.roster(10)] == [3, 7]
    assert registry.roster(10)[0] == Couple(3, 4, "c", "d", "2022/08/01")


def test_divorce_wife_and_husband(registry):
    registry.register(10, 1, 2, "a", "b", DAY1)
    registry.register(10, 3, 4, "c", "d", DAY1)
    registry.divorce_wife(10, 2)
    assert registry.lookup(10, 1)[1] == Status.SINGLE
    registry.divorce_husband(10, 3)
    assert registry.lookup(10, 4)[1] == Status.SINGLE
    assert registry.roster(10) == []


def test_reset_one_group(registry):
    registry.check_update(10, DAY1)
    registry.register(10, 1, 2, "a", "b", DAY1)
    registry.register(11, 1, 2, "a", "b", DAY1)
    registry.reset(str(10), DAY2)
    assert registry.roster(10) == []
    assert len(registry.roster(11)) == 1
    assert registry.check_update(10, DAY2) == DAY2


def test_reset_all_groups(registry):
    registry.register(10, 1, 2, "a", "b", DAY1)
    registry.register(11, 3, 4, "c", "d", DAY1)
    registry.reset(ALL_GROUPS, DAY2)
    assert registry.roster(10) == []
    assert registry.roster(11) == []
    assert registry.check_update(11, DAY1) == DAY2


def test_reset_rejects_bad_group(registry):
    with pytest.raises(ValueError):
        registry.reset("nope", DAY1)


def test_remarry_husband_takes_new_wife(registry):
    registry.register(10, 1, 2, "a", "b", DAY1)
    registry.remarry(10, 1, 9, "a", "z", DAY2)
    info, status = registry.lookup(10, 9)
    assert status == Status.WIFE
    assert info.user == 1
    assert registry.lookup(10, 2)[1] == Status.SINGLE


def test_remarry_without_record_raises(registry):
    with pytest.raises(LookupError):
        registry.remarry(10, 1, 2, "a", "b", DAY1)


def test_register_survives_reopen(tmp_path):
    path = tmp_path / "register.db"
    with MarriageRegistry(path) as reg:
        reg.register(10, 1, 2, "a", "b", DAY1)
    with MarriageRegistry(path) as reg:
        assert reg.lookup(10, 2)[1] == Status.WIFE


def test_slice_name_short_name_kept():
    assert slice_name("abc", lambda s: 10) == "abc"


def test_slice_name_long_name_cut():
    result = slice_name("abcdefg", lambda s: 100)
    assert result.endswith("......")
    assert result == "a......"