import io

import pytest

from pokearena.records import (
    AttackSkill,
    BuffSkill,
    DebuffSkill,
    HealSkill,
    SkillKind,
    StatKind,
)
from pokearena.skilldex import (
    SkillDex,
    describe_skill,
    main,
    normalize_menu_type,
    skill_kind_of,
)


@pytest.fixture
def dex(tmp_path):
    return SkillDex(tmp_path / "skillDex")


@pytest.mark.parametrize(
    "sid, kind",
    [
        (0, SkillKind.ATTACK),
        (99, SkillKind.ATTACK),
        (100, SkillKind.BUFF),
        (250, SkillKind.DEBUFF),
        (399, SkillKind.HEAL),
    ],
)
def test_skill_kind_of_ranges(sid, kind):
    assert skill_kind_of(sid) == kind


@pytest.mark.parametrize("sid", [-1, 400])
def test_skill_kind_of_out_of_range(sid):
    with pytest.raises(ValueError):
        skill_kind_of(sid)


@pytest.mark.parametrize(
    "choice, kind",
    [
        (1, StatKind.ATTACK),
        (2, StatKind.DEFENSE),
        (3, StatKind.SPEED),
        (4, StatKind.ATTACK | StatKind.DEFENSE),
        (7, StatKind.ATTACK | StatKind.DEFENSE | StatKind.SPEED),
    ],
)
def test_normalize_menu_type(choice, kind):
    assert normalize_menu_type(choice) == kind


@pytest.mark.parametrize("choice", [0, 8])
def test_normalize_menu_type_rejects_unknown(choice):
    with pytest.raises(ValueError):
        normalize_menu_type(choice)


def test_round_trip_every_family(dex):
    skills = [
        AttackSkill(5, "Tackle", 40, "normal"),
        BuffSkill(102, "Harden", int(StatKind.DEFENSE), 0, 3, 0),
        DebuffSkill(201, "Growl", int(StatKind.ATTACK), 2, 0, 0),
        HealSkill(300, "Rest", 20),
    ]
    for skill in skills:
        dex.write(skill)
    for skill in skills:
        assert dex.read(skill.sid) == skill


def test_attack_record_position(dex):
    skill = AttackSkill(5, "Tackle", 40, "normal")
    dex.write(skill)
    data = dex.path.read_bytes()
    start = 5 * AttackSkill.SIZE
    assert data[start:start + AttackSkill.SIZE] == skill.pack()


def test_buff_record_follows_attack_region(dex):
    skill = BuffSkill(102, "Harden", int(StatKind.DEFENSE), 0, 3, 0)
    dex.write(skill)
    data = dex.path.read_bytes()
    start = 100 * AttackSkill.SIZE + 2 * BuffSkill.SIZE
    assert data[start:start + BuffSkill.SIZE] == skill.pack()


def test_overwrite_keeps_latest(dex):
    dex.write(HealSkill(310, "Rest", 20))
    dex.write(HealSkill(310, "Recover", 35))
    assert dex.read(310) == HealSkill(310, "Recover", 35)


def test_write_rejects_wrong_family(dex):
    with pytest.raises(ValueError):
        dex.write(HealSkill(5, "Rest", 20))


def test_read_missing_and_gap(dex):
    dex.write(AttackSkill(10, "Ember", 30, "fire"))
    with pytest.raises(KeyError):
        dex.read(3)
    with pytest.raises(KeyError):
        dex.read(150)
    with pytest.raises(KeyError):
        dex.read(400)


def test_describe_heal():
    assert describe_skill(HealSkill(300, "Rest", 20)) == (
        "스킬 ID : 300  스킬이름 : Rest  타입 : 힐  힐량 : 20"
    )


def test_describe_attack_mentions_fields():
    text = describe_skill(AttackSkill(5, "Tackle", 40, "normal"))
    assert text.splitlines() == [
        "스킬 ID : 5  스킬이름 : Tackle  타입 : 공격",
        "데미지 : 40  속성 : normal",
    ]


def test_describe_combined_buff():
    skill = BuffSkill(101, "Focus", int(StatKind.ATTACK | StatKind.DEFENSE), 4, 5, 0)
    lines = describe_skill(skill).splitlines()
    assert lines[1] == "버프 종류 : 공격력 + 방어력"
    assert lines[2] == "공격력 증가량 : 4  방어력 증가량 : 5"


def test_describe_debuff_speed():
    skill = DebuffSkill(205, "Slow", int(StatKind.SPEED), 0, 0, 6)
    lines = describe_skill(skill).splitlines()
    assert lines[1] == "디버프 종류 : 속도"
    assert lines[2] == "속도 감소량 : 6"


def test_main_create_then_check(tmp_path, monkeypatch, capsys):
    path = tmp_path / "skillDex"
    monkeypatch.setattr("sys.stdin", io.StringIO("0 7 Tackle 40 normal Y 1 103 Agility 3 9 N\n"))
    assert main(["--dex", str(path), "create"]) == 0
    dex = SkillDex(path)
    assert dex.read(7) == AttackSkill(7, "Tackle", 40, "normal")
    assert dex.read(103) == BuffSkill(103, "Agility", int(StatKind.SPEED), 0, 0, 9)

    capsys.readouterr()
    monkeypatch.setattr("sys.stdin", io.StringIO("7 N\n"))
    assert main(["--dex", str(path), "check"]) == 0
    assert "Tackle" in capsys.readouterr().out


def test_main_update_heal(tmp_path, monkeypatch):
    path = tmp_path / "skillDex"
    dex = SkillDex(path)
    dex.write(HealSkill(302, "Rest", 20))
    monkeypatch.setattr("sys.stdin", io.StringIO("302 Recover 45 N\n"))
    assert main(["--dex", str(path), "update"]) == 0
    assert dex.read(302) == HealSkill(302, "Recover", 45)


def test_main_check_without_file(tmp_path):
    assert main(["--dex", str(tmp_path / "absent"), "check"]) == 2