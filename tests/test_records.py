import pytest

from pokearena.records import (
    AttackSkill,
    BuffSkill,
    Choice,
    DebuffSkill,
    Event,
    HealSkill,
    Monster,
    MonsterSkills,
    MonsterStats,
    Player,
    Price,
    SkillKind,
    StatKind,
)


def sample_monster():
    return Monster(
        mid=7,
        name="피카츄",
        element="전기",
        stats=MonsterStats(level=1, exp=0, hp=35, attack=55, defense=40, speed=90),
        skills=MonsterSkills(3, -1, -1, -1),
    )


def test_monster_layout_size():
    assert Monster.SIZE == 144
    assert len(sample_monster().pack()) == Monster.SIZE


def test_monster_round_trip():
    monster = sample_monster()
    assert Monster.unpack(monster.pack()) == monster


def test_monster_wire_starts_with_id_and_name():
    data = sample_monster().pack()
    assert data[:4] == (7).to_bytes(4, "little")
    encoded = "피카츄".encode("utf-8")
    assert data[4:4 + len(encoded)] == encoded
    assert data[4 + len(encoded)] == 0


def test_monster_name_too_long():
    with pytest.raises(ValueError):
        Monster(name="x" * 50).pack()


def test_monster_unpack_wrong_length():
    with pytest.raises(ValueError):
        Monster.unpack(b"\0" * 10)


def test_player_round_trip_and_size():
    player = Player(flag=1, player_id=22, process_id=4321, my_turn=1, won=1, monster=sample_monster())
    data = player.pack()
    assert len(data) == Player.SIZE
    assert Player.SIZE == Monster.SIZE + 9 * 4
    assert Player.unpack(data) == player


def test_attack_skill_round_trip():
    skill = AttackSkill(sid=5, name="번개", damage=40, element="전기")
    assert AttackSkill.SIZE == 112
    assert AttackSkill.unpack(skill.pack()) == skill


def test_buff_and_debuff_round_trip():
    buff = BuffSkill(sid=101, name="강화", kind=StatKind.ATTACK | StatKind.SPEED, attack=3, speed=2)
    debuff = DebuffSkill(sid=202, name="약화", kind=StatKind.DEFENSE, defense=4)
    assert BuffSkill.unpack(buff.pack()) == buff
    assert DebuffSkill.unpack(debuff.pack()) == debuff
    assert BuffSkill.unpack(buff.pack()).kind == 5


def test_heal_skill_round_trip():
    skill = HealSkill(sid=301, name="회복", amount=20)
    assert HealSkill.unpack(skill.pack()) == skill


@pytest.mark.parametrize(
    "value, member, first_id",
    [
        (0, SkillKind.ATTACK, 0),
        (1, SkillKind.BUFF, 100),
        (3, SkillKind.HEAL, 300),
    ],
)
def test_skill_kind_blocks(value, member, first_id):
    kind = SkillKind(value)
    assert kind is member
    assert kind.first_id == first_id


def test_event_round_trip():
    event = Event(
        event_id=2,
        story="숲에서 길을 잃었다",
        choices=[
            Choice("앞으로 간다", "열매를 찾았다", Price(hp=5)),
            Choice("돌아간다", "아무 일도 없었다", Price(speed=1, skill=12)),
        ],
    )
    data = event.pack()
    assert len(data) == Event.SIZE == 1208
    back = Event.unpack(data)
    assert back == event
    assert back.choice_num == 2


def test_event_too_many_choices():
    with pytest.raises(ValueError):
        Event(choices=[Choice() for _ in range(6)]).pack()


def test_event_unpack_clamps_choice_count():
    data = bytearray(Event(event_id=1, story="s", choices=[Choice("a", "b")]).pack())
    data[4:8] = (99).to_bytes(4, "little")
    assert Event.unpack(bytes(data)).choice_num == 5