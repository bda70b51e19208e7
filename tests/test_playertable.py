import uuid

import pytest

from pokearena.playertable import (
    PlayerTable,
    format_battle_state,
    format_monster_card,
    reset_battle_state,
)
from pokearena.records import Monster, MonsterStats, Player


@pytest.fixture
def table():
    t = PlayerTable.create(f"pa_{uuid.uuid4().hex[:12]}")
    yield t
    t.close()
    t.unlink()


def test_fresh_table_is_zeroed(table):
    players = list(table)
    assert len(players) == len(table) == 4
    assert all(p.flag == 0 and p.player_id == 0 and p.monster.name == "" for p in players)


def test_set_and_get(table):
    player = Player(flag=1, player_id=22, monster=Monster(mid=3, name="꼬부기"))
    table[2] = player
    assert table[2] == player
    assert table[-2] == player
    assert table[0].player_id == 0


def test_index_out_of_range(table):
    with pytest.raises(IndexError):
        table[4]
    with pytest.raises(IndexError):
        table[-5] = Player()


def test_attach_shares_data(table):
    with PlayerTable.attach(table.name) as other:
        other[1] = Player(player_id=281)
        assert table[1].player_id == 281
    table.update(3, won=1)
    with PlayerTable.attach(table.name) as other:
        assert other[3].won == 1


def test_attach_missing():
    with pytest.raises(FileNotFoundError):
        PlayerTable.attach(f"pa_{uuid.uuid4().hex[:12]}")


def test_update_returns_and_persists(table):
    result = table.update(0, dead=1, battle_end=1)
    assert result.dead == 1
    assert table[0].battle_end == 1
    with pytest.raises(TypeError):
        table.update(0, nonsense=1)


def test_closed_table_refuses_access():
    t = PlayerTable.create(f"pa_{uuid.uuid4().hex[:12]}")
    try:
        t.update(0, player_id=5)
        assert t[0].player_id == 5
        t.close()
        with pytest.raises(ValueError):
            t[0]
        with PlayerTable.attach(t.name) as other:
            assert other[0].player_id == 5
    finally:
        t.unlink()


def test_reset_battle_state(table):
    table[1] = Player(dead=1, my_turn=1, battle_end=1, won=1, monster=Monster(name="이상해씨"))
    reset_battle_state(table)
    players = list(table)
    assert [p.player_id for p in players] == [1, 2, 3, 4]
    assert [p.monster.stats.speed for p in players] == [7, 6, 5, 4]
    assert all(p.monster.stats.hp == 8 and p.monster.stats.attack == 2 for p in players)
    assert all(p.dead == p.my_turn == p.battle_end == p.won == 0 for p in players)
    assert players[1].monster.name == "이상해씨"


def test_format_battle_state(table):
    table.update(2, dead=1)
    lines = format_battle_state(table).splitlines()
    assert "processID: 3" in lines
    position = lines.index("processID: 3")
    assert lines[position + 1] == "is_dead: 1"
    assert lines.count("is_Win: 0") == 4


def test_format_monster_card():
    monster = Monster(name="Pika", element="Electric",
                      stats=MonsterStats(level=1, exp=0, hp=35, attack=55, defense=40, speed=90))
    lines = format_monster_card(monster).splitlines()
    assert lines[0] == ""
    assert lines[3].split() == ["Pika", "Electric"]
    assert lines[6].split() == ["1", "0", "35", "55", "40", "90"]
    assert lines[-1] == "스킬"