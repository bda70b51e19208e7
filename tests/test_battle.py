from dataclasses import replace

import pytest

from pokearena.battle import (
    Outcome,
    PlayerNotFound,
    attack,
    battle_outcome,
    choose_opponent,
    decide_first_turn,
    find_player_index,
    finish_if_defeated,
    main,
    prepare_battle,
    run_battle_client,
    wait_all_battles_end,
)
from pokearena.playertable import PlayerTable, reset_battle_state


@pytest.fixture
def table():
    t = PlayerTable.create(None)
    reset_battle_state(t)
    yield t
    t.close()
    t.unlink()


def _set_hp(table, index, hp):
    monster = table[index].monster
    table.update(index, monster=replace(monster, stats=replace(monster.stats, hp=hp)))


def _answers(*values):
    it = iter(values)
    return lambda prompt: next(it)


def _no_poll():
    raise AssertionError("should not wait")


def test_find_player_index(table):
    assert find_player_index(table, 3) == 2
    assert find_player_index(table, 1) == 0


def test_find_player_index_missing(table):
    with pytest.raises(PlayerNotFound):
        find_player_index(table, 99)


@pytest.mark.parametrize("index,expected", [(0, 1), (1, 0), (2, 3), (3, 2)])
def test_choose_opponent_first_round(table, index, expected):
    assert choose_opponent(table, index) == expected


def test_choose_opponent_between_winners(table):
    table.update(0, won=1)
    table.update(2, won=1)
    assert choose_opponent(table, 0) == 2
    assert choose_opponent(table, 2) == 0


def test_prepare_battle_clears_flags_for_winner(table):
    table.update(0, won=1, battle_end=1, my_turn=1)
    table.update(3, won=1)
    assert prepare_battle(table, 0) == 3
    assert table[0].battle_end == 0
    assert table[0].my_turn == 0


def test_decide_first_turn_faster_goes_first(table):
    assert decide_first_turn(table, 1, 0) is False
    assert table[0].my_turn == 1
    assert table[1].my_turn == 0


def test_decide_first_turn_tie_favours_caller(table):
    monster = table[1].monster
    table.update(1, monster=replace(monster, stats=replace(monster.stats, speed=table[0].monster.stats.speed)))
    assert decide_first_turn(table, 1, 0) is True
    assert table[1].my_turn == 1
    assert table[0].my_turn == 0


def test_attack_reduces_defender_hp(table):
    before = table[1].monster.stats.hp
    power = table[0].monster.stats.attack
    hp = attack(table, 0, 1)
    assert hp == before - power
    assert table[1].monster.stats.hp == hp
    assert table[0].monster.stats.hp == before


def test_finish_if_defeated(table):
    assert finish_if_defeated(table, 0, 1) is False
    assert table[1].dead == 0
    _set_hp(table, 1, 0)
    assert finish_if_defeated(table, 0, 1) is True
    assert (table[1].dead, table[1].battle_end) == (1, 1)
    assert (table[0].won, table[0].battle_end) == (1, 1)


def test_client_wins_with_one_blow(table):
    _set_hp(table, 1, table[0].monster.stats.attack)
    won = run_battle_client(table, 0, ask=_answers("1", "1"), out=lambda s: None, poll=_no_poll)
    assert won is True
    assert table[1].dead == 1
    assert table[0].won == 1
    assert table[0].battle_end == 1 and table[1].battle_end == 1


def test_client_loses_while_waiting(table):
    def opponent_strikes():
        _set_hp(table, 1, 0)
        table.update(0, my_turn=0)

    won = run_battle_client(table, 1, ask=_answers(), out=lambda s: None, poll=opponent_strikes)
    assert won is False
    assert table[1].dead == 1
    assert table[0].won == 1


def test_client_declining_to_attack_deals_no_damage(table):
    before = table[1].monster.stats.hp

    def opponent_strikes():
        _set_hp(table, 0, 0)
        table.update(1, my_turn=0)

    won = run_battle_client(table, 0, ask=_answers("0"), out=lambda s: None, poll=opponent_strikes)
    assert won is False
    assert table[1].monster.stats.hp == before
    assert table[0].dead == 1
    assert table[1].won == 1


def test_client_rejects_bad_answer(table):
    with pytest.raises(ValueError):
        run_battle_client(table, 0, ask=_answers("7"), out=lambda s: None, poll=_no_poll)


def test_wait_all_battles_end(table):
    for index in range(3):
        table.update(index, battle_end=1)
    calls = []

    def poll():
        calls.append(None)
        table.update(3, battle_end=1)

    wait_all_battles_end(table, poll=poll)
    assert all(p.battle_end == 1 for p in table)
    assert len(calls) >= 1


def test_battle_outcomes(table):
    table.update(1, dead=1)
    assert battle_outcome(table, 1) is Outcome.LOST
    assert battle_outcome(table, 0) is Outcome.UNDECIDED
    table.update(0, won=1)
    table.update(2, won=1)
    assert battle_outcome(table, 0) is Outcome.ADVANCED
    table.update(2, dead=1)
    assert battle_outcome(table, 0) is Outcome.CHAMPION


def test_main_without_table_fails():
    assert main(["1", "--table", "pokearena_missing_table_for_test"]) == 1