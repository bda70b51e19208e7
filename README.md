# pokearena

A console tournament for four players. Each player picks a monster from a
monster dex, grows it through a few random story events, and then fights
turn-based battles against the other players until one is left standing.
The players share one table of state held in named shared memory
(`pokearena.playertable.PlayerTable`), so each of them runs the game in a
terminal of their own on the same machine. It needs a POSIX system: the pipe
tools use `os.mkfifo` and `os.fork`.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The data files

The game works with fixed-size binary record files (see `pokearena.records`):

- a monster dex (default `monsterDex`), one `Monster` record per monster id;
- a skill dex (default `skillDex`), with attack, buff, debuff and heal skills
  (`AttackSkill`, `BuffSkill`, `DebuffSkill`, `HealSkill`) stored in blocks of
  one hundred ids per kind: 0-99 attack, 100-199 buff, 200-299 debuff,
  300-399 heal;
- an event dex (default `eventDex`) of `Event` records, each with a story, up
  to five choices and a `Price` (reward) for each choice.

Events are written as plain text first (default `eventDex.txt`): text before
the first blank line is a header, then blank-line terminated blocks each hold
a story line and, for every choice, a choice line, a result line and a line
of five reward numbers (`HP AP DP SP skill`, with `-1` for no skill).
`pokearena.events.convert_text_to_binary` turns such a text file into an
event dex.

## Commands

- `pokearena-monsterdex {create,check,update} [--dex FILE]` creates, looks up
  and edits monsters, reading answers from standard input. `create` starts a
  fresh, empty file.
- `pokearena-skilldex {create,check,update} [--dex FILE]` does the same for
  skills.
- `pokearena-events {convert,create,show} [--text FILE] [--dex FILE]`
  converts the text event file, adds events interactively, or prints every
  event of the event dex.
- `pokearena-tournament [join|serve] [--table NAME] [--dex FILE] [--text FILE]`
  starts a player. `join` (the default) asks whether this player sets up the
  shared table; if so it creates and initialises the table and starts a
  `serve` process that reports each player as they pick a monster. The player
  then picks a monster, sees its card, and goes through a growth scene, a
  battle, a second growth scene and a final battle.
- `pokearena-grow PLAYER_INDEX [--text FILE] [--table NAME] [--days N]` runs
  the growth scene for one slot of the table.
- `pokearena-battle PLAYER [--table NAME] [--client]` runs the battle scene
  for a player id, or with `--client` just the battle for a slot index.
- `pokearena-pipes {server,client,read,write,greet,battle-fifos} [--dir DIR]`
  holds a two-way chat over named FIFOs between two terminals (`server` and
  `client`), sends and reads NUL-terminated messages over a named pipe
  (`write` and `read`), shows a greeting passed from a forked child
  (`greet`), or creates and opens the four battle FIFOs (`battle-fifos`).

## Using it as a library

```python
from pokearena.monsterdex import MonsterDex, new_monster, format_monster

dex = MonsterDex("monsterDex")
dex.write(new_monster(0, "Sparky", "electric", 30, 8, 5, 9, 0))
print(format_monster(dex.read(0)))
dex.add_exp(0, 15)
```

The battle rules live in `pokearena.battle`: the opening round pairs slot 1
with slot 2 and slot 3 with slot 4 (`choose_opponent`), the faster monster
moves first with ties going to the player whose turn is being decided
(`decide_first_turn`), every `attack` takes the attacker's attack power from
the defender's HP, and `finish_if_defeated` marks the loser dead once its HP
is zero or below. `battle_outcome` tells whether a player has lost, advanced
or won the tournament. Rewards from growth events are applied with
`pokearena.growth.apply_reward`: a skill reward fills the first free skill
slot, otherwise the stat changes are added.

## What it does not do

- Battles use only HP, attack power and speed. Skills, defense, levels and
  experience are stored and can be edited, but no battle rule uses them.
- The growth scene reads events from the text event file; the binary event
  dex is only built and shown by `pokearena-events`.
- `pokearena-pipes battle-fifos` only creates and opens the battle FIFOs;
  battles themselves run through the shared player table, not over pipes.
- There is no network play: all four players must be on the same machine.