# peril

Building blocks for **Peril**, a small multiplayer war game whose players
exchange messages through an AMQP broker such as RabbitMQ. The package holds
the game rules, the message models, a game-log writer and publish/subscribe
helpers built on `pika`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `peril.routing`

Constants for exchanges and routing keys: `ARMY_MOVES_PREFIX` (`army_moves`),
`WAR_RECOGNITIONS_PREFIX` (`war`), `PAUSE_KEY` (`pause`), `GAME_LOG_SLUG`
(`game_logs`), `EXCHANGE_PERIL_DIRECT` (`peril_direct`) and
`EXCHANGE_PERIL_TOPIC` (`peril_topic`).

Two frozen dataclasses travel over the broker:

- `PlayingState(is_paused)`
- `GameLog(current_time, message, username)`

Both have `to_dict()` and `from_dict(data)`. The keys are `IsPaused`,
`CurrentTime`, `Message` and `Username`. A `GameLog` timestamp is written in
ISO 8601 form, with `Z` for UTC. Fractions of a second beyond microseconds are
cut off when a timestamp is read.

### `peril.gamedata`

- `UnitRank`: an enum of `infantry`, `cavalry` and `artillery`.
- `Unit(id, rank, location)`, `Player(username, units)`,
  `ArmyMove(player, units, to_location)` and
  `RecognitionOfWar(attacker, defender)`. Each has `to_dict()` and
  `from_dict(data)`.
- `all_ranks()` returns every `UnitRank`.
- `all_locations()` returns the valid locations: americas, europe, africa,
  asia, australia and antarctica.

### `peril.gamestate`

`GameState(username)` is one player's view of the game. A lock guards it, so
it can be shared between threads.

- Commands: `command_spawn(words)` returns the new `Unit`, numbered one past
  the current unit count. `command_move(words)` returns an `ArmyMove`.
  `command_status()` prints the pause state and the player's units. Invalid
  input, or a move while the game is paused, raises `GameError`.
- Events: `handle_move(move)` returns a `MoveOutcome` (`SAME_PLAYER`, `SAFE`,
  `MAKE_WAR`). `handle_pause(state)` pauses or resumes the game.
  `handle_war(recognition)` returns a tuple of a `WarOutcome` and the winner's
  and loser's usernames.
- State access: `pause_game`, `resume_game`, `is_paused`, `add_unit`,
  `update_unit`, `remove_units_in_location`, `get_unit` (returns `None` if the
  unit is missing), `units_snapshot`, `player_snapshot` and the `username`
  property.
- Helpers: `get_overlapping_location(first, second)` returns a location where
  both players have units, or `None`. `units_to_power_level(units)` totals the
  units' power: artillery 10, cavalry 5 and infantry 1.

`handle_war` fights only when this state's player is the attacker. If the
player is the defender or is not named, it returns `NOT_INVOLVED`. If the two
sides have no location in common, it returns `NO_UNITS`. The outcomes are:

- The attacker has more power: `YOU_WON`.
- The defender has more power: `OPPONENT_WON`, and the player's own units in
  the contested location are removed.
- The powers are equal: `DRAW`, and the player's own units in the contested
  location are removed.

### `peril.console`

Terminal helpers:

- `client_welcome()` prompts for a username and returns it. It raises
  `GameError` if none is given.
- `get_input()` prompts with `> ` and returns the words of one line from
  standard input.
- `print_client_help()`, `print_server_help()` and `print_quit()` print their
  text and return it.
- `get_malicious_log()` returns a random quotation from `MALICIOUS_LOGS`.

### `peril.logs`

`write_log(gamelog, path="game.log")` first waits `WRITE_TO_DISK_SLEEP`
(one second). It then appends one line of the form
`<timestamp> <username>: <message>` to `path`. The timestamp is RFC 3339 to
the second, and a naive time is taken as local time.

### `peril.pubsub`

- `publish_json(channel, exchange, key, value)` publishes `value` as
  `application/json`.
- `publish_gob(channel, exchange, key, value)` publishes `value` as
  `application/gob` in the package's own compact tagged binary encoding. This
  encoding is understood only by `subscribe_gob`.

  Objects with a `to_dict()` method are converted before either one publishes
  them.
- `declare_and_bind(connection, exchange, queue_name, key, queue_type)` opens a
  channel and declares the queue with the dead-letter exchange `peril_dlx`.
  `SimpleQueueType.DURABLE` makes the queue durable. `SimpleQueueType.TRANSIENT`
  makes it exclusive and auto-deleted. The queue is then bound, and the
  function returns the channel and the queue name.
- `subscribe_json(...)` and `subscribe_gob(...)` declare and bind the queue and
  register a consumer. They return the channel; call `start_consuming()` on it
  to receive messages. The optional `decode` callable turns the payload into
  the handler's type, for example `ArmyMove.from_dict`. The handler returns an
  `AckType`: `ACK`, `NACK_REQUEUE` or `NACK_DISCARD`. A message that cannot be
  decoded is left unacknowledged. `subscribe_gob` sets a prefetch of 10.

## Example

```python
from peril.gamestate import GameState, GameError

state = GameState("alice")
state.command_spawn(["spawn", "europe", "infantry"])
state.command_spawn(["spawn", "europe", "cavalry"])

move = state.command_move(["move", "asia", "1"])
state.command_status()

try:
    state.command_move(["move", "atlantis", "1"])
except GameError as err:
    print(err)  # error: atlantis is not a valid location
```

## What this package does not include

It has no runnable client or server and installs no commands. It also has no
game loop that reads console commands and connects them to the broker. These
modules are the pieces such programs would be built from.