# hexclash

A small multiplayer strategy game played over TCP. Each player owns cells on
a hexagonal field (odd rows are shifted to the right). On your turn you first
**attack** neighbouring cells from your own, then **feed** your cells with
food equal to the total size of everything you own, and then pass the turn to
the next player. Players can also chat with each other.

## Installing

```
pip install .
```

The package has no dependencies outside the standard library.

## Rules in short

- A cell has a size, an owner and a capacity (8 by default).
- A new player gets a nest: the first empty cell on the field, with size 2.
- Attacking from a cell of size greater than 1 moves all but one unit
  against a neighbouring cell you do not own. An unowned target is simply
  taken; otherwise the two sizes cancel out, and if the attacker had more,
  the cell changes hands.
- Feeding grows one of your cells by one, up to its capacity, and costs one
  unit of food.

The client checks these rules before it sends a command; the server applies
the moves it receives and broadcasts the changed cells to every player.

## Playing from the console

Start a game and play it yourself:

```
hexclash-console [nickname] [address]
```

With an address, the client joins the server running there. Without one, it
starts a server of its own on this machine with a 4x4 field (by running
`python -m hexclash.host` in a new process) and joins it. The nickname
defaults to `_console_player`.

While it is your turn the console offers a menu:

```
 0 = disconnect
 1 = attack...        (feed... in the second phase)
 2 = stop attacking   (end turn in the second phase)
 3 = show field
 4 = show players
 5 = send message
```

Positions are entered as `y x`. Chat messages from other players are printed
as they arrive.

## Running a server on its own

```
hexclash-host <height> <width>
```

Both sizes must be positive numbers. The server listens on TCP port 5990,
waits for the first player to join, and keeps running for as long as at
least one player is connected. It logs joins, leaves and incoming messages
to standard error and prints `Server shutdown` when it stops.

## Using it as a library

```python
import time

from hexclash.client import Client
from hexclash.game import Phase, Vec

with Client("alice") as client:
    if client.connect("127.0.0.1"):
        while client.phase() is Phase.WAIT:
            time.sleep(1)
        print(client.field())
        client.attack(Vec(0, 0), Vec(1, 0))
        client.next_phase()          # ATTACK -> FEED
        client.feed(Vec(0, 0))
        client.next_phase()          # FEED -> WAIT, passes the turn
```

- `hexclash.client.Client` joins a server (`connect`), or starts one and
  joins it (`host`). A background thread keeps its field, player list,
  current turn and chat history (`messages`) up to date. Game commands
  raise `ClientDisconnected` when there is no live connection.
- `hexclash.server.Server` hosts one game: `accept_first()` waits for the
  first player, `start()` serves the game in a background thread, and
  `busy()` tells whether anyone is still seated. It raises `ListenerError`
  when it cannot listen on its port.
- `hexclash.game` holds `Phase`, `Vec`, `PlayerData`, `Cell` and `Field`.
- `hexclash.packet` and `hexclash.protocol` describe the wire format: every
  packet is preceded by its size as a big-endian 32-bit integer, and starts
  with a `MsgType` (and, for updates, an `UpdType`).

The `hexclash.legacy` package contains an earlier acknowledgement-based
protocol: its primitives (`hexclash.legacy.primitives`), `ChatterBox`, a
socket wrapper that sends and receives packets in background threads, and a
`Client` that joins, fights, feeds and applies updates.

## What it does not do

- There is no graphical interface; the game is played from the text console
  or through the library.
- There is no server for the earlier protocol in `hexclash.legacy`; its
  client needs a server of that protocol to talk to.

## Running the tests

```
pip install .[test]
pytest
```