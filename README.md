# relaychat

A small multi-user text chat server. Clients connect over plain TCP (for
example with `nc` or `telnet`), pick a nickname, join channels and exchange
messages with a channel or with a single user. Every line a client sends is
one message or one command.

## Installing

```
pip install .
```

## Running

```
relaychat
```

`python -m relaychat.cli` does the same. Without options the server starts
with its built-in defaults: port 4040, up to 2000 users, up to 1000 channels,
server name `Test-Server` and the message of the day
`Welcome to test Server!`.

To load settings from a file:

```
relaychat --configpath server.conf
```

`-cp` is a short form of `--configpath`, and `-h` / `--help` prints the
usage. Any other argument is an error (exit status 1). Ctrl+C or SIGTERM
stops the server; it then closes every client connection and exits with
status 0. A configuration or startup error is printed and the exit status
is 1.

## Configuration file

The file holds one `key = value` pair per line. Blank lines and lines that
start with `#` are ignored; lines without `=` or with an empty key are
skipped with a logged warning. All of these keys are required:

```
# server.conf
port = 4040
maxusers = 2000
maxchannels = 1000
servername = My-Server
motd = Welcome, be nice!
```

Limits: `port` from 1024 to 65535, `maxusers` from 1 to 10000,
`maxchannels` from 0 to 1000, and `servername` may not be empty. A file that
cannot be read, holds no entries, lacks a key or has a value out of range
makes `Server` raise `ServerError`.

## Chat commands

Lines starting with `/` are commands; any other line goes to your active
channel (the one you joined last, until you leave it). A new client is
greeted and starts with the nickname `guest<n>`.

| Command                        | Meaning                                   |
|--------------------------------|-------------------------------------------|
| `/nick <name>`                 | Change your nickname                      |
| `/join <#channel>`             | Join a channel and make it active         |
| `/part <#channel>`             | Leave a channel                           |
| `/msg <#channel\|user> <text>` | Send to a channel or privately to a user  |
| `/list`                        | List active channels with member counts   |
| `/who [#channel]`              | List users on the server or in a channel  |
| `/motd`                        | Show the message of the day               |
| `/quit [message]`              | Disconnect                                |
| `/help`                        | Show the command list                     |

Nicknames are 1 to 32 ASCII letters, digits or underscores and must be
unique. Channel names start with `#`, are at most 50 characters long and
hold only visible ASCII characters other than commas; the `#` may be left
out in `/join`, `/part` and `/who`. Joining a channel that does not exist
creates it, as long as the channel limit is not reached. Server notices
begin with `*** `.

## Using it from Python

```python
from relaychat.server import Server

with Server("server.conf") as server:
    server.start()          # blocks until stop() is called from elsewhere
```

`Server()` without an argument uses the defaults listed above. `stop()`
ends the accept loop and drops every client; `close()` (called when the
`with` block ends) also waits for the worker threads. `running` tells
whether the accept loop is active, and `stats()` returns a `ServerStats`
snapshot with active and total connections, bytes received and sent, and
the number of busy workers and pending tasks.

The parts the server is built from can be used on their own:

- `relaychat.config.read_config(path)` — reads a configuration file into a
  dict sorted by key.
- `relaychat.client.Client` — one client's nickname, channels, input buffer
  and output queue.
- `relaychat.channel.Channel` and `relaychat.channel_manager.ChannelManager`
  — channels, their members and `is_valid_channel_name()`.
- `relaychat.client_manager.ClientManager` — registered clients by identity
  and nickname, and `is_valid_nickname()`.
- `relaychat.message_manager.MessageManager` — dispatches lines and slash
  commands; `register_command(name, handler)` adds or replaces a command.
- `relaychat.thread_pool.ThreadPool` — a fixed-size worker pool with a
  bounded queue of 5000 tasks.

## What it does not do

relaychat speaks its own simple line protocol, not IRC. It has no
authentication, no encryption, no channel operators or modes, and keeps
nothing on disk: nicknames, channels and messages exist only while the
server runs.