# groupbot

Building blocks for a group chat bot. Each module covers one feature and
keeps its state in plain files or SQLite databases; you match the chat
commands and deliver the replies through whatever chat transport you use.

## Features

- **Reminders** (`groupbot.timerspec`, `groupbot.timerparse`,
  `groupbot.wakeup`, `groupbot.cron`, `groupbot.clock`): reminders such as
  "在十二月每周的八点三十分时提醒大家…" or five-field cron expressions, stored
  in SQLite and delivered through a callback you supply.
- **Group management** (`groupbot.manager`): mute durations, welcome and
  farewell templates, join-verification and gist-approval flags, gist based
  join checks and a "lucky member" pick.
- **Gacha** (`groupbot.genshin`): ten-pull draws from a zipped asset pack,
  rendered into a single picture with Pillow.
- **Daily fortune** (`groupbot.fortune`): fortune slips drawn over a themed
  background and saved as JPEG.
- **Slacking calendar** (`groupbot.moyu`): countdowns to the weekend and to
  public holidays.
- **Hyakunin Isshu** (`groupbot.hyaku`): the hundred poems loaded from CSV.
- **Image rating** (`groupbot.nsfw`): turns classifier scores into a verdict.
- **GitHub search** (`groupbot.github`): finds a repository and formats a
  summary of it.
- **Group wife** (`groupbot.qqwife`, `groupbot.nativewife`): daily pairings
  among active members and per-group picture galleries.
- **Picture, fortune-slip and joke stores** (`groupbot.jandan`,
  `groupbot.omikuji`, `groupbot.funny`): small SQLite-backed collections.
- **Local image library** (`groupbot.nativesetu`): scans picture folders into
  classes keyed by a difference hash.

## Reminders

Build a timer from the pieces a reminder command matched (month, day or
week, hour, minute, optional `用<url>`, alert text), then hand it to a clock.
Out-of-range parts raise `ValueError` with a message such as `"月份非法！"`.

```python
from groupbot.timerparse import chinese_num_to_int, filled_timer
from groupbot.clock import Clock

chinese_num_to_int("十二")  # 12

timer = filled_timer(
    ["", "12", "每周", "八", "三十", "", "time to stretch"],
    bot_id=0,
    group_id=1234,
    match_date_only=False,
)

def send(self_id, group_id, message):
    # message is a list of segments: @all, the alert text and an optional image
    print(self_id, group_id, message)

clock = Clock("reminders.db", send)
clock.register_timer(timer, save=True)
print(clock.list_timers(1234))
clock.cancel_timer(timer.id)
clock.close()
```

Timers stored in the database are scheduled again when a `Clock` is opened
on it. Each running timer waits in a background thread. Cron reminders are
built with `filled_cron_timer`, and `groupbot.cron.CronSchedule` can be used
on its own:

```python
from datetime import datetime
from groupbot.cron import CronSchedule

schedule = CronSchedule("30 8 * * *")
print(schedule.next_after(datetime.now()))
```

## Group management

```python
from groupbot.manager import ManagerStore, parse_ban_minutes, render_welcome

parse_ban_minutes(2, "小时")  # 120; anything a month or longer becomes 43199

store = ManagerStore("manager.db")
store.set_welcome(1234, "欢迎 {at}，来到 {groupname}！")
print(render_welcome(store.welcome(1234), 10001, "Alice", 1234, "Demo group"))
store.close()
```

`check_new_user` fetches the applicant's gist (with `requests` unless you
pass your own `fetch`) and approves it when the timestamp inside is less than
ten minutes old.

## Draws and daily amusements

```python
from datetime import date, datetime
from random import Random

from groupbot.genshin import GachaArchive
from groupbot.moyu import daily_message, parse_holiday
from groupbot.nsfw import Scores, judge
from groupbot.qqwife import WifeRegistry

with GachaArchive("Genshin.zip") as pack:
    result = pack.draw(10, store=0, rng=Random())
    pack.render(result).save("pull.png")
    print(result.text)

holidays = [parse_holiday("春节", "7_2023_1_21")]
print(daily_message(datetime.now(), holidays))

print(judge(Scores(drawings=0.8, hentai=0.5)))

registry = WifeRegistry()
members = [{"user_id": 1, "last_sent_time": 10}, {"user_id": 2, "last_sent_time": 20}]
print(registry.marry(1234, 1, members, date.today()))
```

`groupbot.fortune` lays out and draws a slip (`draw_fortune`) given a
background from a theme archive (`pick_background`) and a TrueType font;
`groupbot.hyaku.load_poems` reads the hundred poems from a CSV file.

## Stores

The SQLite-backed stores share the same shape: open them with a path, use
them, and close them (or use them as context managers).

```python
from groupbot.jandan import PictureStore

with PictureStore("pics.db") as pictures:
    pictures.add("https://example.com/a.jpg")
    print(pictures.count(), pictures.random())
```

## What the package does not do

- It does not connect to a chat service, read messages or match commands;
  your code calls these functions and sends the replies.
- It does not download data: asset packs, theme archives, fonts, the poem
  CSV, the joke and slip databases and holiday dates must be supplied by you.
  Only `groupbot.github` and `groupbot.manager.check_new_user` make HTTP
  requests.

## Tests

The test suite uses pytest and is installed with the `test` extra.