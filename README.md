# hab

A terminal habit tracker that shows your habits as contribution-style grids.
Each day is a cell, marked by how much of that day's target you reached.

## Install

    pip install .

This installs the `hab` command.

## Usage

Create a habit. If you leave out the color or the daily target you are asked
for them (an empty answer gives `green` and `1`). With no name at all you are
asked for one, and the key is made from it in lower case with spaces turned
into underscores.

    hab new exercise
    hab new --color red exercise
    hab new --target 2 brushing

Valid colors are red, blue, green, magenta, cyan and yellow.

Log an entry for today, or for a given `YYYY-MM-DD` day. The current streak is
shown afterwards when there is one.

    hab exercise
    hab add exercise
    hab add exercise 2025-01-15
    hab add exercise --date 2025-01-15

Look at your habits:

    hab list              # every habit with totals, unique days and streak
    hab stats exercise    # one habit in detail, with a completion rate
                          # when the target is above 1 per day

Open the interactive grid view (12 months by default):

    hab
    hab -i
    hab -t 3m             # also 3, 6m, 6, 12m, 12, 1y, y
    hab --timeline 6m
    hab --no-legend

Tidy up:

    hab prune --dry-run      # show entries above each day's target
    hab prune exercise       # remove them for one habit, after confirmation
    hab prune --force        # remove them everywhere without asking
    hab delete exercise      # delete a habit, after confirmation
    hab delete exercise -f   # delete without confirmation

`hab --version` prints the installed version.

## Interactive keys

In the grid views:

| Key                  | Action                                   |
|----------------------|------------------------------------------|
| `tab`                | switch to habit selection                |
| `1`–`9`              | open a habit from the all-habits view    |
| `↑`/`k`, `↓`/`j`     | move between habits in the single view   |
| `enter` / space      | log an entry for today in the single view|
| `a`                  | back to all habits                       |
| `ctrl+6`, `ctrl+y`   | 6 or 12 month timeline                   |
| `l`                  | toggle the legend                        |
| `?`                  | toggle help                              |
| `q`, `ctrl+c`        | quit                                     |

In habit selection, `↑`/`↓` (or `k`/`j`) move, `home`/`g` and `end`/`G` jump,
`/` starts filtering by name, `enter` opens the chosen habit and `esc` goes
back.

The help lists `ctrl+3` for the 3 month timeline, but most terminals send the
same byte for it as for `esc`, so in practice start with `hab -t 3m` instead.

## Data

Habits are stored as JSON. The file is `$HAB_DATA_FILE` when set; otherwise
`hab/data/activities.json` under the platform's configuration directory
(`$XDG_CONFIG_HOME` or `~/.config` on Linux, `~/Library/Application Support`
on macOS, `%APPDATA%` on Windows), or `data/activities.json` in the current
directory when no home directory is known. The file and its directory are
created on first use.

Set `HAB_RENDERING` to `ascii`, `extended` or `unicode` to choose the grid
characters (otherwise they are guessed from `TERM`, `LANG` and `LC_ALL`), and
`HAB_DEBUG=true` to show which set is in use.

## Library use

The modules can be used directly:

- `hab.store` — `HabitManager` (load, save, create, add or remove entries,
  update, delete, `get_stats`), `Activity`, `HabitStats`, `current_streak`,
  `default_data_path`, `HabitError`.
- `hab.grid` — `generate_grid`, `cell_char`, `cell_color`, `color_code`,
  `parse_timeline`, `timeline_label`, `detect_rendering_level`,
  `Timeline`, `RenderingLevel`.
- `hab.actions` — the commands as functions (`add_entry`, `delete_habit`,
  `list_habits`, `new_habit`, `prune_habit`, `prune_habits`, `show_stats`)
  that write to a given stream and raise `CommandError`.
- `hab.tui` — `TrackerModel` (key handling and text rendering) and `run_tui`.
- `hab.cli` — `main(argv=None)`, returning the exit status.

## Limits

There is no command to rename a habit or change its color or target; that is
only available as `HabitManager.update_activity`.

## Development

    pip install -e ".[test]"
    pytest