"""Constants and mappings for the clubmvp scoring engine."""

# Dismissal strings that mean the batter was not out (or never batted).
# Compared lower-cased and stripped.
NOT_OUT_DISMISSALS = frozenset({
    '',
    'did not bat',
    'dnb',
    'not out',
    'no',
    'retired not out',
    'retired hurt',
    'absent',
})

DID_NOT_BAT = 'did not bat'

# Point event metric names
BATTING_TOTAL = 'batting_total'
BOWLING_TOTAL = 'bowling_total'

# Fielding metric -> (card stat, rule field)
FIELDING_METRICS = {
    'catch': ('catches', 'catch'),
    'stumping': ('stumpings', 'stumping'),
    'runout': ('runouts', 'runout'),
    'drop_penalty': ('drops', 'drop_penalty'),
    'misfield': ('misfields', 'misfield_penalty'),
}

# Leaderboard grouping of metrics
METRIC_GROUPS = {
    BATTING_TOTAL: 'bat',
    BOWLING_TOTAL: 'bowl',
    'catch': 'field',
    'stumping': 'field',
    'runout': 'field',
    'drop_penalty': 'field',
    'misfield': 'field',
}

DEFAULT_INSERT_BATCH_SIZE = 500

BALLS_PER_OVER = 6
