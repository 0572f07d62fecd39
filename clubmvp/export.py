"""Write season leaderboards to CSV and Excel."""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

import openpyxl
import polars as pl
from openpyxl.styles import Font

from .models import PlayerTotals, TeamTotals

logger = logging.getLogger('clubmvp.export')

PLAYER_COLUMNS = ['player_id', 'bat', 'bowl', 'field', 'total', 'matches']
TEAM_COLUMNS = ['team_id', 'bat', 'bowl', 'field', 'total']


def players_frame(players: Sequence[PlayerTotals]) -> pl.DataFrame:
    """Player leaderboard as a DataFrame, with a 1-based rank column."""
    df = pl.DataFrame(
        [asdict(p) for p in players],
        schema={
            'player_id': pl.Utf8,
            'bat': pl.Float64,
            'bowl': pl.Float64,
            'field': pl.Float64,
            'total': pl.Float64,
            'matches': pl.Int64,
        },
    )
    return df.with_row_index('rank', offset=1)


def write_leaderboard_csv(path: str | Path, players: Sequence[PlayerTotals]) -> Path:
    """Write the player leaderboard to a CSV file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    players_frame(players).write_csv(path)
    logger.info(f'Wrote {len(players)} players to {path}')
    return path


def _write_sheet(ws, columns: list[str], rows: list[dict]) -> None:
    for col_idx, name in enumerate(['rank'] + columns, start=1):
        ws.cell(row=1, column=col_idx, value=name).font = Font(bold=True)
    for row_idx, row in enumerate(rows, start=2):
        ws.cell(row=row_idx, column=1, value=row_idx - 1)
        for col_idx, name in enumerate(columns, start=2):
            ws.cell(row=row_idx, column=col_idx, value=row[name])


def write_leaderboard_excel(
    path: str | Path,
    players: Sequence[PlayerTotals],
    teams: Sequence[TeamTotals],
) -> Path:
    """
    Write player and team leaderboards to an .xlsx workbook.

    Sheets:
        Players - rank, player_id, bat, bowl, field, total, matches
        Teams   - rank, team_id, bat, bowl, field, total
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Players'
    _write_sheet(ws, PLAYER_COLUMNS, [asdict(p) for p in players])
    _write_sheet(wb.create_sheet('Teams'), TEAM_COLUMNS, [asdict(t) for t in teams])

    wb.save(str(path))
    logger.info(f'Wrote {len(players)} players and {len(teams)} teams to {path}')
    return path
