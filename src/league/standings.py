"""
League table calculation.
"""
from typing import List

from league.models import Match, StandingsRow, Team, resolve_teams, teams_by_id

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


def compute_standings(teams: List[Team], matches: List[Match]) -> List[StandingsRow]:
    """
    Calculate the league table from match scores.

    Returns one row per team with matches played, wins, draws, losses,
    goals for/against, goal difference and points (3 for a win, 1 for a
    draw). Matches that reference a team missing from ``teams`` are skipped.

    Ranking: points -> goal difference -> goals for. Remaining ties keep the
    order of ``teams`` (the sort is stable).
    """
    index = teams_by_id(teams)
    team_stats = {}
    for team in teams:
        team_stats[team.id] = StandingsRow(team.id)

    for match in matches:
        if resolve_teams(index, match.home_id, match.away_id) is None:
            continue

        home = team_stats[match.home_id]
        away = team_stats[match.away_id]
        home_goals = match.home_score
        away_goals = match.away_score

        home.matches_played += 1
        away.matches_played += 1
        home.goals_for += home_goals
        home.goals_against += away_goals
        away.goals_for += away_goals
        away.goals_against += home_goals

        if home_goals > away_goals:
            home.wins += 1
            away.losses += 1
            home.points += POINTS_FOR_WIN
        elif away_goals > home_goals:
            away.wins += 1
            home.losses += 1
            away.points += POINTS_FOR_WIN
        else:
            home.draws += 1
            away.draws += 1
            home.points += POINTS_FOR_DRAW
            away.points += POINTS_FOR_DRAW

    for row in team_stats.values():
        row.goal_difference = row.goals_for - row.goals_against

    return sorted(
        team_stats.values(),
        key=lambda row: (-row.points, -row.goal_difference, -row.goals_for)
    )


def rank_teams(teams: List[Team], matches: List[Match]) -> List[Team]:
    """Teams in league table order."""
    index = teams_by_id(teams)
    return [index[row.team_id] for row in compute_standings(teams, matches)]
