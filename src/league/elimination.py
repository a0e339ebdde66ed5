"""
Single elimination bracket generation and management.
"""
import logging
from typing import Dict, List, Optional

from league.errors import ValidationError
from league.ids import new_id
from league.models import Bracket, BracketNode, Match, Team, teams_by_id
from league.schedule import set_score
from league.standings import rank_teams

logger = logging.getLogger(__name__)

MAX_BRACKET_SLOTS = 16
PLACEHOLDER_NAME = 'TBD'

STATE_EMPTY = 'empty'
STATE_SEEDED = 'seeded'
STATE_PARTIALLY_ADVANCED = 'partially_advanced'
STATE_COMPLETE = 'complete'


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int, max_slots: int = MAX_BRACKET_SLOTS) -> int:
    """
    Calculate the bracket size: the largest power of 2 that fits both the
    number of teams and ``max_slots``. Teams beyond it do not qualify.
    """
    if num_teams < 2 or max_slots < 2:
        return 0
    size = 2
    while size * 2 <= num_teams and size * 2 <= max_slots:
        size *= 2
    return size


def seed_bracket(ranked_teams: List[Team], max_slots: int = MAX_BRACKET_SLOTS,
                 id_factory=new_id) -> Bracket:
    """
    Seed a knockout bracket from teams in ranking order.

    The top ``calculate_bracket_size`` teams qualify. First round pairs are
    positional: rank 1 plays rank 2, rank 3 plays rank 4, and so on. This is
    not the usual 1 vs N seeding.

    Later rounds are placeholder nodes with no teams, halving down to a
    single final.
    """
    if len(ranked_teams) < 2:
        raise ValidationError('At least 2 teams are needed to generate a bracket')

    size = calculate_bracket_size(len(ranked_teams), max_slots)
    qualified = ranked_teams[:size]

    first_round = []
    for i in range(0, size, 2):
        first_round.append(BracketNode(
            id=id_factory(),
            home_id=qualified[i].id,
            away_id=qualified[i + 1].id,
        ))

    rounds = [first_round]
    nodes_in_round = len(first_round) // 2
    while nodes_in_round >= 1:
        rounds.append([BracketNode(id=id_factory()) for _ in range(nodes_in_round)])
        nodes_in_round //= 2

    logger.info('Seeded %d-team bracket with %d rounds (%d teams left out)',
                size, len(rounds), len(ranked_teams) - size)
    return Bracket(rounds=rounds)


def seed_bracket_from_standings(teams: List[Team], matches: List[Match],
                                max_slots: int = MAX_BRACKET_SLOTS, id_factory=new_id) -> Bracket:
    """Seed the bracket from the league table."""
    return seed_bracket(rank_teams(teams, matches), max_slots=max_slots, id_factory=id_factory)


def node_winner(node: BracketNode) -> Optional[str]:
    """
    Winner of a knockout node, or None while undecided.

    A node needs both teams and a non-drawn score. A draw has no tie-break,
    so a drawn node stays undecided until a score changes.
    """
    if node.home_id is None or node.away_id is None:
        return None
    if node.home_score > node.away_score:
        return node.home_id
    if node.away_score > node.home_score:
        return node.away_id
    return None


def _round_winners(round_nodes: List[BracketNode]) -> Optional[List[str]]:
    winners = [node_winner(node) for node in round_nodes]
    if not winners or any(w is None for w in winners):
        return None
    return winners


def advance_bracket(bracket: Bracket) -> int:
    """
    Move winners of every fully decided round into the next round.

    Node k of round r+1 takes the winners of nodes 2k (home) and 2k+1 (away)
    of round r. A node is only written when its teams change, and writing it
    resets its scores to 0, so calling this again without new results
    changes nothing. Every later node a rewritten node feeds is cleared back
    to a placeholder, so a team knocked out by a corrected result cannot
    stay further down the bracket.

    Mutates ``bracket`` in place and returns the number of nodes updated.
    """
    updated = 0
    for round_idx in range(len(bracket.rounds) - 1):
        winners = _round_winners(bracket.rounds[round_idx])
        if winners is None:
            continue
        for k, node in enumerate(bracket.rounds[round_idx + 1]):
            if 2 * k + 1 >= len(winners):
                break
            home_id, away_id = winners[2 * k], winners[2 * k + 1]
            if node.home_id == home_id and node.away_id == away_id:
                continue
            node.home_id = home_id
            node.away_id = away_id
            node.home_score = 0
            node.away_score = 0
            updated += 1
            logger.debug('Advanced %s and %s into round %d', home_id, away_id, round_idx + 2)
            updated += _clear_downstream(bracket, round_idx + 1, k)
    return updated


def _clear_downstream(bracket: Bracket, round_idx: int, node_idx: int) -> int:
    """Reset the nodes fed by node ``node_idx`` of ``round_idx`` in every later round."""
    cleared = 0
    for later_idx in range(round_idx + 1, len(bracket.rounds)):
        node_idx //= 2
        later_round = bracket.rounds[later_idx]
        if node_idx >= len(later_round):
            break
        node = later_round[node_idx]
        if node.home_id is None and node.away_id is None and node.home_score == 0 and node.away_score == 0:
            continue
        node.home_id = None
        node.away_id = None
        node.home_score = 0
        node.away_score = 0
        cleared += 1
    if cleared:
        logger.debug('Cleared %d later bracket nodes after round %d changed', cleared, round_idx + 1)
    return cleared


def record_bracket_score(bracket: Bracket, node_id: str, side: str, value) -> BracketNode:
    """Set a knockout score, then propagate any newly decided winners."""
    node = bracket.find_node(node_id)
    if node is None:
        raise ValidationError(f'Bracket match "{node_id}" not found')
    set_score(node, side, value)
    advance_bracket(bracket)
    return node


def bracket_champion(bracket: Bracket) -> Optional[str]:
    if not bracket.rounds or len(bracket.rounds[-1]) != 1:
        return None
    return node_winner(bracket.rounds[-1][0])


def bracket_state(bracket: Bracket) -> str:
    """
    Where the bracket is in its lifecycle:
    empty -> seeded -> partially_advanced -> complete.
    """
    if not bracket.rounds:
        return STATE_EMPTY
    if bracket_champion(bracket) is not None:
        return STATE_COMPLETE
    for round_nodes in bracket.rounds[1:]:
        if any(node.home_id is not None or node.away_id is not None for node in round_nodes):
            return STATE_PARTIALLY_ADVANCED
    return STATE_SEEDED


def get_bracket_display(bracket: Bracket, teams: List[Team]) -> Dict:
    """
    Get bracket data formatted for display, with team names resolved.
    Placeholders and deleted teams show as TBD.
    """
    index = teams_by_id(teams)

    def _side(team_id):
        team = index.get(team_id)
        if team is None:
            return {'id': team_id, 'name': PLACEHOLDER_NAME, 'logo': ''}
        return {'id': team.id, 'name': team.name, 'logo': team.logo}

    rounds = []
    for round_nodes in bracket.rounds:
        matches = []
        for node in round_nodes:
            matches.append({
                'id': node.id,
                'home': _side(node.home_id),
                'away': _side(node.away_id),
                'home_score': node.home_score,
                'away_score': node.away_score,
                'winner': node_winner(node),
            })
        rounds.append({
            'name': get_round_name(len(round_nodes) * 2),
            'matches': matches,
        })

    return {
        'state': bracket_state(bracket),
        'champion': bracket_champion(bracket),
        'rounds': rounds,
    }
