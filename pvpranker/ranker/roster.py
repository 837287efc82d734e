"""Roster construction: eligibility, moveset seeding and overrides."""

from __future__ import annotations

from pvpranker.gamemaster import GameMaster
from pvpranker.logging import get_logger
from pvpranker.models import Cup, CupFilter, FilterType, Move, OverrideSet, RankingEntry, Species
from pvpranker.ranker.models import Contestant, Roster
from pvpranker.ranker.stats import compute_stats

log = get_logger(__name__)

# Minimum stat product per bracket; unlisted brackets use the default
MIN_STAT_PRODUCT = {500: 0, 1500: 1370, 2500: 2800}
DEFAULT_MIN_STAT_PRODUCT = 4900

# Brackets below this one exclude BANNED_SPECIES
BAN_BRACKET_LIMIT = 2500

BANNED_SPECIES = frozenset({
    "mewtwo", "mewtwo_armored", "giratina_altered", "groudon", "kyogre",
    "palkia", "dialga", "cobalion", "terrakion", "virizion", "tornadus_therian",
    "landorus_therian", "reshiram", "zekrom", "kyurem", "genesect_burn",
    "xerneas", "thundurus_therian", "yveltal", "meloetta_aria", "zacian",
    "zamazenta", "zacian_hero", "zamazenta_hero", "genesect_douse", "zarude",
    "hoopa_unbound", "genesect_shock", "tapu_koko", "tapu_lele", "tapu_bulu",
    "nihilego", "genesect_chill", "solgaleo", "lunala", "keldeo_ordinary",
    "kyogre_primal", "groudon_primal", "zygarde_complete", "enamorus_therian",
    "enamorus_incarnate", "dialga_origin", "palkia_origin", "necrozma",
    "necrozma_dawn_wings", "necrozma_dusk_mane", "marshadow", "kyurem_black",
    "kyurem_white", "zacian_crowned_sword", "zamazenta_crowned_shield",
    "eternatus", "sinistcha", "keldeo_resolute",
})


def min_stat_product(cp: int) -> float:
    return MIN_STAT_PRODUCT.get(cp, DEFAULT_MIN_STAT_PRODUCT)


def is_stat_exempt(contestant: Contestant, cp: int, cup: Cup) -> bool:
    """Whether a contestant may enter below the bracket's stat floor."""
    if cup.include_low_stat_product or contestant.has_tag("mega"):
        return True
    return cp in (1500, 2500, 10000) and contestant.has_tag(f"include{cp}")


def _matches_filter(contestant: Contestant, rule: CupFilter) -> bool:
    if rule.filter_type == FilterType.TYPE:
        return contestant.types[0] in rule.values or contestant.types[1] in rule.values
    if rule.filter_type == FilterType.DEX:
        low, high = int(rule.values[0]), int(rule.values[1])
        return low <= contestant.dex <= high
    if rule.filter_type == FilterType.TAG:
        return any(contestant.has_tag(str(tag)) for tag in rule.values)
    if rule.filter_type == FilterType.MOVE:
        return any(contestant.knows_move(str(move_id)) for move_id in rule.values)
    return False


def _matches_id(contestant: Contestant, rule: CupFilter, normalize: bool) -> bool:
    test_id = contestant.species_id
    if normalize:
        test_id = test_id.replace("_shadow", "").replace("_xs", "")
    return test_id in rule.values or contestant.species_id in rule.values


def check_filters(
    contestant: Contestant,
    include: list[CupFilter],
    exclude: list[CupFilter],
    cp: int,
) -> bool:
    """Decide whether a contestant is eligible under a cup's rules.

    The include list passes when the matched count reaches the required
    count. Rules scoped to other brackets drop out of the required count.
    In a multi-rule include list an ``id`` rule is not required; a hit on it
    counts as matching the whole list and shields the contestant from
    exclusion. Any exclude hit removes the contestant unless that shield is
    active.
    """
    allowed = False
    include_id_matched = False

    for is_include, rules in ((True, include), (False, exclude)):
        matched = 0
        required = len(rules)

        for rule in rules:
            if rule.leagues is not None and cp not in rule.leagues:
                required -= 1
                continue

            if rule.filter_type == FilterType.ID:
                if is_include and len(rules) > 1:
                    required -= 1
                normalize = not is_include or rule.include_shadows
                if _matches_id(contestant, rule, normalize):
                    matched += len(rules)
                    if is_include:
                        include_id_matched = True
            elif _matches_filter(contestant, rule):
                matched += 1

        if is_include and matched >= required:
            allowed = True
        if not is_include and matched > 0 and not include_id_matched:
            allowed = False

    return allowed


def _resolve_pool(gm: GameMaster, move_ids: list[str]) -> list[Move]:
    moves = []
    for move_id in move_ids:
        move = gm.get_move(move_id)
        if move is not None:
            moves.append(move)
    return moves


def build_contestant(gm: GameMaster, species: Species, cp: int, cup: Cup) -> Contestant:
    """Configure a species for a bracket, with an empty moveset."""
    stats, level = compute_stats(species, cp, gm.cpms, cup.level_cap)
    types = (list(species.types) + ["none", "none"])[:2]
    return Contestant(
        species_id=species.species_id,
        species_name=species.species_name,
        dex=species.dex,
        types=types,
        tags=list(species.tags),
        level=level,
        stats=stats,
        fast_move_pool=_resolve_pool(gm, species.fast_moves),
        charged_move_pool=_resolve_pool(gm, species.charged_moves),
    )


def select_fast_move(contestant: Contestant, move_id: str) -> None:
    for move in contestant.fast_move_pool:
        if move.move_id == move_id:
            contestant.fast_move = move
            return
    log.warning("fast_move_not_in_pool", species_id=contestant.species_id, move_id=move_id)


def select_charged_move(contestant: Contestant, move_id: str, slot: int) -> None:
    """Put a charged move into slot 0 or 1; ``"none"`` empties the slot."""
    if move_id == "none":
        contestant.charged_moves[slot] = None
        return
    for move in contestant.charged_move_pool:
        if move.move_id == move_id:
            contestant.charged_moves[slot] = move
            return
    log.warning(
        "charged_move_not_in_pool",
        species_id=contestant.species_id,
        move_id=move_id,
        slot=slot,
    )


def auto_select_moves(contestant: Contestant) -> None:
    """Pick a default moveset from the move pools.

    Fast move: most energy per turn, then most damage per turn.
    Charged moves: most power per energy, cheaper first on ties.
    """
    if contestant.fast_move_pool:
        contestant.fast_move = max(
            contestant.fast_move_pool,
            key=lambda m: (m.energy_gain / m.turn_count, m.power / m.turn_count),
        )

    ranked = sorted(
        contestant.charged_move_pool,
        key=lambda m: (-(m.power / m.energy if m.energy else m.power), m.energy),
    )
    contestant.charged_moves = [None, None]
    for slot, move in enumerate(ranked[:2]):
        contestant.charged_moves[slot] = move


def seed_from_rankings(contestant: Contestant, entry: RankingEntry) -> None:
    """Adopt the most-used moves and the normalized score of a prior ranking."""
    fast = sorted(entry.moves.fast_moves, key=lambda m: m.uses, reverse=True)
    charged = sorted(entry.moves.charged_moves, key=lambda m: m.uses, reverse=True)

    if fast:
        select_fast_move(contestant, fast[0].move_id)
    if charged:
        select_charged_move(contestant, charged[0].move_id, 0)
    if len(charged) > 1:
        select_charged_move(contestant, charged[1].move_id, 1)

    contestant.weight_modifier = entry.score / 100


def apply_overrides(
    contestant: Contestant,
    cp: int,
    cup_name: str,
    overrides: list[OverrideSet],
) -> None:
    """Apply the first override for this bracket, cup and species."""
    for override_set in overrides:
        if override_set.league != cp or override_set.cup != cup_name:
            continue
        for override in override_set.pokemon:
            if override.species_id != contestant.species_id:
                continue
            if override.fast_move:
                select_fast_move(contestant, override.fast_move)
            if override.charged_moves:
                for slot, move_id in enumerate(override.charged_moves[:2]):
                    select_charged_move(contestant, move_id, slot)
                if len(override.charged_moves) < 2:
                    select_charged_move(contestant, "none", 1)
            if override.weight is not None:
                contestant.weight_modifier = override.weight
            break
        break


def build_roster(
    gm: GameMaster,
    cup: Cup,
    cp: int,
    prior_rankings: list[RankingEntry] | None = None,
    overrides: list[OverrideSet] | None = None,
) -> Roster:
    """Build the candidate and target pools for a cup and bracket.

    Args:
        gm: Master data
        cup: Cup rules
        cp: Bracket power cap
        prior_rankings: Earlier overall rankings used to seed movesets and weights
        overrides: Moveset/weight overrides for this cup and bracket

    Returns:
        Roster whose candidate order follows the gamemaster's species order
    """
    overrides = overrides or []
    prior = {entry.species_id: entry for entry in prior_rankings or []}
    floor = min_stat_product(cp)

    roster = Roster()

    for species in gm.species:
        contestant = build_contestant(gm, species, cp, cup)

        if contestant.stat_product < floor and not is_stat_exempt(contestant, cp, cup):
            continue
        if not species.released:
            continue
        if cp < BAN_BRACKET_LIMIT and species.species_id in BANNED_SPECIES:
            continue
        if not check_filters(contestant, cup.include, cup.exclude, cp):
            continue

        entry = prior.get(species.species_id)
        if entry is not None and (entry.moves.fast_moves or entry.moves.charged_moves):
            seed_from_rankings(contestant, entry)
        else:
            auto_select_moves(contestant)

        apply_overrides(contestant, cp, cup.name, overrides)

        roster.candidates.append(contestant)
        if not cup.filter_targets or contestant.weight_modifier > 1:
            roster.target_positions.append(len(roster.candidates) - 1)

    log.info(
        "roster_built",
        cup=cup.name,
        cp=cp,
        candidates=len(roster.candidates),
        targets=len(roster.target_positions),
    )
    return roster
